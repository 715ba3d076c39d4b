from agentgraph_credentials.domain.interfaces import CredentialStore, CredentialStoreType


class InMemoryCredentialStore(CredentialStore):
    """Process-local store for development and tests. Values are lost on restart."""

    def __init__(self, store_id: str = "memory-default"):
        super().__init__(store_id)
        self._credentials: dict[str, str] = {}

    @property
    def type(self) -> str:
        return CredentialStoreType.MEMORY

    async def get(self, key: str) -> str | None:
        return self._credentials.get(key)

    async def set(self, key: str, value: str) -> None:
        self._credentials[key] = value

    async def has(self, key: str) -> bool:
        return key in self._credentials

    async def delete(self, key: str) -> bool:
        return self._credentials.pop(key, None) is not None

    def clear(self) -> None:
        self._credentials.clear()
