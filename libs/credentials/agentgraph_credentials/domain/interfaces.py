from abc import ABC, abstractmethod


class CredentialStoreType:
    MEMORY = "memory"
    DATABASE = "database"


class CredentialStore(ABC):
    """Key/value secret store addressed by credential references."""

    def __init__(self, store_id: str):
        self._id = store_id

    @property
    def id(self) -> str:
        return self._id

    @property
    @abstractmethod
    def type(self) -> str:
        pass

    @abstractmethod
    async def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def has(self, key: str) -> bool:
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass
