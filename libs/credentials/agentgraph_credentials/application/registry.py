import logging

from agentgraph_common.exceptions.errors import CredentialStoreError

from agentgraph_credentials.domain.interfaces import CredentialStore

logger = logging.getLogger(__name__)


class CredentialStoreRegistry:
    """Credential stores keyed by id. Adding a store with a known id replaces it."""

    def __init__(self, stores: list[CredentialStore] | None = None):
        self._stores: dict[str, CredentialStore] = {}
        for store in stores or []:
            self.add(store)

    def add(self, store: CredentialStore) -> None:
        if store.id in self._stores:
            logger.warning(f"Replacing credential store '{store.id}'")
        self._stores[store.id] = store

    def get(self, store_id: str) -> CredentialStore | None:
        return self._stores.get(store_id)

    def get_or_raise(self, store_id: str) -> CredentialStore:
        store = self._stores.get(store_id)
        if store is None:
            raise CredentialStoreError(
                f"Credential store '{store_id}' is not registered", store_id=store_id
            )
        return store

    def has(self, store_id: str) -> bool:
        return store_id in self._stores

    def remove(self, store_id: str) -> bool:
        return self._stores.pop(store_id, None) is not None

    def get_all(self) -> list[CredentialStore]:
        return list(self._stores.values())

    def get_ids(self) -> list[str]:
        return list(self._stores)

    def get_by_type(self, store_type: str) -> list[CredentialStore]:
        return [store for store in self._stores.values() if store.type == store_type]
