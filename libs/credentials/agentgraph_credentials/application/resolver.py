import logging

from agentgraph_common.exceptions.errors import CredentialStoreError
from sqlalchemy.exc import SQLAlchemyError

from agentgraph_credentials.domain.models import CredentialReference

from .registry import CredentialStoreRegistry

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Looks up the secret behind a credential reference.

    Resolution never fails the caller: a missing store, a missing key or a
    store error all resolve to ``None`` and are logged.
    """

    def __init__(self, registry: CredentialStoreRegistry):
        self.registry = registry

    @staticmethod
    def lookup_key(reference: CredentialReference) -> str:
        params = reference.retrieval_params or {}
        return str(params.get("key") or reference.id)

    async def resolve(self, reference: CredentialReference) -> str | None:
        store = self.registry.get(reference.credential_store_id)
        if store is None:
            logger.warning(
                f"Credential store '{reference.credential_store_id}' not found",
                extra={"credential_reference_id": reference.id},
            )
            return None

        key = self.lookup_key(reference)
        try:
            value = await store.get(key)
        except (CredentialStoreError, SQLAlchemyError) as e:
            logger.error(
                f"Failed to resolve credential '{reference.id}' from store '{store.id}': {e}",
                extra={"credential_reference_id": reference.id},
            )
            return None

        if value is None:
            logger.warning(
                f"Credential key '{key}' not found in store '{store.id}'",
                extra={"credential_reference_id": reference.id},
            )
        return value

    async def discard(self, reference: CredentialReference) -> bool:
        """Remove the secret behind ``reference`` from its store.

        A store failure is logged and reported as False so the reference
        itself can still be deleted.
        """
        store = self.registry.get(reference.credential_store_id)
        if store is None or not reference.retrieval_params:
            return False
        try:
            return await store.delete(self.lookup_key(reference))
        except (CredentialStoreError, SQLAlchemyError) as e:
            logger.error(
                f"Failed to delete credential from store '{store.id}': {e}",
                extra={"credential_reference_id": reference.id},
            )
            return False
