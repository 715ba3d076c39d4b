import logging

from agentgraph_common.base.pagination import Pagination
from agentgraph_common.base.schemas import model_from_row
from agentgraph_common.exceptions.errors import ResourceConflict
from agentgraph_common.infrastructure.database import DatabaseSession
from agentgraph_common.scopes.dependencies import ProjectScopeDep
from agentgraph_credentials.application.resolver import CredentialResolver
from agentgraph_credentials.domain.schemas import (
    CredentialReferenceDefinition,
    CredentialReferenceUpdate,
)
from agentgraph_credentials.infrastructure.repository import CredentialReferenceRepository
from fastapi import APIRouter, Query, status

from agentgraph_api.api.deps import CredentialStoreRegistryDep
from agentgraph_api.api.schemas import (
    CredentialReferenceResponse,
    CredentialStoreStatus,
    CredentialValue,
    DataResponse,
    ListResponse,
    changed_values,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/credentials", tags=["credentials"])
stores_router = APIRouter(prefix="/credential-stores", tags=["credentials"])


def _to_response(reference) -> CredentialReferenceResponse:
    return model_from_row(CredentialReferenceResponse, reference)


@router.get("", response_model=ListResponse[CredentialReferenceResponse])
async def list_credential_references(
    session: DatabaseSession,
    scope: ProjectScopeDep,
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
):
    result = await CredentialReferenceRepository(session, scope).list_paginated(
        Pagination.from_params(page, limit)
    )
    return ListResponse.from_result(result, _to_response)


@router.get("/{reference_id}", response_model=DataResponse[CredentialReferenceResponse])
async def get_credential_reference(
    reference_id: str, session: DatabaseSession, scope: ProjectScopeDep
):
    reference = await CredentialReferenceRepository(session, scope).get_by_id_or_raise(
        reference_id
    )
    return DataResponse(data=_to_response(reference))


@router.post(
    "",
    response_model=DataResponse[CredentialReferenceResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_credential_reference(
    data: CredentialReferenceDefinition, session: DatabaseSession, scope: ProjectScopeDep
):
    repository = CredentialReferenceRepository(session, scope)
    if await repository.exists(data.id):
        raise ResourceConflict(
            f"Credential reference '{data.id}' already exists",
            resource_type="credential_reference",
            resource_id=data.id,
            scope=scope,
        )
    reference = await repository.create(**data.model_dump())
    return DataResponse(data=_to_response(reference))


@router.patch("/{reference_id}", response_model=DataResponse[CredentialReferenceResponse])
async def update_credential_reference(
    reference_id: str,
    data: CredentialReferenceUpdate,
    session: DatabaseSession,
    scope: ProjectScopeDep,
):
    reference = await CredentialReferenceRepository(session, scope).update_or_raise(
        reference_id, **changed_values(data)
    )
    return DataResponse(data=_to_response(reference))


@router.delete("/{reference_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_credential_reference(
    reference_id: str,
    session: DatabaseSession,
    scope: ProjectScopeDep,
    registry: CredentialStoreRegistryDep,
):
    """Delete a reference and, when its store is available, the secret behind it.

    A failure to remove the secret is logged; the reference is deleted anyway.
    """
    repository = CredentialReferenceRepository(session, scope)
    reference = await repository.get_by_id_or_raise(reference_id)
    if not await CredentialResolver(registry).discard(reference):
        logger.info(
            "No stored secret removed for credential reference",
            extra={"credential_reference_id": reference_id},
        )
    await repository.delete_or_raise(reference_id)


@stores_router.get("", response_model=DataResponse[list[CredentialStoreStatus]])
async def list_credential_stores(registry: CredentialStoreRegistryDep):
    return DataResponse(
        data=[CredentialStoreStatus(id=store.id, type=store.type) for store in registry.get_all()]
    )


@stores_router.post("/{store_id}/credentials", status_code=status.HTTP_204_NO_CONTENT)
async def set_credential(
    store_id: str, data: CredentialValue, registry: CredentialStoreRegistryDep
):
    """Store a secret under ``key`` in one of the configured credential stores."""
    await registry.get_or_raise(store_id).set(data.key, data.value)
