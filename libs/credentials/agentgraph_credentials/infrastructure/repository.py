from typing import Any

from agentgraph_common.base.repository import ScopedRepository
from agentgraph_common.scopes.context import ProjectScope
from agentgraph_tools.domain.models import Tool
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_credentials.domain.models import CredentialReference


class CredentialReferenceRepository(ScopedRepository[CredentialReference]):
    resource_type = "credential_reference"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, CredentialReference, scopes)

    async def get_with_tools(self, id: str) -> dict[str, Any] | None:
        """Return the reference together with the tools that use it."""
        reference = await self.get_by_id(id)
        if reference is None:
            return None
        result = await self.session.execute(
            select(Tool).where(
                Tool.tenant_id == self.scopes.tenant_id,
                Tool.project_id == self.scopes.project_id,
                Tool.credential_reference_id == id,
            )
        )
        return {"reference": reference, "tools": list(result.scalars().all())}
