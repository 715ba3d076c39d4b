import logging
from datetime import datetime
from typing import Any

from agentgraph_common.base.repository import ScopedRepository
from agentgraph_common.scopes.context import GraphScope, ProjectScope
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_tools.domain.models import Function, FunctionTool, Tool
from agentgraph_tools.domain.schema_normalization import normalize_tool_definition

logger = logging.getLogger(__name__)


class ToolRepository(ScopedRepository[Tool]):
    resource_type = "tool"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, Tool, scopes)

    async def list_by_status(self, status: str) -> list[Tool]:
        return await self.list_all(status=status)

    async def list_by_credential_reference(self, credential_reference_id: str) -> list[Tool]:
        return await self.list_all(credential_reference_id=credential_reference_id)

    async def update_status(
        self,
        tool_id: str,
        status: str,
        last_error: str | None = None,
        available_tools: list[dict[str, Any]] | None = None,
        last_health_check: datetime | None = None,
    ) -> Tool | None:
        """Record a health check and, when given, the tools discovered on the server.

        Discovered tools are stored with a normalised ``inputSchema``.
        """
        values: dict[str, Any] = {
            "status": status,
            "last_error": last_error,
            "last_health_check": last_health_check or datetime.now(),
        }
        if available_tools is not None:
            values["available_tools"] = [normalize_tool_definition(t) for t in available_tools]
            values["last_tools_sync"] = datetime.now()

        tool = await self.update(tool_id, **values)
        if tool is None:
            logger.warning("Status update for unknown tool", extra={"tool_id": tool_id})
        return tool


class FunctionRepository(ScopedRepository[Function]):
    resource_type = "function"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, Function, scopes)


class FunctionToolRepository(ScopedRepository[FunctionTool]):
    resource_type = "function_tool"

    def __init__(self, session: AsyncSession, scopes: GraphScope):
        super().__init__(session, FunctionTool, scopes)

    async def list_for_function(self, function_id: str) -> list[FunctionTool]:
        return await self.list_all(function_id=function_id)
