from .models import (
    AgentGraph,
    ApiKey,
    ExternalAgent,
    SubAgent,
    SubAgentFunctionToolRelation,
    SubAgentRelation,
    SubAgentToolRelation,
)

__all__ = [
    "AgentGraph",
    "ApiKey",
    "ExternalAgent",
    "SubAgent",
    "SubAgentFunctionToolRelation",
    "SubAgentRelation",
    "SubAgentToolRelation",
]
