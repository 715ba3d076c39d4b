from .repository import (
    AgentGraphRepository,
    ApiKeyRepository,
    ExternalAgentRepository,
    SubAgentFunctionToolRelationRepository,
    SubAgentRelationRepository,
    SubAgentRepository,
    SubAgentToolRelationRepository,
)

__all__ = [
    "AgentGraphRepository",
    "ApiKeyRepository",
    "ExternalAgentRepository",
    "SubAgentFunctionToolRelationRepository",
    "SubAgentRelationRepository",
    "SubAgentRepository",
    "SubAgentToolRelationRepository",
]
