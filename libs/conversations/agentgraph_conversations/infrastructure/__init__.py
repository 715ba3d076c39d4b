from .repository import (
    ConversationRepository,
    LedgerArtifactRepository,
    MessageRepository,
    TaskRelationRepository,
    TaskRepository,
)

__all__ = [
    "ConversationRepository",
    "LedgerArtifactRepository",
    "MessageRepository",
    "TaskRelationRepository",
    "TaskRepository",
]
