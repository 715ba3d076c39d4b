from .models import Conversation, LedgerArtifact, Message, Task, TaskRelation
from .schemas import (
    Artifact,
    ArtifactPart,
    ConversationCreate,
    MessageContent,
    MessageCreate,
    TaskCreate,
)

__all__ = [
    "Artifact",
    "ArtifactPart",
    "Conversation",
    "ConversationCreate",
    "LedgerArtifact",
    "Message",
    "MessageContent",
    "MessageCreate",
    "Task",
    "TaskCreate",
    "TaskRelation",
]
