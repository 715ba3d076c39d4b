from .repository import (
    ArtifactComponentRepository,
    DataComponentRepository,
    SubAgentArtifactComponentRepository,
    SubAgentComponentRepository,
    SubAgentDataComponentRepository,
)

__all__ = [
    "ArtifactComponentRepository",
    "DataComponentRepository",
    "SubAgentArtifactComponentRepository",
    "SubAgentComponentRepository",
    "SubAgentDataComponentRepository",
]
