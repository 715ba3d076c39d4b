from .models import (
    ArtifactComponent,
    DataComponent,
    SubAgentArtifactComponent,
    SubAgentDataComponent,
)

__all__ = [
    "ArtifactComponent",
    "DataComponent",
    "SubAgentArtifactComponent",
    "SubAgentDataComponent",
]
