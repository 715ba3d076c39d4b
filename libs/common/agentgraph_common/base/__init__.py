from .models import (
    RESOURCE_ID_LENGTH,
    BaseModel,
    GraphScopedMixin,
    ProjectScopedMixin,
    TenantScopedMixin,
)
from .pagination import Pagination, PaginatedResult, PaginationInfo
from .repository import ScopedRepository, dialect_insert
from .schemas import RESOURCE_ID_PATTERN, CamelModel, ResourceId, dump_optional, model_from_row

__all__ = [
    "RESOURCE_ID_LENGTH",
    "RESOURCE_ID_PATTERN",
    "BaseModel",
    "CamelModel",
    "GraphScopedMixin",
    "Pagination",
    "PaginatedResult",
    "PaginationInfo",
    "ProjectScopedMixin",
    "ResourceId",
    "ScopedRepository",
    "TenantScopedMixin",
    "dialect_insert",
    "dump_optional",
    "model_from_row",
]
