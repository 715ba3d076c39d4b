from .api_key_service import ApiKeyService, validate_and_get
from .graph_full_service import GraphFullService
from .inheritance import apply_execution_limits_inheritance, cascade_models
from .project_service import ProjectService
from .validation import validate_and_type_graph_data, validate_graph_structure

__all__ = [
    "ApiKeyService",
    "GraphFullService",
    "ProjectService",
    "apply_execution_limits_inheritance",
    "cascade_models",
    "validate_and_get",
    "validate_and_type_graph_data",
    "validate_graph_structure",
]
