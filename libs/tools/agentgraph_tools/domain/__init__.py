from .models import Function, FunctionTool, Tool
from .schema_normalization import normalize_tool_definition, normalize_tool_input_schema

__all__ = [
    "Function",
    "FunctionTool",
    "Tool",
    "normalize_tool_definition",
    "normalize_tool_input_schema",
]
