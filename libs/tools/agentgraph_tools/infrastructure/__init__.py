from .repository import FunctionRepository, FunctionToolRepository, ToolRepository

__all__ = ["FunctionRepository", "FunctionToolRepository", "ToolRepository"]
