from .models import ContextCache, ContextConfig

__all__ = ["ContextCache", "ContextConfig"]
