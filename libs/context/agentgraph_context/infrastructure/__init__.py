from .repository import ContextCacheRepository, ContextConfigRepository

__all__ = ["ContextCacheRepository", "ContextConfigRepository"]
