from .context_cache_service import ContextCacheService

__all__ = ["ContextCacheService"]
