from .database import DatabaseSession, get_db_session
from .retry import is_transient_lock_error, retry_on_lock

__all__ = ["DatabaseSession", "get_db_session", "is_transient_lock_error", "retry_on_lock"]
