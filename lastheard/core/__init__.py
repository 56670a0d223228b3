"""Core package containing configuration, database, auth and metrics."""
from lastheard.core.config import get_settings, Settings
from lastheard.core.database import get_db, init_db, close_db, Base, db_execute_safe

__all__ = [
    "get_settings",
    "Settings",
    "get_db",
    "init_db",
    "close_db",
    "Base",
    "db_execute_safe",
]
