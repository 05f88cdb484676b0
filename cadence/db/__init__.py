"""Database package."""
from cadence.db.database import (
    Base,
    async_session_maker,
    close_all_engines,
    engine,
    get_db,
    init_db,
)

__all__ = [
    "Base",
    "async_session_maker",
    "close_all_engines",
    "engine",
    "get_db",
    "init_db",
]
