"""Application configuration module.

- **settings.py**: Environment-based settings (Pydantic BaseSettings)
  - Database URL, JWT secrets, admin token
  - Scheduling defaults and auto-reschedule windows
  - Loaded from .env file via pydantic-settings
"""
from cadence.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
