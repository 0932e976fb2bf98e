"""
Core module containing configuration, logging, errors and the database manager.
"""

from .config import Settings, get_settings
from .errors import (
    DuplicateEntityError,
    PersistenceError,
    StoreError,
    ValidationError,
)
from .logger import logger

__all__ = [
    "Settings",
    "get_settings",
    "logger",
    "StoreError",
    "PersistenceError",
    "ValidationError",
    "DuplicateEntityError",
]
