"""
Store Interfaces.
"""

from .task_store_interface import ITaskStore
from .user_store_interface import IUserStore

__all__ = [
    "ITaskStore",
    "IUserStore",
]
