"""
Repository layer for data access.
Implements the store façades over MongoDB collections.
"""

from .models import (
    TASKS_COLLECTION,
    USERS_COLLECTION,
    TaskCreate,
    TaskModel,
    TaskUpdate,
    UpdateOptions,
    UserCreate,
    UserModel,
    UserRole,
    UserUpdate,
)
from .objectid_utils import is_valid_objectid, objectid_to_str, str_to_objectid
from .query import Filter, FindManyQuery, FindOneQuery
from .task_store import TaskStore
from .user_store import UserStore

__all__ = [
    "TASKS_COLLECTION",
    "USERS_COLLECTION",
    "Filter",
    "FindManyQuery",
    "FindOneQuery",
    "TaskCreate",
    "TaskModel",
    "TaskStore",
    "TaskUpdate",
    "UpdateOptions",
    "UserCreate",
    "UserModel",
    "UserRole",
    "UserStore",
    "UserUpdate",
    "is_valid_objectid",
    "objectid_to_str",
    "str_to_objectid",
]
