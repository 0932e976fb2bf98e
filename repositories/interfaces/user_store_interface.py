"""
Interface for User Store.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Union

from repositories.models import UpdateOptions, UserCreate, UserModel, UserUpdate
from repositories.objectid_utils import IdLike
from repositories.query import Filter, FindManyQuery, FindOneQuery

UserPatch = Union[UserUpdate, Mapping[str, Any]]
UserData = Union[UserCreate, Mapping[str, Any]]
Options = Union[UpdateOptions, Mapping[str, Any], None]


class IUserStore(ABC):
    """Interface for user persistence operations."""

    @abstractmethod
    def get_by_id(self, user_id: IdLike) -> FindOneQuery[UserModel]:
        """Query for a user by ID."""
        pass

    @abstractmethod
    def get_one(self, filter_dict: Filter) -> FindOneQuery[UserModel]:
        """Query for the first user matching a filter."""
        pass

    @abstractmethod
    def get_many(self, filter_dict: Optional[Filter] = None) -> FindManyQuery[UserModel]:
        """Query for every user matching a filter."""
        pass

    @abstractmethod
    async def update_one_by_filter(
        self, filter_dict: Filter, patch: UserPatch, options: Options = None
    ) -> Optional[UserModel]:
        """Apply a patch to the first user matching a filter."""
        pass

    @abstractmethod
    async def update_by_id(
        self, user_id: IdLike, patch: UserPatch, options: Options = None
    ) -> Optional[UserModel]:
        """Apply a patch to the user with the given ID."""
        pass

    @abstractmethod
    async def delete_by_id(self, user_id: IdLike) -> Optional[UserModel]:
        """Delete the user with the given ID, returning it (or None)."""
        pass

    @abstractmethod
    async def create(self, data: UserData) -> UserModel:
        """Create a new user."""
        pass
