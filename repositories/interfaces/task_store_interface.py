"""
Interface for Task Store.
Defines the contract that all task stores must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Union

from repositories.models import TaskCreate, TaskModel, TaskUpdate, UpdateOptions
from repositories.objectid_utils import IdLike
from repositories.query import Filter, FindManyQuery, FindOneQuery

TaskPatch = Union[TaskUpdate, Mapping[str, Any]]
TaskData = Union[TaskCreate, Mapping[str, Any]]
Options = Union[UpdateOptions, Mapping[str, Any], None]


class ITaskStore(ABC):
    """Interface for task persistence operations."""

    @abstractmethod
    def get_by_id(self, task_id: IdLike) -> FindOneQuery[TaskModel]:
        """
        Query for a task by ID.

        Args:
            task_id: ID of the task

        Returns:
            FindOneQuery that executes to the task or None
        """
        pass

    @abstractmethod
    def get_one(self, filter_dict: Filter) -> FindOneQuery[TaskModel]:
        """Query for the first task matching a filter."""
        pass

    @abstractmethod
    def get_many(self, filter_dict: Optional[Filter] = None) -> FindManyQuery[TaskModel]:
        """Query for every task matching a filter."""
        pass

    @abstractmethod
    async def update_one_by_filter(
        self, filter_dict: Filter, patch: TaskPatch, options: Options = None
    ) -> Optional[TaskModel]:
        """
        Apply a patch to the first task matching a filter.

        Args:
            filter_dict: Query filter
            patch: Fields to change
            options: UpdateOptions (new, upsert, sort)

        Returns:
            The task before the change, or after it with ``new``; None if
            nothing matched
        """
        pass

    @abstractmethod
    async def update_by_id(
        self, task_id: IdLike, patch: TaskPatch, options: Options = None
    ) -> Optional[TaskModel]:
        """Apply a patch to the task with the given ID."""
        pass

    @abstractmethod
    async def delete_one_by_filter(self, filter_dict: Filter) -> Optional[TaskModel]:
        """
        Delete the first task matching a filter.

        Returns:
            The removed task, or None if nothing matched
        """
        pass

    @abstractmethod
    async def create(self, data: TaskData) -> TaskModel:
        """
        Create a new task.

        Returns:
            The persisted task with its generated id and timestamps
        """
        pass
