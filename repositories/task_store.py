"""
Task store for MongoDB operations.

CRUD façade over the tasks collection so callers never issue raw queries.
Reads return query builders (execute them to hit the backend); writes are
single atomic backend calls. Backend failures are logged and re-raised as
StoreError subclasses; a miss is None, never an exception.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError, translating_errors
from core.logger import logger
from repositories.interfaces.task_store_interface import (
    ITaskStore,
    Options,
    TaskData,
    TaskPatch,
)
from repositories.models import (
    TASKS_COLLECTION,
    TaskCreate,
    TaskModel,
    TaskUpdate,
    UpdateOptions,
    coerce_model,
    insert_defaults,
    utc_now,
)
from repositories.objectid_utils import IdLike, objectid_to_str
from repositories.query import (
    ID_FIELD,
    Filter,
    FindManyQuery,
    FindOneQuery,
    build_update_document,
    normalize_filter,
    normalize_sort,
    validate_upsert,
)


class TaskStore(ITaskStore):
    """Store for task documents."""

    def __init__(self, collection: AsyncIOMotorCollection):
        """
        Initialize task store.

        Args:
            collection: Tasks collection handle, owned by the caller
        """
        self.collection = collection
        self.collection_name = collection.name
        logger.debug(f"TaskStore initialized for collection: {self.collection_name}")

    @classmethod
    def from_database(
        cls, database: AsyncIOMotorDatabase, collection_name: str = TASKS_COLLECTION
    ) -> "TaskStore":
        return cls(database[collection_name])

    def get_by_id(self, task_id: IdLike) -> FindOneQuery[TaskModel]:
        return FindOneQuery(self.collection, {ID_FIELD: task_id}, TaskModel, "task")

    def get_one(self, filter_dict: Filter) -> FindOneQuery[TaskModel]:
        return FindOneQuery(self.collection, filter_dict, TaskModel, "task")

    def get_many(self, filter_dict: Optional[Filter] = None) -> FindManyQuery[TaskModel]:
        return FindManyQuery(self.collection, filter_dict, TaskModel, "task")

    async def update_one_by_filter(
        self, filter_dict: Filter, patch: TaskPatch, options: Options = None
    ) -> Optional[TaskModel]:
        with translating_errors(f"update task in {self.collection_name}"):
            changes = coerce_model(TaskUpdate, patch).to_set()
            opts = coerce_model(UpdateOptions, options)
            query = normalize_filter(filter_dict)

            logger.info(f"📝 Updating task: filter={query}")
            logger.debug(f"Update data: {changes}, new={opts.new}, upsert={opts.upsert}")

            # An incomplete insert must never be written; only update a match
            rejected_insert = None
            if opts.upsert:
                try:
                    validate_upsert(TaskCreate, query, changes)
                except PydanticValidationError as e:
                    rejected_insert = e
            upsert = opts.upsert and rejected_insert is None

            document = await self.collection.find_one_and_update(
                query,
                build_update_document(
                    changes,
                    upsert=upsert,
                    defaults=insert_defaults(TaskCreate),
                    query=query,
                ),
                sort=normalize_sort(opts.sort),
                upsert=upsert,
                return_document=opts.return_document,
            )

            if document is None and rejected_insert is not None:
                raise ValidationError(
                    f"Upsert would insert an incomplete task: {rejected_insert}",
                    backend_error=rejected_insert,
                ) from rejected_insert

            if document is None:
                logger.debug(f"No task returned for update: filter={query}")
                return None

            task = TaskModel.from_dict(document)
            logger.info(f"✅ Task updated: id={task.id}")
            return task

    async def update_by_id(
        self, task_id: IdLike, patch: TaskPatch, options: Options = None
    ) -> Optional[TaskModel]:
        return await self.update_one_by_filter({ID_FIELD: task_id}, patch, options)

    async def delete_one_by_filter(self, filter_dict: Filter) -> Optional[TaskModel]:
        with translating_errors(f"delete task in {self.collection_name}"):
            query = normalize_filter(filter_dict)
            logger.info(f"🗑️ Deleting task: filter={query}")

            document = await self.collection.find_one_and_delete(query)

            if document is None:
                logger.debug(f"No task matched for deletion: filter={query}")
                return None

            task = TaskModel.from_dict(document)
            logger.info(f"✅ Task deleted: id={task.id}")
            return task

    async def create(self, data: TaskData) -> TaskModel:
        with translating_errors(f"create task in {self.collection_name}"):
            payload = coerce_model(TaskCreate, data)
            logger.info(f"📝 Creating new task: title={payload.title!r}")

            now = utc_now()
            task = TaskModel(**payload.model_dump(), created_at=now, updated_at=now)

            result = await self.collection.insert_one(task.to_dict())
            task.id = objectid_to_str(result.inserted_id)

            logger.info(f"✅ Task created: id={task.id}")
            return task

    async def ensure_indexes(self) -> None:
        """Create the indexes task lookups rely on."""
        with translating_errors(f"create indexes on {self.collection_name}"):
            await self.collection.create_index("user_id")
            await self.collection.create_index("created_at")
            logger.debug(f"✅ Indexes ensured on {self.collection_name}")
