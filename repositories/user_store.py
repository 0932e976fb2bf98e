"""
User store for MongoDB operations.

Mirrors TaskStore for user documents, with deletion keyed by id. Email
uniqueness is enforced by the unique index created in ensure_indexes(); a
violating write surfaces as DuplicateEntityError.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError, translating_errors
from core.logger import logger
from repositories.interfaces.user_store_interface import (
    IUserStore,
    Options,
    UserData,
    UserPatch,
)
from repositories.models import (
    USERS_COLLECTION,
    UpdateOptions,
    UserCreate,
    UserModel,
    UserUpdate,
    coerce_model,
    insert_defaults,
    normalize_email_address,
    utc_now,
)
from repositories.objectid_utils import IdLike, objectid_to_str
from repositories.query import (
    ID_FIELD,
    Filter,
    FindManyQuery,
    FindOneQuery,
    build_update_document,
    map_field_values,
    normalize_filter,
    normalize_sort,
    validate_upsert,
)


def _user_filter(filter_dict):
    # Emails are stored lowercased, so compare against lowercased values
    return map_field_values(filter_dict, "email", normalize_email_address)


class UserStore(IUserStore):
    """Store for user documents."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection
        self.collection_name = collection.name
        logger.debug(f"UserStore initialized for collection: {self.collection_name}")

    @classmethod
    def from_database(
        cls, database: AsyncIOMotorDatabase, collection_name: str = USERS_COLLECTION
    ) -> "UserStore":
        return cls(database[collection_name])

    def get_by_id(self, user_id: IdLike) -> FindOneQuery[UserModel]:
        return FindOneQuery(self.collection, {ID_FIELD: user_id}, UserModel, "user")

    def get_one(self, filter_dict: Filter) -> FindOneQuery[UserModel]:
        return FindOneQuery(self.collection, _user_filter(filter_dict), UserModel, "user")

    def get_many(self, filter_dict: Optional[Filter] = None) -> FindManyQuery[UserModel]:
        return FindManyQuery(self.collection, _user_filter(filter_dict), UserModel, "user")

    async def update_one_by_filter(
        self, filter_dict: Filter, patch: UserPatch, options: Options = None
    ) -> Optional[UserModel]:
        with translating_errors(f"update user in {self.collection_name}"):
            changes = coerce_model(UserUpdate, patch).to_set()
            opts = coerce_model(UpdateOptions, options)
            query = normalize_filter(_user_filter(filter_dict))

            # Patch values may hold secrets; log field names only
            logger.info(f"📝 Updating user: filter={query}")
            logger.debug(f"Updated fields: {sorted(changes)}, new={opts.new}, upsert={opts.upsert}")

            # An incomplete insert must never be written; only update a match
            rejected_insert = None
            if opts.upsert:
                try:
                    validate_upsert(UserCreate, query, changes)
                except PydanticValidationError as e:
                    rejected_insert = e
            upsert = opts.upsert and rejected_insert is None

            document = await self.collection.find_one_and_update(
                query,
                build_update_document(
                    changes,
                    upsert=upsert,
                    defaults=insert_defaults(UserCreate),
                    query=query,
                ),
                sort=normalize_sort(opts.sort),
                upsert=upsert,
                return_document=opts.return_document,
            )

            if document is None and rejected_insert is not None:
                # Error text echoes input values; report field names only
                fields = sorted({".".join(map(str, error["loc"])) for error in rejected_insert.errors()})
                raise ValidationError(
                    f"Upsert would insert an incomplete user, invalid fields: {fields}",
                    backend_error=rejected_insert,
                ) from rejected_insert

            if document is None:
                logger.debug(f"No user returned for update: filter={query}")
                return None

            user = UserModel.from_dict(document)
            logger.info(f"✅ User updated: id={user.id}")
            return user

    async def update_by_id(
        self, user_id: IdLike, patch: UserPatch, options: Options = None
    ) -> Optional[UserModel]:
        return await self.update_one_by_filter({ID_FIELD: user_id}, patch, options)

    async def delete_by_id(self, user_id: IdLike) -> Optional[UserModel]:
        with translating_errors(f"delete user in {self.collection_name}"):
            query = normalize_filter({ID_FIELD: user_id})
            logger.warning(f"🗑️ Deleting user: id={user_id}")

            document = await self.collection.find_one_and_delete(query)

            if document is None:
                logger.debug(f"No user found for deletion: id={user_id}")
                return None

            user = UserModel.from_dict(document)
            logger.info(f"✅ User deleted: id={user.id}")
            return user

    async def create(self, data: UserData) -> UserModel:
        with translating_errors(f"create user in {self.collection_name}"):
            payload = coerce_model(UserCreate, data)
            logger.info(f"📝 Creating new user: email={payload.email}")

            now = utc_now()
            user = UserModel(**payload.model_dump(), created_at=now, updated_at=now)

            result = await self.collection.insert_one(user.to_dict())
            user.id = objectid_to_str(result.inserted_id)

            logger.info(f"✅ User created: id={user.id}")
            return user

    async def ensure_indexes(self) -> None:
        """Create the unique email index that enforces one account per address."""
        with translating_errors(f"create indexes on {self.collection_name}"):
            await self.collection.create_index("email", unique=True)
            logger.debug(f"✅ Indexes ensured on {self.collection_name}")
