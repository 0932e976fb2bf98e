"""
MongoDB document models using Pydantic.

Persisted documents (TaskModel, UserModel), creation payloads, patches and
update options. Inputs forbid unknown keys so a misspelled field or option
fails loudly instead of being ignored.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pymongo import ReturnDocument

from repositories.objectid_utils import objectid_to_str

# MongoDB collection names
TASKS_COLLECTION = "tasks"
USERS_COLLECTION = "users"

ModelT = TypeVar("ModelT", bound=BaseModel)


def utc_now() -> datetime:
    """Naive UTC now, truncated to the millisecond precision MongoDB stores."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def coerce_model(model_cls: Type[ModelT], value: Union[ModelT, Mapping[str, Any], None]) -> ModelT:
    """
    Accept either a model instance or a plain mapping for a typed input.

    Raises:
        pydantic.ValidationError: If the mapping does not fit the model
    """
    if value is None:
        return model_cls()
    if isinstance(value, model_cls):
        return value
    return model_cls.model_validate(value)


def insert_defaults(model_cls: Type[BaseModel]) -> Dict[str, Any]:
    """Non-null defaults of a creation model, used to seed upserted documents."""
    defaults = {}
    for name, field in model_cls.model_fields.items():
        if field.is_required():
            continue
        value = field.get_default(call_default_factory=True)
        if value is None:
            continue
        defaults[name] = value.value if isinstance(value, Enum) else value
    return defaults


def _reject_null(value):
    if value is None:
        raise ValueError("field cannot be null")
    return value


class DocumentModel(BaseModel):
    """Base for persisted documents: maps the string ``id`` to MongoDB ``_id``."""

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    id: Optional[str] = Field(None, description="MongoDB _id as string")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update time")

    def to_dict(self) -> dict:
        """
        Convert to dictionary for MongoDB.
        Excludes 'id' field (it is stored as '_id').
        """
        return self.model_dump(exclude={"id"})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        """
        Create from MongoDB document.
        Converts MongoDB _id (ObjectId) to string 'id' field.
        """
        data = dict(data)
        if "_id" in data:
            data["id"] = objectid_to_str(data.pop("_id"))
        return cls(**data)


class UpdateOptions(BaseModel):
    """
    Options for the find-and-update operations.

    new:    return the document as it is after the update (default: before)
    upsert: insert a document when nothing matches the filter
    sort:   order used to pick the first match when several documents match
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    new: bool = False
    upsert: bool = False
    sort: Optional[List[Tuple[str, Literal[1, -1]]]] = None

    @property
    def return_document(self) -> ReturnDocument:
        return ReturnDocument.AFTER if self.new else ReturnDocument.BEFORE


# ---------------------------------------------------------------- tasks


class TaskModel(DocumentModel):
    """Model for a task (MongoDB document)."""

    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Free-form details")
    done: bool = Field(default=False, description="Completion state")
    due_date: Optional[datetime] = Field(None, description="When the task is due")
    user_id: Optional[str] = Field(None, description="Owner id (lookup only)")


class TaskCreate(BaseModel):
    """Model for creating a new task."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    done: bool = False
    due_date: Optional[datetime] = None
    user_id: Optional[str] = None


class TaskUpdate(BaseModel):
    """Patch for a task. Only fields explicitly set are applied."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    done: Optional[bool] = None
    due_date: Optional[datetime] = None
    user_id: Optional[str] = None

    @field_validator("title", "done")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)

    def to_set(self) -> dict:
        return self.model_dump(exclude_unset=True)


# ---------------------------------------------------------------- users


class UserRole(str, Enum):
    """User role enumeration."""

    USER = "user"
    ADMIN = "admin"


def normalize_email_address(value):
    """Emails are stored trimmed and lowercased; non-strings pass through."""
    if not isinstance(value, str):
        return value
    return value.strip().lower()


class UserModel(DocumentModel):
    """Model for a user account (MongoDB document)."""

    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    age: Optional[int] = Field(None, description="Age in years")
    email: str = Field(..., description="Login email, unique per account")
    password: str = Field(..., description="Password hash")
    role: UserRole = Field(default=UserRole.USER, description="Authorization role")
    reset_password_token: Optional[str] = Field(None, description="Pending reset token")
    reset_password_expires: Optional[datetime] = Field(
        None, description="Reset token expiry"
    )


class UserCreate(BaseModel):
    """Model for creating a new user."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    age: Optional[int] = Field(None, ge=0)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    role: UserRole = UserRole.USER
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return normalize_email_address(value)


class UserUpdate(BaseModel):
    """Patch for a user. Only fields explicitly set are applied."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    age: Optional[int] = Field(None, ge=0)
    email: Optional[str] = Field(None, min_length=3, max_length=254)
    password: Optional[str] = Field(None, min_length=1)
    role: Optional[UserRole] = None
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None

    @field_validator("first_name", "last_name", "email", "password", "role")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return normalize_email_address(value)

    def to_set(self) -> dict:
        return self.model_dump(exclude_unset=True)
