"""
Filters and two-phase read queries.

Store read operations return a query builder instead of touching the backend.
Builder methods (sort, skip, limit) only configure the request; the backend is
hit by a terminal call (execute, stream, count), once per call.
"""

from typing import (
    Any,
    AsyncIterator,
    Callable,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
)

from motor.motor_asyncio import AsyncIOMotorCollection
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING

from core.errors import ValidationError, translating_errors
from core.logger import logger
from repositories.models import DocumentModel, insert_defaults, utc_now
from repositories.objectid_utils import str_to_objectid

# Attribute name -> value or operator expression (MongoDB query language)
Filter = Mapping[str, Any]
SortSpec = List[Tuple[str, int]]

ID_FIELD = "id"
MONGO_ID_FIELD = "_id"
LOGICAL_OPERATORS = ("$and", "$or", "$nor")
EQUALITY_OPERATORS = ("$eq", "$ne")
MEMBERSHIP_OPERATORS = ("$in", "$nin")

DocumentT = TypeVar("DocumentT", bound=DocumentModel)


def to_object_id(value: Any):
    """
    Convert a public id to ObjectId.

    Raises:
        ValidationError: If the value is not a valid ObjectId
    """
    try:
        return str_to_objectid(value)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Malformed id: {value!r}", backend_error=e) from e


def _normalize_id_condition(condition: Any) -> Any:
    if not isinstance(condition, Mapping):
        return to_object_id(condition)

    normalized = {}
    for operator, operand in condition.items():
        if operator in EQUALITY_OPERATORS:
            normalized[operator] = to_object_id(operand)
        elif operator in MEMBERSHIP_OPERATORS:
            if isinstance(operand, (str, bytes)) or not isinstance(operand, Sequence):
                raise ValidationError(f"{operator} on id needs a list, got {operand!r}")
            normalized[operator] = [to_object_id(item) for item in operand]
        else:
            normalized[operator] = operand
    return normalized


def normalize_filter(filter_dict: Optional[Filter]) -> Dict[str, Any]:
    """
    Translate a public filter into a MongoDB query.

    ``id`` (or ``_id``) becomes ``_id`` with ObjectId values, also inside
    $eq/$ne/$in/$nin and nested $and/$or/$nor clauses. Every other key is
    passed through for the backend to interpret.

    Raises:
        ValidationError: If the filter is not a mapping or an id is malformed
    """
    if filter_dict is None:
        return {}
    if not isinstance(filter_dict, Mapping):
        raise ValidationError(
            f"Filter must be a mapping, got {type(filter_dict).__name__}"
        )

    query: Dict[str, Any] = {}
    for key, value in filter_dict.items():
        if key in (ID_FIELD, MONGO_ID_FIELD):
            if MONGO_ID_FIELD in query:
                raise ValidationError("Filter names the id more than once")
            query[MONGO_ID_FIELD] = _normalize_id_condition(value)
        elif key in LOGICAL_OPERATORS:
            if isinstance(value, Mapping) or not isinstance(value, Sequence):
                raise ValidationError(f"{key} needs a list of filters")
            query[key] = [normalize_filter(clause) for clause in value]
        else:
            query[key] = value
    return query


def _is_clause_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, Mapping))


def _map_condition(condition: Any, func: Callable[[Any], Any]) -> Any:
    if not isinstance(condition, Mapping):
        return func(condition)

    mapped = {}
    for operator, operand in condition.items():
        if operator in EQUALITY_OPERATORS:
            mapped[operator] = func(operand)
        elif operator in MEMBERSHIP_OPERATORS and _is_clause_list(operand):
            mapped[operator] = [func(item) for item in operand]
        else:
            mapped[operator] = operand
    return mapped


def map_field_values(filter_dict: Any, field: str, func: Callable[[Any], Any]) -> Any:
    """
    Apply ``func`` to the values a filter compares ``field`` against.

    Covers plain equality, $eq/$ne/$in/$nin and nested $and/$or/$nor clauses.
    Anything that is not a mapping is returned as is for normalize_filter to reject.
    """
    if not isinstance(filter_dict, Mapping):
        return filter_dict

    mapped: Dict[str, Any] = {}
    for key, value in filter_dict.items():
        if key == field:
            mapped[key] = _map_condition(value, func)
        elif key in LOGICAL_OPERATORS and _is_clause_list(value):
            mapped[key] = [map_field_values(clause, field, func) for clause in value]
        else:
            mapped[key] = value
    return mapped


def normalize_sort(sort: Optional[Sequence[Tuple[str, int]]]) -> Optional[SortSpec]:
    """Map ``id`` to ``_id`` in a sort specification; empty means no sort."""
    if not sort:
        return None
    return [(MONGO_ID_FIELD if field == ID_FIELD else field, direction) for field, direction in sort]


def build_update_document(
    changes: Mapping[str, Any],
    upsert: bool = False,
    defaults: Optional[Mapping[str, Any]] = None,
    query: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build the update document for a find-and-update.

    The patch is applied with $set and always bumps ``updated_at``. On upsert,
    $setOnInsert stamps ``created_at`` and fills model defaults that are
    neither patched nor seeded by an equality field of the filter.
    """
    now = utc_now()
    update: Dict[str, Any] = {"$set": {**changes, "updated_at": now}}

    if upsert:
        seeded = {key for key in (query or {}) if not key.startswith("$")}
        on_insert: Dict[str, Any] = {"created_at": now}
        for field, value in (defaults or {}).items():
            if field not in changes and field not in seeded:
                on_insert[field] = value
        update["$setOnInsert"] = on_insert

    return update


def _collect_equalities(query: Mapping[str, Any], document: Dict[str, Any]) -> None:
    for key, value in query.items():
        if key == "$and" and _is_clause_list(value):
            for clause in value:
                if isinstance(clause, Mapping):
                    _collect_equalities(clause, document)
        elif key.startswith("$") or "." in key:
            continue
        elif isinstance(value, Mapping) and any(str(op).startswith("$") for op in value):
            if "$eq" in value:
                document[key] = value["$eq"]
        else:
            document[key] = value


def upsert_document(
    query: Optional[Mapping[str, Any]],
    changes: Mapping[str, Any],
    defaults: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Fields of the document an upsert inserts when nothing matches.

    Equality fields of the filter (top level and $and), then the patch, then
    defaults for whatever is still missing.
    """
    document: Dict[str, Any] = {}
    _collect_equalities(query or {}, document)
    document.update(changes)
    for field, value in (defaults or {}).items():
        document.setdefault(field, value)
    return document


def validate_upsert(
    create_cls: Type[BaseModel], query: Optional[Mapping[str, Any]], changes: Mapping[str, Any]
) -> None:
    """
    Check that an upsert would insert a complete document.

    Raises:
        pydantic.ValidationError: If the inserted document would not fit ``create_cls``
    """
    document = upsert_document(query, changes, insert_defaults(create_cls))
    create_cls.model_validate(
        {field: value for field, value in document.items() if field in create_cls.model_fields}
    )


class FindOneQuery(Generic[DocumentT]):
    """Builder for a single-document lookup. Executes to a model or None."""

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        filter_dict: Optional[Filter],
        model_cls: Type[DocumentT],
        entity: str,
    ):
        self._collection = collection
        self._filter = filter_dict
        self._model_cls = model_cls
        self._entity = entity
        self._sort: SortSpec = []

    def sort(self, field: str, direction: int = ASCENDING) -> "FindOneQuery[DocumentT]":
        """Order candidates so the first match is deterministic."""
        if direction not in (ASCENDING, DESCENDING):
            raise ValueError(f"Sort direction must be 1 or -1, got {direction}")
        self._sort.append((field, direction))
        return self

    async def execute(self) -> Optional[DocumentT]:
        with translating_errors(f"find {self._entity} in {self._collection.name}"):
            query = normalize_filter(self._filter)
            logger.debug(f"🔍 Finding one {self._entity}: {query}")

            document = await self._collection.find_one(query, sort=normalize_sort(self._sort))

            if document is None:
                logger.debug(f"No {self._entity} matched: {query}")
                return None
            return self._model_cls.from_dict(document)


class FindManyQuery(Generic[DocumentT]):
    """
    Builder for a multi-document lookup.

    No implicit limit and no implicit sort: unless sort() is called, the order
    is whatever the backend returns.
    """

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        filter_dict: Optional[Filter],
        model_cls: Type[DocumentT],
        entity: str,
    ):
        self._collection = collection
        self._filter = filter_dict
        self._model_cls = model_cls
        self._entity = entity
        self._sort: SortSpec = []
        self._skip = 0
        self._limit = 0

    def sort(self, field: str, direction: int = ASCENDING) -> "FindManyQuery[DocumentT]":
        if direction not in (ASCENDING, DESCENDING):
            raise ValueError(f"Sort direction must be 1 or -1, got {direction}")
        self._sort.append((field, direction))
        return self

    def skip(self, count: int) -> "FindManyQuery[DocumentT]":
        if count < 0:
            raise ValueError(f"skip must be >= 0, got {count}")
        self._skip = count
        return self

    def limit(self, count: int) -> "FindManyQuery[DocumentT]":
        """Cap the number of results; 0 means no limit."""
        if count < 0:
            raise ValueError(f"limit must be >= 0, got {count}")
        self._limit = count
        return self

    def _cursor_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        sort = normalize_sort(self._sort)
        if sort:
            options["sort"] = sort
        if self._skip:
            options["skip"] = self._skip
        if self._limit:
            options["limit"] = self._limit
        return options

    async def stream(self) -> AsyncIterator[DocumentT]:
        """Yield matching documents lazily as the cursor delivers them."""
        with translating_errors(f"find {self._entity}s in {self._collection.name}"):
            query = normalize_filter(self._filter)
            options = self._cursor_options()
            logger.debug(f"🔍 Finding {self._entity}s: {query} {options}")

            async for document in self._collection.find(query, **options):
                yield self._model_cls.from_dict(document)

    async def execute(self) -> List[DocumentT]:
        documents = [document async for document in self.stream()]
        logger.debug(f"Found {len(documents)} {self._entity}s")
        return documents

    async def count(self) -> int:
        with translating_errors(f"count {self._entity}s in {self._collection.name}"):
            query = normalize_filter(self._filter)
            options = {k: v for k, v in self._cursor_options().items() if k != "sort"}
            return await self._collection.count_documents(query, **options)
