"""
Record base class, lenient field types and relation descriptors.

Raw payload elements are loosely typed: numbers arrive as strings, booleans as
"true"/"1", dates in several formats. The field types below coerce what they
can and turn anything else into None, so one bad field never aborts a fetch.

Records are frozen pydantic models. Each one is bound to the RelationalCache
of the fetch that produced it and resolves related records through it.
"""
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Annotated, Any, ClassVar, Dict, List, Mapping, Optional, Type, TypeVar

from dateutil import parser as dateutil_parser
from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, PrivateAttr, ValidationError

from powerschool.core.cache import RelationalCache
from powerschool.core.exceptions import RecordDecodeError, UnboundRecordError

logger = logging.getLogger(__name__)

R = TypeVar("R", bound="Record")

_TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "1"})
_FALSE_STRINGS = frozenset({"false", "f", "no", "n", "0"})


def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if number.is_integer() else None
    return None


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _to_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return None


def _to_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse ISO strings, other date strings and epoch milliseconds; None if unparsable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return dateutil_parser.isoparse(text)
        except (ValueError, OverflowError):
            pass
        try:
            return dateutil_parser.parse(text)
        except (ValueError, OverflowError):
            return None
    return None


def _to_mapping(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, Mapping):
        return dict(value)
    return None


LenientInt = Annotated[Optional[int], BeforeValidator(_to_int)]
LenientFloat = Annotated[Optional[float], BeforeValidator(_to_float)]
LenientBool = Annotated[Optional[bool], BeforeValidator(_to_bool)]
LenientStr = Annotated[Optional[str], BeforeValidator(_to_str)]
LenientDateTime = Annotated[Optional[datetime], BeforeValidator(parse_datetime)]
LenientMapping = Annotated[Optional[Dict[str, Any]], BeforeValidator(_to_mapping)]


def raw(*names: str) -> Any:
    """Field accepting any of the service's raw key spellings (the Python name also works)."""
    return Field(default=None, validation_alias=AliasChoices(*names))


class Relation(ABC):
    """How a record finds related records in its cache."""

    def __init__(self, collection: str, attr: str = "id"):
        self.collection = collection
        self.attr = attr

    @abstractmethod
    def resolve(self, record: "Record", cache: RelationalCache) -> Any:
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.collection!r}, {self.attr!r})"


class One(Relation):
    """Foreign key on this record -> the single record it names, or None."""

    def resolve(self, record: "Record", cache: RelationalCache) -> Optional["Record"]:
        return cache.lookup_one(self.collection, getattr(record, self.attr))


class Many(Relation):
    """Key on this record -> every record of a non-unique collection sharing it."""

    def resolve(self, record: "Record", cache: RelationalCache) -> List["Record"]:
        return cache.lookup_many(self.collection, getattr(record, self.attr))


class Scan(Relation):
    """Filter a whole collection by a foreign key pointing back at this record. O(n) per call."""

    def __init__(self, collection: str, foreign_attr: str, attr: str = "id"):
        super().__init__(collection, attr)
        self.foreign_attr = foreign_attr

    def resolve(self, record: "Record", cache: RelationalCache) -> List["Record"]:
        value = getattr(record, self.attr)
        if value is None:
            return []
        return [
            other for other in cache.lookup_all(self.collection)
            if getattr(other, self.foreign_attr, None) == value
        ]


class Record(BaseModel):
    """A decoded payload element belonging to one collection."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    collection: ClassVar[str] = ""
    key_field: ClassVar[str] = "id"
    unique_key: ClassVar[bool] = True
    relations: ClassVar[Dict[str, Relation]] = {}

    id: LenientInt = None

    _cache: Optional[RelationalCache] = PrivateAttr(default=None)

    @classmethod
    def from_data(cls: Type[R], data: Mapping[str, Any], cache: Optional[RelationalCache] = None) -> R:
        record = cls.model_validate(data)
        if cache is not None:
            record.bind(cache)
        return record

    def bind(self: R, cache: RelationalCache) -> R:
        """Attach the cache this record resolves relations against."""
        self._cache = cache
        return self

    @property
    def cache(self) -> Optional[RelationalCache]:
        return self._cache

    def resolve(self, relation_name: str) -> Any:
        """Resolve a named relation. Dangling keys give None or []; never raises for them."""
        relation = self.relations.get(relation_name)
        if relation is None:
            raise KeyError(f"{self.__class__.__name__} has no relation {relation_name!r}")
        if self._cache is None:
            raise UnboundRecordError(
                f"{self.__class__.__name__} id={self.id} is not bound to a cache; "
                "records from PowerSchoolUser.get_student_info() are"
            )
        return relation.resolve(self, self._cache)


def as_list(value: Any) -> List[Any]:
    """Normalize a payload field that may be missing, a single object or a list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def decode_record(
    record_cls: Type[R],
    element: Any,
    cache: Optional[RelationalCache] = None,
    name: Optional[str] = None,
    index: int = 0,
) -> R:
    """Decode one raw element; raise RecordDecodeError if it is not an object."""
    name = name or record_cls.collection or record_cls.__name__
    if not isinstance(element, Mapping):
        raise RecordDecodeError(name, index, f"expected an object, got {type(element).__name__}")
    try:
        return record_cls.from_data(element, cache)
    except ValidationError as e:
        raise RecordDecodeError(name, index, str(e)) from e


def decode_collection(
    record_cls: Type[R],
    raw_value: Any,
    cache: Optional[RelationalCache] = None,
    name: Optional[str] = None,
) -> List[R]:
    """Decode a raw collection field (list, single object or missing) into records."""
    records = [
        decode_record(record_cls, element, cache, name, index)
        for index, element in enumerate(as_list(raw_value))
    ]
    logger.debug(f"Decoded {len(records)} {name or record_cls.collection} record(s)")
    return records
