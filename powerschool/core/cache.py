"""
In-memory relational cache for one fetch of student data.

Records are stored per collection and indexed by a key field. Unique
collections map key -> record; non-unique collections (scores by assignment,
final grades by course) map key -> list of records in insertion order.
A cache is built once per fetch and never merged with another one.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class _Collection:
    """One stored collection: insertion-ordered records plus a key index."""

    __slots__ = ("name", "key_field", "unique", "records", "index")

    def __init__(self, name: str, key_field: str, unique: bool):
        self.name = name
        self.key_field = key_field
        self.unique = unique
        self.records: List[Any] = []
        self.index: Dict[Any, Any] = {}


class RelationalCache:
    """Store of decoded records keyed by (collection name, key)."""

    def __init__(self):
        self._collections: Dict[str, _Collection] = {}

    def store(self, collection: str, records: Iterable[Any], key_field: str = "id", unique: bool = True) -> None:
        """Replace `collection` with a fresh index built from `records`.

        Args:
            collection: Collection name, e.g. "courses".
            records: Records to store, in payload order.
            key_field: Attribute of each record used as the lookup key.
            unique: False for collections keyed by a shared foreign id; lookups
                then return every record sharing the key.
        """
        built = _Collection(collection, key_field, unique)
        for record in records:
            key = getattr(record, key_field, None)
            if key is None:
                logger.debug(f"{collection}: record without {key_field} kept out of the index")
                built.records.append(record)
                continue
            if unique:
                previous = built.index.get(key)
                if previous is not None:
                    logger.warning(f"{collection}: duplicate {key_field}={key!r}, keeping the last record")
                    built.records = [r for r in built.records if r is not previous]
                built.index[key] = record
            else:
                built.index.setdefault(key, []).append(record)
            built.records.append(record)

        self._collections[collection] = built
        logger.debug(f"Stored {len(built.records)} record(s) in {collection} keyed by {key_field}")

    def lookup_one(self, collection: str, key: Any) -> Optional[Any]:
        """Return the record at `key`, or None. On a non-unique collection, the first match."""
        stored = self._collections.get(collection)
        if stored is None or key is None:
            return None
        found = stored.index.get(key)
        if found is None:
            return None
        if stored.unique:
            return found
        return found[0]

    def lookup_many(self, collection: str, key: Any) -> List[Any]:
        """Return every record sharing `key`, in insertion order; [] if none."""
        stored = self._collections.get(collection)
        if stored is None or key is None:
            return []
        found = stored.index.get(key)
        if found is None:
            return []
        if stored.unique:
            return [found]
        return list(found)

    def lookup_all(self, collection: str) -> List[Any]:
        """Return every record in `collection` in insertion order; [] if unknown."""
        stored = self._collections.get(collection)
        if stored is None:
            return []
        return list(stored.records)

    def collections(self) -> List[str]:
        return list(self._collections)

    def is_unique(self, collection: str) -> bool:
        stored = self._collections.get(collection)
        return stored is None or stored.unique

    def __contains__(self, collection: object) -> bool:
        return collection in self._collections

    def __len__(self) -> int:
        return len(self._collections)

    def __repr__(self) -> str:
        counts = ", ".join(f"{name}={len(c.records)}" for name, c in self._collections.items())
        return f"RelationalCache({counts})"
