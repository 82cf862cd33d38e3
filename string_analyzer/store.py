import logging
import threading
from typing import Dict, Iterator, List, Protocol

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .errors import Conflict, NotFound
from .matcher import matches, to_store_query
from .models import AnalyzedString, StringCharacter
from .schemas import FilterSpec, StringProperties, StringRecord

logger = logging.getLogger("string_analyzer.store")


class Store(Protocol):
    def put(self, record: StringRecord) -> StringRecord: ...

    def get_by_id(self, identifier: str) -> StringRecord: ...

    def find(self, spec: FilterSpec) -> List[StringRecord]: ...

    def delete_by_id(self, identifier: str) -> bool: ...


def _to_record(row: AnalyzedString) -> StringRecord:
    return StringRecord(
        id=row.id,
        value=row.value,
        properties=StringProperties(
            length=row.length,
            is_palindrome=row.is_palindrome,
            unique_characters=row.unique_characters,
            word_count=row.word_count,
            sha256_hash=row.sha256_hash,
            character_frequency_map=dict(row.character_frequency_map),
        ),
        created_at=row.created_at,
    )


class SqlStore:
    """Store backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def put(self, record: StringRecord) -> StringRecord:
        # One INSERT transaction; the primary key enforces uniqueness.
        props = record.properties
        try:
            self.db.execute(
                insert(AnalyzedString).values(
                    id=record.id,
                    value=record.value,
                    length=props.length,
                    is_palindrome=props.is_palindrome,
                    unique_characters=props.unique_characters,
                    word_count=props.word_count,
                    sha256_hash=props.sha256_hash,
                    character_frequency_map=props.character_frequency_map,
                    created_at=record.created_at,
                )
            )
            rows = [
                {"string_id": record.id, "character": c, "count": n}
                for c, n in props.character_frequency_map.items()
            ]
            if rows:
                self.db.execute(insert(StringCharacter), rows)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("Rejected duplicate string %s", record.id)
            raise Conflict(record.id)
        logger.info("Stored string %s", record.id)
        return record

    def get_by_id(self, identifier: str) -> StringRecord:
        row = self.db.get(AnalyzedString, identifier)
        if row is None:
            raise NotFound(identifier)
        return _to_record(row)

    def find(self, spec: FilterSpec) -> List[StringRecord]:
        rows = self.db.scalars(to_store_query(spec)).all()
        logger.debug("Query %s matched %d strings", spec.applied(), len(rows))
        return [_to_record(r) for r in rows]

    def delete_by_id(self, identifier: str) -> bool:
        self.db.execute(delete(StringCharacter).where(StringCharacter.string_id == identifier))
        result = self.db.execute(delete(AnalyzedString).where(AnalyzedString.id == identifier))
        self.db.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted string %s", identifier)
        return deleted


class MemoryStore:
    """In-process store keyed by identifier. Nothing survives a restart."""

    def __init__(self):
        self._records: Dict[str, StringRecord] = {}
        self._lock = threading.Lock()

    def put(self, record: StringRecord) -> StringRecord:
        with self._lock:
            if record.id in self._records:
                logger.info("Rejected duplicate string %s", record.id)
                raise Conflict(record.id)
            self._records[record.id] = record
        logger.info("Stored string %s", record.id)
        return record

    def get_by_id(self, identifier: str) -> StringRecord:
        with self._lock:
            record = self._records.get(identifier)
        if record is None:
            raise NotFound(identifier)
        return record

    def find(self, spec: FilterSpec) -> List[StringRecord]:
        with self._lock:
            records = list(self._records.values())
        found = [r for r in records if matches(spec, r.properties)]
        found.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return found

    def delete_by_id(self, identifier: str) -> bool:
        with self._lock:
            deleted = self._records.pop(identifier, None) is not None
        if deleted:
            logger.info("Deleted string %s", identifier)
        return deleted

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


memory_store = MemoryStore()


def get_store() -> Iterator[Store]:
    """FastAPI dependency yielding the configured store."""
    if settings.STORE_BACKEND == "memory":
        yield memory_store
        return

    sessions = get_db()
    try:
        yield SqlStore(next(sessions))
    finally:
        sessions.close()
