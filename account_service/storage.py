"""
Storage Backend Module

Thread-safe in-memory table store backing the ledger. Records are plain
dictionaries with Decimal values kept as strings and datetimes as ISO
strings; callers always receive copies, never the live collections.
Nothing is persisted: the process owns the data for its lifetime.
"""

from typing import Dict, List, Optional, Any, Tuple
from decimal import Decimal
from datetime import datetime
from enum import Enum
import json
import threading
from dataclasses import dataclass, asdict, fields
from contextlib import contextmanager


@dataclass
class StorageRecord:
    """Base class for all stored records"""
    id: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        result = asdict(self)
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Decimal):
                result[f.name] = str(value)
            elif isinstance(value, datetime):
                result[f.name] = value.isoformat()
            elif isinstance(value, Enum):
                result[f.name] = value.value
        return result


# (table, record_id, previous record or None, position before delete)
JournalEntry = Tuple[str, str, Optional[Dict[str, Any]], Optional[int]]


class InMemoryStorage:
    """
    In-memory storage with a single reentrant lock over every table.

    ``atomic()`` holds the lock for a whole unit of work and journals each
    write so the unit can be undone if an exception escapes it.
    """

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self._journal: Optional[List[JournalEntry]] = None
        self._depth = 0

    def _ensure_table(self, table: str) -> Dict[str, Dict[str, Any]]:
        """Ensure table exists"""
        if table not in self._data:
            self._data[table] = {}
        return self._data[table]

    @staticmethod
    def _copy(record: Dict[str, Any]) -> Dict[str, Any]:
        # Deep copy to prevent external mutation
        return json.loads(json.dumps(record, default=str))

    def _record_change(self, table: str, record_id: str, previous: Optional[Dict[str, Any]],
                       position: Optional[int] = None) -> None:
        if self._journal is not None:
            self._journal.append((table, record_id, previous, position))

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Insert or overwrite a record; new records go to the end of the table"""
        with self._lock:
            rows = self._ensure_table(table)
            self._record_change(table, record_id, rows.get(record_id))
            rows[record_id] = self._copy(data)

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from memory"""
        with self._lock:
            record = self._ensure_table(table).get(record_id)
            if record is not None:
                return self._copy(record)
            return None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table in insertion order"""
        with self._lock:
            return [self._copy(record) for record in self._ensure_table(table).values()]

    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record from memory"""
        with self._lock:
            rows = self._ensure_table(table)
            if record_id not in rows:
                return False
            position = list(rows).index(record_id)
            self._record_change(table, record_id, rows[record_id], position)
            del rows[record_id]
            return True

    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        with self._lock:
            return record_id in self._ensure_table(table)

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching all filters, in insertion order"""
        with self._lock:
            results = []
            for record in self._ensure_table(table).values():
                if all(key in record and record[key] == value for key, value in filters.items()):
                    results.append(self._copy(record))
            return results

    def count(self, table: str) -> int:
        """Count records in table"""
        with self._lock:
            return len(self._ensure_table(table))

    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        with self._lock:
            for record_id in list(self._ensure_table(table)):
                self.delete(table, record_id)

    def begin_transaction(self) -> None:
        """Acquire the lock and start journalling writes"""
        self._lock.acquire()
        if self._depth == 0:
            self._journal = []
        self._depth += 1

    def commit(self) -> None:
        """Finish the current unit of work"""
        self._depth -= 1
        if self._depth == 0:
            self._journal = None
        self._lock.release()

    def rollback(self) -> None:
        """Undo every write of the outermost unit of work"""
        self._depth -= 1
        if self._depth == 0:
            journal, self._journal = self._journal or [], None
            for table, record_id, previous, position in reversed(journal):
                rows = self._data[table]
                if previous is None:
                    rows.pop(record_id, None)
                elif position is None:
                    rows[record_id] = previous
                else:
                    items = list(rows.items())
                    items.insert(position, (record_id, previous))
                    self._data[table] = dict(items)
        self._lock.release()

    @contextmanager
    def atomic(self):
        """Context manager for atomic operations"""
        self.begin_transaction()
        try:
            yield
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def close(self) -> None:
        """Close storage (no-op for in-memory)"""
        pass

