"""
In-memory keyed record stores.
"""

from typing import Dict, Iterator, List, Optional, TypeVar, Generic

from ..core.entities import Student, Instructor, Course
from ..core.interfaces import RecordStore
from ..core.exceptions import ValidationError

T = TypeVar('T')


class InMemoryRecordStore(RecordStore[T], Generic[T]):
    """Dictionary-backed store. ``put`` on an existing key overwrites."""

    def __init__(self, entity_type: str):
        self._entity_type = entity_type
        self._records: Dict[str, T] = {}

    @property
    def entity_type(self) -> str:
        return self._entity_type

    def put(self, key: str, entity: T) -> None:
        """Store an entity under its key."""
        if not key:
            raise ValidationError(f"Cannot store a {self._entity_type} without a key")
        self._records[key] = entity

    def get(self, key: str) -> Optional[T]:
        """Find an entity by key."""
        return self._records.get(key)

    def values(self) -> List[T]:
        """Get all entities in insertion order."""
        return list(self._records.values())

    def clear(self) -> None:
        self._records.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[T]:
        return iter(self.values())


class DataStore:
    """The record stores of one session, constructed once at startup and
    handed to every service that needs them."""

    def __init__(self):
        self.students: InMemoryRecordStore[Student] = InMemoryRecordStore("student")
        self.instructors: InMemoryRecordStore[Instructor] = InMemoryRecordStore("instructor")
        self.courses: InMemoryRecordStore[Course] = InMemoryRecordStore("course")

    def clear(self) -> None:
        """Drop every record, e.g. before reloading from disk."""
        self.students.clear()
        self.instructors.clear()
        self.courses.clear()

    def is_empty(self) -> bool:
        return not (len(self.students) or len(self.instructors) or len(self.courses))

    def get_statistics(self) -> Dict[str, int]:
        """Get record counts per entity type."""
        return {
            'students': len(self.students),
            'instructors': len(self.instructors),
            'courses': len(self.courses),
            'enrollments': sum(len(s.enrollments) for s in self.students.values()),
        }
