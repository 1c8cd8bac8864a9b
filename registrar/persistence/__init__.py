"""
Persistence module: keyed record stores and flat-file import/export.
"""

from .record_store import InMemoryRecordStore, DataStore
from .import_export import (
    ImportExportService, TransferResult,
    STUDENTS_FILE, INSTRUCTORS_FILE, COURSES_FILE, ENROLLMENTS_FILE,
)

__all__ = [
    "InMemoryRecordStore",
    "DataStore",
    "ImportExportService",
    "TransferResult",
    "STUDENTS_FILE",
    "INSTRUCTORS_FILE",
    "COURSES_FILE",
    "ENROLLMENTS_FILE",
]
