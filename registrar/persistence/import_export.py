"""
Flat-file import and export of the record stores.

One comma-delimited file per entity type, one record per line, no header
and no quoting. Absent references are written as ``NULL``. Exports
truncate and rewrite their file; imports parse every line on its own and
skip malformed lines with a warning, so a hand-edited file loads as far as
it can.

Imports resolve references through the stores, so the order matters:
students and instructors, then courses, then enrollments. ``load_all``
runs them in that order.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from ..core.entities import Student, Instructor, Course, CourseBuilder
from ..core.enums import Grade, Semester, EntityType, DELIMITER, NULL_SENTINEL, DATE_FORMAT
from ..core.exceptions import EnrollmentError, PersistenceError, ValidationError
from ..services.enrollment_service import EnrollmentService
from .record_store import DataStore

logger = logging.getLogger(__name__)

T = TypeVar('T')

STUDENTS_FILE = "students.csv"
INSTRUCTORS_FILE = "instructors.csv"
COURSES_FILE = "courses.csv"
ENROLLMENTS_FILE = "enrollments.csv"


@dataclass
class TransferResult:
    """Outcome of importing or exporting one file."""
    entity_type: EntityType
    operation: str
    processed: int = 0
    skipped: int = 0
    failed: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed

    def skip(self, message: str) -> None:
        """Record a record-level problem; the transfer carries on."""
        self.skipped += 1
        self.errors.append(message)
        logger.warning(message)

    def fail(self, message: str) -> None:
        """Record a file-level I/O failure."""
        self.failed = True
        self.errors.append(message)
        logger.error(message)


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_date(value: str) -> date:
    return datetime.strptime(value.strip(), DATE_FORMAT).date()


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"expected true or false, got '{value}'")


def is_null(value: str) -> bool:
    return value.strip().upper() == NULL_SENTINEL


def encode_row(fields: Sequence[str]) -> str:
    """Join fields into one line, refusing fields that would not read back as written.

    Any character ``str.splitlines`` treats as a boundary is refused, not just
    ``\\n`` and ``\\r``. Import strips fields, so padded values are refused too.
    """
    for value in fields:
        if DELIMITER in value or (value and value.splitlines() != [value]):
            raise PersistenceError(
                f"Field {value!r} contains the delimiter or a line break",
                error_code="UNENCODABLE_FIELD",
            )
        if value != value.strip():
            raise PersistenceError(
                f"Field {value!r} has leading or trailing whitespace",
                error_code="UNENCODABLE_FIELD",
            )
    return DELIMITER.join(fields)


class ImportExportService:
    """Reads and writes the record stores as flat files under ``data_dir``."""

    def __init__(self, store: DataStore, enrollment_service: EnrollmentService,
                 data_dir: str = "data"):
        self._store = store
        self._enrollment_service = enrollment_service
        self._data_dir = data_dir

    @property
    def data_dir(self) -> str:
        return self._data_dir

    def _get_path(self, filename: str) -> str:
        return os.path.join(self._data_dir, filename)

    # Low-level file access

    def _export(self, entity_type: EntityType, filename: str, entities: Iterable[T],
                to_fields: Callable[[T], Sequence[str]], describe: Callable[[T], str]) -> TransferResult:
        result = TransferResult(entity_type, "export")
        lines = []
        for entity in entities:
            try:
                lines.append(encode_row(to_fields(entity)))
                result.processed += 1
            except PersistenceError as e:
                result.skip(f"Not exporting {entity_type.value} {describe(entity)}: {e.message}")

        path = self._get_path(filename)
        try:
            os.makedirs(self._data_dir, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                for line in lines:
                    f.write(line + "\n")
        except OSError as e:
            result.processed = 0
            result.fail(f"Failed to export {entity_type.value}s to {path}: {e}")
        return result

    def _read_rows(self, filename: str, result: TransferResult) -> Iterator[Tuple[int, str, List[str]]]:
        """Yield (line number, raw line, fields) for each non-blank line.

        A missing file yields nothing. An unreadable file marks the result
        as failed.
        """
        path = self._get_path(filename)
        if not os.path.exists(path):
            return

        try:
            # Universal newlines: only \n, \r and \r\n end a record.
            with open(path, "r", encoding="utf-8") as f:
                lines = [line.rstrip("\n") for line in f]
        except (OSError, UnicodeDecodeError) as e:
            result.fail(f"Failed to import {result.entity_type.value}s from {path}: {e}")
            return

        for line_num, line in enumerate(lines, 1):
            if not line.strip():
                continue
            yield line_num, line, [part.strip() for part in line.split(DELIMITER)]

    def _check_width(self, result: TransferResult, filename: str, line_num: int, line: str,
                     parts: List[str], minimum: int, maximum: int) -> bool:
        if minimum <= len(parts) <= maximum:
            return True
        expected = str(minimum) if minimum == maximum else f"{minimum}-{maximum}"
        result.skip(f"Skipping {filename} line {line_num}: expected {expected} fields, "
                    f"got {len(parts)}: {line!r}")
        return False

    # Students

    def export_students(self, students: Optional[Iterable[Student]] = None) -> TransferResult:
        """Write students.csv: fullName, email, dateOfBirth, regNo, activeFlag."""
        return self._export(
            EntityType.STUDENT, STUDENTS_FILE,
            self._store.students.values() if students is None else students,
            lambda s: (s.full_name, s.email, format_date(s.date_of_birth), s.reg_no,
                       "true" if s.is_active else "false"),
            lambda s: s.reg_no,
        )

    def import_students(self) -> TransferResult:
        result = TransferResult(EntityType.STUDENT, "import")
        for line_num, line, parts in self._read_rows(STUDENTS_FILE, result):
            if not self._check_width(result, STUDENTS_FILE, line_num, line, parts, 4, 5):
                continue
            try:
                # Files written before the active flag existed have 4 columns.
                active = parse_bool(parts[4]) if len(parts) > 4 else True
                student = Student(parts[0], parts[1], parse_date(parts[2]), parts[3],
                                  is_active=active)
            except (ValueError, ValidationError) as e:
                result.skip(f"Skipping {STUDENTS_FILE} line {line_num} ({e}): {line!r}")
                continue
            self._store.students.put(student.reg_no, student)
            result.processed += 1
        return result

    # Instructors

    def export_instructors(self, instructors: Optional[Iterable[Instructor]] = None) -> TransferResult:
        """Write instructors.csv: id, fullName, email, dateOfBirth, employeeId, department."""
        return self._export(
            EntityType.INSTRUCTOR, INSTRUCTORS_FILE,
            self._store.instructors.values() if instructors is None else instructors,
            lambda i: (i.instructor_id, i.full_name, i.email, format_date(i.date_of_birth),
                       i.employee_id, i.department),
            lambda i: i.employee_id,
        )

    def import_instructors(self) -> TransferResult:
        result = TransferResult(EntityType.INSTRUCTOR, "import")
        for line_num, line, parts in self._read_rows(INSTRUCTORS_FILE, result):
            if not self._check_width(result, INSTRUCTORS_FILE, line_num, line, parts, 6, 6):
                continue
            try:
                instructor = Instructor(parts[0], parts[1], parts[2], parse_date(parts[3]),
                                        parts[4], parts[5])
            except (ValueError, ValidationError) as e:
                result.skip(f"Skipping {INSTRUCTORS_FILE} line {line_num} ({e}): {line!r}")
                continue
            self._store.instructors.put(instructor.employee_id, instructor)
            result.processed += 1
        return result

    # Courses

    def export_courses(self, courses: Optional[Iterable[Course]] = None) -> TransferResult:
        """Write courses.csv: code, title, credits, department, semester, instructorEmployeeId."""
        return self._export(
            EntityType.COURSE, COURSES_FILE,
            self._store.courses.values() if courses is None else courses,
            lambda c: (c.code, c.title, str(c.credits), c.department, c.semester.name,
                       c.instructor.employee_id if c.instructor is not None else NULL_SENTINEL),
            lambda c: c.code,
        )

    def import_courses(self) -> TransferResult:
        """Load courses, linking each to its instructor when the id resolves."""
        result = TransferResult(EntityType.COURSE, "import")
        for line_num, line, parts in self._read_rows(COURSES_FILE, result):
            if not self._check_width(result, COURSES_FILE, line_num, line, parts, 5, 6):
                continue
            try:
                course = (CourseBuilder(parts[0], parts[1])
                          .credits(int(parts[2]))
                          .department(parts[3])
                          .semester(Semester[parts[4]])
                          .build())
            except KeyError:
                result.skip(f"Skipping {COURSES_FILE} line {line_num} (unknown semester "
                            f"'{parts[4]}'): {line!r}")
                continue
            except (ValueError, ValidationError) as e:
                result.skip(f"Skipping {COURSES_FILE} line {line_num} ({e}): {line!r}")
                continue

            previous = self._store.courses.get(course.code)
            if previous is not None and previous.instructor is not None:
                previous.instructor.release_course(previous)

            if len(parts) > 5 and not is_null(parts[5]):
                instructor = self._store.instructors.get(parts[5])
                if instructor is None:
                    logger.warning("Course %s references unknown instructor %s; left unassigned",
                                   course.code, parts[5])
                else:
                    course.assign_instructor(instructor)
                    instructor.assign_course(course)

            self._store.courses.put(course.code, course)
            result.processed += 1
        return result

    # Enrollments

    def export_enrollments(self, students: Optional[Iterable[Student]] = None) -> TransferResult:
        """Write enrollments.csv: studentRegNo, courseCode, grade."""
        source = self._store.students.values() if students is None else students
        enrollments = [e for s in source for e in s.enrollments]
        return self._export(
            EntityType.ENROLLMENT, ENROLLMENTS_FILE, enrollments,
            lambda e: (e.student.reg_no, e.course.code,
                       e.grade.name if e.grade is not None else NULL_SENTINEL),
            lambda e: f"{e.student.reg_no}/{e.course.code}",
        )

    def import_enrollments(self) -> TransferResult:
        """Re-apply enrollments through the enrollment rules.

        Rows the rules reject (typically because the enrollment is already
        there) are ignored silently, so importing the same file twice is
        harmless.
        """
        result = TransferResult(EntityType.ENROLLMENT, "import")
        for line_num, line, parts in self._read_rows(ENROLLMENTS_FILE, result):
            if not self._check_width(result, ENROLLMENTS_FILE, line_num, line, parts, 2, 3):
                continue

            grade = None
            if len(parts) > 2 and not is_null(parts[2]):
                try:
                    grade = Grade[parts[2]]
                except KeyError:
                    result.skip(f"Skipping {ENROLLMENTS_FILE} line {line_num} (unknown grade "
                                f"'{parts[2]}'): {line!r}")
                    continue

            student = self._store.students.get(parts[0])
            course = self._store.courses.get(parts[1])
            if student is None or course is None:
                missing = "student" if student is None else "course"
                result.skip(f"Skipping {ENROLLMENTS_FILE} line {line_num} (unknown {missing}): {line!r}")
                continue

            try:
                self._enrollment_service.enroll_student(student, course)
            except EnrollmentError as e:
                logger.debug("Enrollment %s/%s not re-applied: %s", student.reg_no, course.code, e)

            if grade is not None:
                try:
                    self._enrollment_service.assign_grade(student, course, grade)
                except EnrollmentError as e:
                    result.skip(f"Could not grade {ENROLLMENTS_FILE} line {line_num} ({e}): {line!r}")
                    continue
            result.processed += 1
        return result

    # Whole data set

    def load_all(self) -> List[TransferResult]:
        """Import every file in dependency order."""
        return [
            self.import_students(),
            self.import_instructors(),
            self.import_courses(),
            self.import_enrollments(),
        ]

    def save_all(self) -> List[TransferResult]:
        """Export every record store."""
        return [
            self.export_students(),
            self.export_instructors(),
            self.export_courses(),
            self.export_enrollments(),
        ]
