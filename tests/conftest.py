from datetime import date

import pytest

from registrar.core.entities import Student, Instructor, CourseBuilder
from registrar.core.enums import Semester
from registrar.persistence import DataStore, ImportExportService
from registrar.services import EnrollmentService, RecordsService, BackupService


def make_course(code, credits, title=None, department="Computer Science", semester=Semester.FALL):
    return (CourseBuilder(code, title or f"Course {code}")
            .credits(credits)
            .department(department)
            .semester(semester)
            .build())


@pytest.fixture
def store():
    return DataStore()


@pytest.fixture
def enrollment_service():
    return EnrollmentService()


@pytest.fixture
def records(store):
    return RecordsService(store)


@pytest.fixture
def data_dir(tmp_path):
    return str(tmp_path / "data")


@pytest.fixture
def io_service(store, enrollment_service, data_dir):
    return ImportExportService(store, enrollment_service, data_dir)


@pytest.fixture
def backup_service(tmp_path, data_dir):
    return BackupService(data_dir, str(tmp_path / "backups"))


@pytest.fixture
def asha():
    return Student("Asha Verma", "asha.verma@college.edu", date(2005, 3, 21), "24BCE10001")


@pytest.fixture
def instructor():
    return Instructor("I001", "Ravi Kumar", "ravi.kumar@college.edu", date(1980, 4, 12),
                      "EMP001", "Computer Science")


@pytest.fixture
def populated(records, asha, instructor):
    """Records holding one student, one instructor and three courses."""
    records.add_student(asha)
    records.add_instructor(instructor)
    records.add_course(make_course("CSE0001", 4, "Programming in Python"))
    records.add_course(make_course("CSE0002", 4, "Data Structures"))
    records.add_course(make_course("MAT0001", 3, "Linear Algebra", "Mathematics", Semester.WINTER))
    records.assign_instructor("CSE0001", instructor.employee_id)
    return records
