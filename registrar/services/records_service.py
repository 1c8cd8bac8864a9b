"""
Catalog operations over the record stores: adding, finding and updating
students, instructors and courses.
"""

import logging
from typing import List, Optional

from ..core.entities import Student, Instructor, Course
from ..core.enums import Semester
from ..core.exceptions import ResourceNotFoundError
from ..persistence.record_store import DataStore

logger = logging.getLogger(__name__)


class RecordsService:
    """Lookup and maintenance of the keyed records."""

    def __init__(self, store: DataStore):
        self._store = store

    @property
    def store(self) -> DataStore:
        return self._store

    # Students

    def add_student(self, student: Student) -> Student:
        self._store.students.put(student.reg_no, student)
        return student

    def find_student(self, reg_no: str) -> Optional[Student]:
        return self._store.students.get(reg_no)

    def get_student(self, reg_no: str) -> Student:
        """Like ``find_student`` but raises ResourceNotFoundError."""
        student = self._store.students.get(reg_no)
        if student is None:
            raise ResourceNotFoundError(f"No student found with registration number: {reg_no}")
        return student

    def list_students(self) -> List[Student]:
        return self._store.students.values()

    def update_student(self, reg_no: str, full_name: Optional[str] = None,
                       email: Optional[str] = None) -> Student:
        student = self.get_student(reg_no)
        student.update_details(full_name=full_name, email=email)
        return student

    def deactivate_student(self, reg_no: str) -> Student:
        student = self.get_student(reg_no)
        student.deactivate()
        logger.info("Deactivated student %s", reg_no)
        return student

    # Instructors

    def add_instructor(self, instructor: Instructor) -> Instructor:
        self._store.instructors.put(instructor.employee_id, instructor)
        return instructor

    def find_instructor(self, employee_id: str) -> Optional[Instructor]:
        return self._store.instructors.get(employee_id)

    def get_instructor(self, employee_id: str) -> Instructor:
        instructor = self._store.instructors.get(employee_id)
        if instructor is None:
            raise ResourceNotFoundError(f"No instructor found with employee id: {employee_id}")
        return instructor

    def list_instructors(self) -> List[Instructor]:
        return self._store.instructors.values()

    # Courses

    def add_course(self, course: Course) -> Course:
        self._store.courses.put(course.code, course)
        if course.instructor is not None:
            course.instructor.assign_course(course)
        return course

    def find_course(self, code: str) -> Optional[Course]:
        return self._store.courses.get(code)

    def get_course(self, code: str) -> Course:
        course = self._store.courses.get(code)
        if course is None:
            raise ResourceNotFoundError(f"No course found with code: {code}")
        return course

    def list_courses(self) -> List[Course]:
        return self._store.courses.values()

    def find_courses_by_department(self, department: str) -> List[Course]:
        wanted = department.strip().lower()
        return [c for c in self._store.courses.values() if c.department.lower() == wanted]

    def find_courses_by_semester(self, semester: Semester) -> List[Course]:
        return [c for c in self._store.courses.values() if c.semester == semester]

    def assign_instructor(self, course_code: str, employee_id: str) -> Course:
        """Make an instructor the owner of a course."""
        course = self.get_course(course_code)
        instructor = self.get_instructor(employee_id)

        previous = course.instructor
        if previous is not None and previous is not instructor:
            previous.release_course(course)

        course.assign_instructor(instructor)
        instructor.assign_course(course)
        logger.info("Assigned %s to %s", employee_id, course_code)
        return course
