"""
Core entities of the records domain.

Students and instructors share their personal details by composition rather
than through a common base class; both implement the ``Profile`` interface.
Courses are assembled once through ``CourseBuilder`` and only their
instructor can change afterwards. Enrollments belong to their student.
"""

from datetime import date, datetime
from typing import List, Optional

from .enums import Grade, Semester
from .interfaces import Profile
from .exceptions import ValidationError, InactiveStudentError


class PersonalDetails:
    """Name, email and date of birth shared by students and instructors."""

    def __init__(self, full_name: str, email: str, date_of_birth: date):
        self._full_name = full_name
        self._email = email
        self._date_of_birth = date_of_birth

    @property
    def full_name(self) -> str:
        return self._full_name

    @property
    def email(self) -> str:
        return self._email

    @property
    def date_of_birth(self) -> date:
        return self._date_of_birth

    def update(self, full_name: Optional[str] = None, email: Optional[str] = None) -> None:
        """Replace the name and/or email, leaving omitted fields untouched."""
        if full_name:
            self._full_name = full_name
        if email:
            self._email = email

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PersonalDetails):
            return NotImplemented
        return (self._full_name, self._email, self._date_of_birth) == \
            (other._full_name, other._email, other._date_of_birth)

    def __repr__(self) -> str:
        return f"PersonalDetails(full_name={self._full_name!r}, email={self._email!r})"


class Student(Profile):
    """Student keyed by registration number, owning its enrollments."""

    def __init__(self, full_name: str, email: str, date_of_birth: date, reg_no: str,
                 is_active: bool = True):
        if not reg_no:
            raise ValidationError("Student registration number is required")
        self._details = PersonalDetails(full_name, email, date_of_birth)
        self._reg_no = reg_no
        self._is_active = is_active
        self._enrollments: List["Enrollment"] = []  # insertion order = enrollment order

    @property
    def details(self) -> PersonalDetails:
        return self._details

    @property
    def full_name(self) -> str:
        return self._details.full_name

    @property
    def email(self) -> str:
        return self._details.email

    @property
    def date_of_birth(self) -> date:
        return self._details.date_of_birth

    @property
    def reg_no(self) -> str:
        return self._reg_no

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def enrollments(self) -> List["Enrollment"]:
        """Get a copy of the enrollments in enrollment order."""
        return list(self._enrollments)

    def add_enrollment(self, enrollment: "Enrollment") -> None:
        """Attach an enrollment. Rule checks are the enrollment service's job."""
        self._enrollments.append(enrollment)

    def remove_enrollment(self, enrollment: "Enrollment") -> None:
        """Detach an enrollment."""
        self._enrollments.remove(enrollment)

    def find_enrollment(self, course_code: str) -> Optional["Enrollment"]:
        """Find the first enrollment for a course code."""
        for enrollment in self._enrollments:
            if enrollment.course.code == course_code:
                return enrollment
        return None

    def set_active(self, active: bool) -> None:
        self._is_active = active

    def deactivate(self) -> None:
        """Deactivate the student."""
        self._is_active = False

    def update_details(self, full_name: Optional[str] = None, email: Optional[str] = None) -> None:
        """Update name and/or email. Deactivated students cannot be edited."""
        if not self._is_active:
            raise InactiveStudentError(
                f"Cannot update details for deactivated student {self._reg_no}",
                error_code="STUDENT_INACTIVE",
            )
        self._details.update(full_name=full_name, email=email)

    def profile_details(self) -> str:
        return f"Student: {self.full_name} (Reg No: {self._reg_no})"

    def __str__(self) -> str:
        return self.profile_details()

    def __repr__(self) -> str:
        return f"Student(reg_no={self._reg_no!r}, active={self._is_active})"


class Instructor(Profile):
    """Instructor keyed by employee id."""

    def __init__(self, instructor_id: str, full_name: str, email: str, date_of_birth: date,
                 employee_id: str, department: str):
        if not employee_id:
            raise ValidationError("Instructor employee id is required")
        self._details = PersonalDetails(full_name, email, date_of_birth)
        self._instructor_id = instructor_id
        self._employee_id = employee_id
        self._department = department
        # Derived view; Course.instructor is the authoritative link.
        self._assigned_courses: List["Course"] = []

    @property
    def details(self) -> PersonalDetails:
        return self._details

    @property
    def instructor_id(self) -> str:
        return self._instructor_id

    @property
    def full_name(self) -> str:
        return self._details.full_name

    @property
    def email(self) -> str:
        return self._details.email

    @property
    def date_of_birth(self) -> date:
        return self._details.date_of_birth

    @property
    def employee_id(self) -> str:
        return self._employee_id

    @property
    def department(self) -> str:
        return self._department

    @property
    def assigned_courses(self) -> List["Course"]:
        return list(self._assigned_courses)

    def assign_course(self, course: "Course") -> None:
        """Record a course taught by this instructor."""
        if all(c.code != course.code for c in self._assigned_courses):
            self._assigned_courses.append(course)

    def release_course(self, course: "Course") -> None:
        self._assigned_courses = [c for c in self._assigned_courses if c.code != course.code]

    def profile_details(self) -> str:
        return f"Instructor: {self.full_name} (ID: {self._employee_id}, Dept: {self._department})"

    def __str__(self) -> str:
        return self.full_name

    def __repr__(self) -> str:
        return f"Instructor(employee_id={self._employee_id!r})"


class Course:
    """Course keyed by code. Build instances with ``CourseBuilder``."""

    def __init__(self, code: str, title: str, credits: int, department: str,
                 semester: Semester, instructor: Optional[Instructor] = None):
        self._code = code
        self._title = title
        self._credits = credits
        self._department = department
        self._semester = semester
        self._instructor = instructor

    @property
    def code(self) -> str:
        return self._code

    @property
    def title(self) -> str:
        return self._title

    @property
    def credits(self) -> int:
        return self._credits

    @property
    def department(self) -> str:
        return self._department

    @property
    def semester(self) -> Semester:
        return self._semester

    @property
    def instructor(self) -> Optional[Instructor]:
        return self._instructor

    def assign_instructor(self, instructor: Optional[Instructor]) -> None:
        """Set or clear the owning instructor."""
        self._instructor = instructor

    def __str__(self) -> str:
        return f"Course: [{self._code}] {self._title} ({self._credits} credits)"

    def __repr__(self) -> str:
        return f"Course(code={self._code!r}, credits={self._credits})"


class CourseBuilder:
    """Fluent builder for ``Course``."""

    def __init__(self, code: str, title: str):
        self._code = code
        self._title = title
        self._credits = 0
        self._department = ""
        self._semester: Optional[Semester] = None
        self._instructor: Optional[Instructor] = None

    def credits(self, credits: int) -> "CourseBuilder":
        self._credits = credits
        return self

    def department(self, department: str) -> "CourseBuilder":
        self._department = department
        return self

    def semester(self, semester: Semester) -> "CourseBuilder":
        self._semester = semester
        return self

    def instructor(self, instructor: Optional[Instructor]) -> "CourseBuilder":
        self._instructor = instructor
        return self

    def build(self) -> Course:
        if not self._code:
            raise ValidationError("Course code is required")
        if self._credits <= 0:
            raise ValidationError(f"Course credits must be positive, got {self._credits}")
        if self._semester is None:
            raise ValidationError(f"Course {self._code} needs a semester")
        return Course(
            code=self._code,
            title=self._title,
            credits=self._credits,
            department=self._department,
            semester=self._semester,
            instructor=self._instructor,
        )


class Enrollment:
    """A student's enrollment in a course, optionally graded."""

    def __init__(self, student: Student, course: Course, created_at: Optional[datetime] = None):
        if student is None or course is None:
            raise ValidationError("Student and Course cannot be None for an enrollment")
        self._student = student
        self._course = course
        self._grade: Optional[Grade] = None
        self._created_at = created_at or datetime.now()

    @property
    def student(self) -> Student:
        return self._student

    @property
    def course(self) -> Course:
        return self._course

    @property
    def grade(self) -> Optional[Grade]:
        return self._grade

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def is_graded(self) -> bool:
        return self._grade is not None

    def set_grade(self, grade: Optional[Grade]) -> None:
        self._grade = grade

    def display_line(self) -> str:
        """Render the enrollment as a transcript line."""
        grade = self._grade.name if self._grade is not None else "Not Graded"
        course = f"{self._course.title} ({self._course.code})"
        return (f"Course: {course:<25} | Grade: {grade:<12} | "
                f"Credits: {self._course.credits} | "
                f"Enrolled on: {self._created_at.strftime('%Y-%m-%d')}")

    def __repr__(self) -> str:
        grade = self._grade.name if self._grade else None
        return f"Enrollment(student={self._student.reg_no!r}, course={self._course.code!r}, grade={grade})"
