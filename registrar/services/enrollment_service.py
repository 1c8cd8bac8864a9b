"""
Enrollment rules, grading, GPA and transcripts.

Rule checks are re-derived from the student's live enrollments on every
call. Two failure modes are deliberately different:

- ``unenroll_student`` for a course the student is not in is a soft
  failure: nothing changes and the returned result says so.
- ``assign_grade`` for a course the student is not in raises
  ``NotEnrolledError``; grading a missing enrollment is a caller error.

The check-then-append in ``enroll_student`` is not atomic. Callers sharing
a store across threads must serialize access per student.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from ..core.entities import Student, Course, Enrollment
from ..core.enums import Grade, EnrollmentStatus, DEFAULT_MAX_CREDITS
from ..core.interfaces import EnrollmentPolicy
from ..core.exceptions import (
    DuplicateEnrollmentError, CreditLimitExceededError, NotEnrolledError,
    InactiveStudentError, ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass
class EnrollmentResult:
    """Result of an enrollment operation."""
    success: bool
    status: EnrollmentStatus
    message: str
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}


def total_credits(student: Student) -> int:
    """Sum of credits over all of the student's current enrollments."""
    return sum(e.course.credits for e in student.enrollments)


class DuplicateEnrollmentPolicy(EnrollmentPolicy):
    """Rejects a second enrollment in the same course code."""

    def check(self, student: Student, course: Course) -> None:
        if student.find_enrollment(course.code) is not None:
            raise DuplicateEnrollmentError(
                f"{student.full_name} is already enrolled in {course.title}",
                error_code="DUPLICATE_ENROLLMENT",
                details={'reg_no': student.reg_no, 'course_code': course.code},
            )

    def get_policy_name(self) -> str:
        return "DuplicateEnrollmentPolicy"


class CreditLimitPolicy(EnrollmentPolicy):
    """Caps the summed credits of a student's enrollments.

    Every attached enrollment counts, whatever its semester.
    """

    def __init__(self, max_credits: int = DEFAULT_MAX_CREDITS):
        if max_credits <= 0:
            raise ValidationError(f"max_credits must be positive, got {max_credits}")
        self._max_credits = max_credits

    @property
    def max_credits(self) -> int:
        return self._max_credits

    def check(self, student: Student, course: Course) -> None:
        current = total_credits(student)
        if current + course.credits > self._max_credits:
            raise CreditLimitExceededError(
                f"Enrollment failed. Max credit limit of {self._max_credits} would be exceeded.",
                error_code="CREDIT_LIMIT_EXCEEDED",
                details={
                    'reg_no': student.reg_no,
                    'course_code': course.code,
                    'current_credits': current,
                    'course_credits': course.credits,
                    'max_credits': self._max_credits,
                },
            )

    def get_policy_name(self) -> str:
        return "CreditLimitPolicy"


class EnrollmentService:
    """Applies the enrollment rules to students and computes their results."""

    def __init__(self, max_credits: int = DEFAULT_MAX_CREDITS):
        self._credit_policy = CreditLimitPolicy(max_credits)
        # Order matters: a duplicate is reported before a credit overflow.
        self._policies: List[EnrollmentPolicy] = [
            DuplicateEnrollmentPolicy(),
            self._credit_policy,
        ]

    @property
    def max_credits(self) -> int:
        return self._credit_policy.max_credits

    def add_policy(self, policy: EnrollmentPolicy) -> None:
        """Add an enrollment policy, checked after the built-in ones."""
        self._policies.append(policy)

    def remove_policy(self, policy_name: str) -> None:
        """Remove an enrollment policy by name."""
        self._policies = [p for p in self._policies if p.get_policy_name() != policy_name]

    def ensure_active(self, student: Student) -> None:
        """Raise InactiveStudentError for deactivated students."""
        if not student.is_active:
            raise InactiveStudentError(
                f"Cannot enroll inactive student {student.reg_no}",
                error_code="STUDENT_INACTIVE",
            )

    def enroll_student(self, student: Student, course: Course) -> EnrollmentResult:
        """Enroll a student in a course.

        Raises DuplicateEnrollmentError or CreditLimitExceededError, leaving
        the student untouched, when a rule rejects the enrollment.
        """
        for policy in self._policies:
            policy.check(student, course)

        enrollment = Enrollment(student, course)
        student.add_enrollment(enrollment)
        logger.info("Enrolled %s in %s", student.reg_no, course.code)

        return EnrollmentResult(
            success=True,
            status=EnrollmentStatus.CONFIRMED,
            message=f"Successfully enrolled {student.full_name} in {course.title}",
            metadata={'total_credits': total_credits(student)},
        )

    def unenroll_student(self, student: Student, course: Course) -> EnrollmentResult:
        """Remove the student's enrollment in a course, if there is one."""
        enrollment = student.find_enrollment(course.code)
        if enrollment is None:
            logger.warning("Unenroll ignored: %s is not enrolled in %s", student.reg_no, course.code)
            return EnrollmentResult(
                success=False,
                status=EnrollmentStatus.NOT_ENROLLED,
                message="Student is not enrolled in that course",
            )

        student.remove_enrollment(enrollment)
        logger.info("Unenrolled %s from %s", student.reg_no, course.code)
        return EnrollmentResult(
            success=True,
            status=EnrollmentStatus.DROPPED,
            message=f"Successfully unenrolled {student.full_name} from {course.title}",
        )

    def assign_grade(self, student: Student, course: Course, grade: Grade) -> Enrollment:
        """Grade the student's enrollment in a course."""
        enrollment = student.find_enrollment(course.code)
        if enrollment is None:
            raise NotEnrolledError(
                "Student is not enrolled in this course.",
                error_code="NOT_ENROLLED",
                details={'reg_no': student.reg_no, 'course_code': course.code},
            )
        enrollment.set_grade(grade)
        return enrollment

    def calculate_gpa(self, student: Student) -> float:
        """Credit-weighted grade point average over graded enrollments only."""
        graded = [e for e in student.enrollments if e.grade is not None]
        if not graded:
            return 0.0

        total_points = sum(e.grade.grade_point * e.course.credits for e in graded)
        credits = sum(e.course.credits for e in graded)
        return total_points / credits if credits else 0.0

    def generate_transcript(self, student: Student) -> str:
        """Render the student's transcript in enrollment order."""
        lines = [
            "--- TRANSCRIPT ---",
            student.profile_details(),
            "-" * 50,
        ]

        enrollments = student.enrollments
        if not enrollments:
            lines.append("No courses enrolled.")
        else:
            lines.extend(e.display_line() for e in enrollments)

        lines.append("-" * 50)
        lines.append(f"Cumulative GPA: {self.calculate_gpa(student):.2f}")
        lines.append("--- END OF TRANSCRIPT ---")
        return "\n".join(lines)

    def get_statistics(self, students: List[Student]) -> Dict[str, Any]:
        """Get enrollment statistics over a collection of students."""
        enrollments = [e for s in students for e in s.enrollments]
        graded = [e for e in enrollments if e.is_graded]
        return {
            'total_enrollments': len(enrollments),
            'graded_enrollments': len(graded),
            'max_credits': self.max_credits,
            'active_policies': [p.get_policy_name() for p in self._policies],
        }
