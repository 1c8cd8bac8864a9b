from datetime import date

import pytest

from registrar.core.entities import Student
from registrar.core.enums import Grade, EnrollmentStatus
from registrar.core.exceptions import (
    DuplicateEnrollmentError, CreditLimitExceededError, NotEnrolledError,
    InactiveStudentError, EnrollmentError, ValidationError,
)
from registrar.core.interfaces import EnrollmentPolicy
from registrar.services import EnrollmentService, total_credits

from conftest import make_course


class TestEnroll:
    def test_enroll_attaches_enrollment(self, enrollment_service, asha):
        course = make_course("CSE0001", 4)
        result = enrollment_service.enroll_student(asha, course)

        assert result.success
        assert result.status is EnrollmentStatus.CONFIRMED
        assert result.metadata['total_credits'] == 4
        assert [e.course.code for e in asha.enrollments] == ["CSE0001"]

    def test_duplicate_is_rejected(self, enrollment_service, asha):
        course = make_course("CSE0001", 4)
        enrollment_service.enroll_student(asha, course)

        with pytest.raises(DuplicateEnrollmentError) as excinfo:
            enrollment_service.enroll_student(asha, course)
        assert excinfo.value.error_code == "DUPLICATE_ENROLLMENT"
        assert len(asha.enrollments) == 1

    def test_duplicate_checked_by_code(self, enrollment_service, asha):
        enrollment_service.enroll_student(asha, make_course("CSE0001", 4))
        with pytest.raises(DuplicateEnrollmentError):
            enrollment_service.enroll_student(asha, make_course("CSE0001", 4))

    def test_reaching_ceiling_exactly_is_allowed(self, enrollment_service, asha):
        for n, credits in enumerate([10, 10, 7]):
            enrollment_service.enroll_student(asha, make_course(f"CSE000{n}", credits))
        assert total_credits(asha) == 27

    def test_exceeding_ceiling_leaves_student_unchanged(self, enrollment_service, asha):
        enrollment_service.enroll_student(asha, make_course("CSE0001", 20))
        enrollment_service.enroll_student(asha, make_course("CSE0002", 6))

        with pytest.raises(CreditLimitExceededError) as excinfo:
            enrollment_service.enroll_student(asha, make_course("CSE0003", 2))

        assert "27" in excinfo.value.message
        assert excinfo.value.details['current_credits'] == 26
        assert total_credits(asha) == 26
        assert [e.course.code for e in asha.enrollments] == ["CSE0001", "CSE0002"]

    def test_duplicate_reported_before_credit_overflow(self, enrollment_service, asha):
        course = make_course("CSE0001", 20)
        enrollment_service.enroll_student(asha, course)
        with pytest.raises(DuplicateEnrollmentError):
            enrollment_service.enroll_student(asha, course)

    def test_custom_ceiling(self, asha):
        service = EnrollmentService(max_credits=5)
        service.enroll_student(asha, make_course("CSE0001", 4))
        with pytest.raises(CreditLimitExceededError):
            service.enroll_student(asha, make_course("CSE0002", 2))

    def test_ceiling_must_be_positive(self):
        with pytest.raises(ValidationError):
            EnrollmentService(max_credits=0)

    def test_enroll_does_not_check_active_flag(self, enrollment_service, asha):
        asha.deactivate()
        enrollment_service.enroll_student(asha, make_course("CSE0001", 4))
        assert len(asha.enrollments) == 1

    def test_ensure_active(self, enrollment_service, asha):
        enrollment_service.ensure_active(asha)
        asha.deactivate()
        with pytest.raises(InactiveStudentError) as excinfo:
            enrollment_service.ensure_active(asha)
        assert excinfo.value.error_code == "STUDENT_INACTIVE"

    def test_extra_policy(self, enrollment_service, asha):
        class NoMathsPolicy(EnrollmentPolicy):
            def check(self, student, course):
                if course.code.startswith("MAT"):
                    raise EnrollmentError("No maths", error_code="NO_MATHS")

            def get_policy_name(self):
                return "NoMathsPolicy"

        enrollment_service.add_policy(NoMathsPolicy())
        with pytest.raises(EnrollmentError):
            enrollment_service.enroll_student(asha, make_course("MAT0001", 3))

        enrollment_service.remove_policy("NoMathsPolicy")
        enrollment_service.enroll_student(asha, make_course("MAT0001", 3))


class TestUnenroll:
    def test_unenroll(self, enrollment_service, asha):
        course = make_course("CSE0001", 4)
        enrollment_service.enroll_student(asha, course)

        result = enrollment_service.unenroll_student(asha, course)
        assert result.success
        assert result.status is EnrollmentStatus.DROPPED
        assert asha.enrollments == []

    def test_unenroll_when_not_enrolled_is_soft(self, enrollment_service, asha):
        enrollment_service.enroll_student(asha, make_course("CSE0001", 4))

        result = enrollment_service.unenroll_student(asha, make_course("CSE0002", 4))
        assert not result.success
        assert result.status is EnrollmentStatus.NOT_ENROLLED
        assert len(asha.enrollments) == 1

    def test_unenroll_frees_credits(self, enrollment_service, asha):
        big = make_course("CSE0001", 25)
        enrollment_service.enroll_student(asha, big)
        enrollment_service.unenroll_student(asha, big)
        enrollment_service.enroll_student(asha, make_course("CSE0002", 20))
        assert total_credits(asha) == 20


class TestGrades:
    def test_assign_grade(self, enrollment_service, asha):
        course = make_course("CSE0001", 4)
        enrollment_service.enroll_student(asha, course)

        enrollment = enrollment_service.assign_grade(asha, course, Grade.B)
        assert enrollment.grade is Grade.B
        assert asha.find_enrollment("CSE0001").grade is Grade.B

    def test_regrade_overwrites(self, enrollment_service, asha):
        course = make_course("CSE0001", 4)
        enrollment_service.enroll_student(asha, course)
        enrollment_service.assign_grade(asha, course, Grade.F)
        enrollment_service.assign_grade(asha, course, Grade.S)
        assert enrollment_service.calculate_gpa(asha) == 10.0

    def test_assign_grade_without_enrollment_raises(self, enrollment_service, asha):
        with pytest.raises(NotEnrolledError) as excinfo:
            enrollment_service.assign_grade(asha, make_course("CSE0001", 4), Grade.A)
        assert excinfo.value.error_code == "NOT_ENROLLED"

    def test_gpa_without_enrollments(self, enrollment_service, asha):
        assert enrollment_service.calculate_gpa(asha) == 0.0

    def test_gpa_ignores_ungraded(self, enrollment_service, asha):
        graded = make_course("CSE0001", 4)
        enrollment_service.enroll_student(asha, graded)
        enrollment_service.enroll_student(asha, make_course("CSE0002", 4))
        enrollment_service.assign_grade(asha, graded, Grade.A)

        assert enrollment_service.calculate_gpa(asha) == 9.0

    def test_gpa_all_ungraded(self, enrollment_service, asha):
        enrollment_service.enroll_student(asha, make_course("CSE0001", 4))
        assert enrollment_service.calculate_gpa(asha) == 0.0

    def test_gpa_is_credit_weighted(self, enrollment_service, asha):
        four = make_course("CSE0001", 4)
        two = make_course("CSE0002", 2)
        enrollment_service.enroll_student(asha, four)
        enrollment_service.enroll_student(asha, two)
        enrollment_service.assign_grade(asha, four, Grade.S)
        enrollment_service.assign_grade(asha, two, Grade.F)

        assert enrollment_service.calculate_gpa(asha) == pytest.approx(40 / 6)


class TestTranscript:
    def test_scenario(self, enrollment_service, asha):
        python = make_course("CSE0001", 4, "Programming in Python")
        structures = make_course("CSE0002", 4, "Data Structures")
        enrollment_service.enroll_student(asha, python)
        enrollment_service.enroll_student(asha, structures)

        with pytest.raises(DuplicateEnrollmentError):
            enrollment_service.enroll_student(asha, python)

        enrollment_service.assign_grade(asha, python, Grade.A)
        assert enrollment_service.calculate_gpa(asha) == 9.0

        transcript = enrollment_service.generate_transcript(asha)
        lines = transcript.splitlines()
        assert lines[0] == "--- TRANSCRIPT ---"
        assert lines[1] == "Student: Asha Verma (Reg No: 24BCE10001)"
        assert lines[2] == "-" * 50
        assert "(CSE0001)" in lines[3] and "Grade: A " in lines[3]
        assert "(CSE0002)" in lines[4] and "Not Graded" in lines[4]
        assert lines[5] == "-" * 50
        assert lines[6] == "Cumulative GPA: 9.00"
        assert lines[7] == "--- END OF TRANSCRIPT ---"

    def test_empty_transcript(self, enrollment_service):
        student = Student("Rohan Mehta", "rohan@college.edu", date(2004, 11, 2), "24BCE10002")
        lines = enrollment_service.generate_transcript(student).splitlines()
        assert lines[3] == "No courses enrolled."
        assert lines[5] == "Cumulative GPA: 0.00"


def test_statistics(enrollment_service, asha):
    course = make_course("CSE0001", 4)
    enrollment_service.enroll_student(asha, course)
    enrollment_service.enroll_student(asha, make_course("CSE0002", 4))
    enrollment_service.assign_grade(asha, course, Grade.C)

    stats = enrollment_service.get_statistics([asha])
    assert stats['total_enrollments'] == 2
    assert stats['graded_enrollments'] == 1
    assert stats['max_credits'] == 27
    assert stats['active_policies'] == ["DuplicateEnrollmentPolicy", "CreditLimitPolicy"]
