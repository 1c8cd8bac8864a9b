#!/usr/bin/env python3
"""
Demo scenario for the registrar.
"""

import sys
import os
import json
import tempfile

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from registrar.main import RegistrarPlatform
from registrar.config import RegistrarConfig
from registrar.core.entities import CourseBuilder
from registrar.core.enums import Grade, Semester
from registrar.core.exceptions import EnrollmentError, RegistrarException


def run_demo():
    """Run a walkthrough of the registrar in a scratch data directory."""
    print("=" * 60)
    print("REGISTRAR ACADEMIC RECORDS - DEMO")
    print("=" * 60)

    workdir = tempfile.mkdtemp(prefix="registrar_demo_")
    config = RegistrarConfig(
        data_dir=os.path.join(workdir, "data"),
        backup_dir=os.path.join(workdir, "backups"),
    )
    platform = RegistrarPlatform(config)

    try:
        print("\n1. Creating sample data...")
        platform.create_sample_data()

        print("\n2. Demonstrating enrollment rules...")
        demonstrate_enrollment(platform)

        print("\n3. Demonstrating grades and transcripts...")
        demonstrate_grading(platform)

        print("\n4. Demonstrating save, reload and backup...")
        demonstrate_persistence(platform)

        print("\n5. Statistics...")
        show_statistics(platform)

        print("\n" + "=" * 60)
        print("DEMO COMPLETED SUCCESSFULLY!")
        print("=" * 60)

    except RegistrarException as e:
        print(f"\nDemo failed with error: {e.message}")
        import traceback
        traceback.print_exc()

    print(f"\nDemo files left in {workdir}")


def _try_enroll(platform, reg_no, course_code):
    records = platform.records
    student = records.get_student(reg_no)
    course = records.get_course(course_code)
    try:
        platform.enrollment_service.ensure_active(student)
        result = platform.enrollment_service.enroll_student(student, course)
        print(f"  ✓ {result.message} (total credits: {result.metadata['total_credits']})")
    except EnrollmentError as e:
        print(f"  ✗ {course_code}: {e.message} [{e.error_code}]")


def demonstrate_enrollment(platform):
    """Show accepted, duplicate and over-limit enrollments."""
    print("  Enrolling Asha in two courses...")
    _try_enroll(platform, "24BCE10001", "CSE0001")
    _try_enroll(platform, "24BCE10001", "CSE0002")

    print("  Enrolling Asha in CSE0001 again...")
    _try_enroll(platform, "24BCE10001", "CSE0001")

    print("  Filling Rohan up to the credit ceiling...")
    for n in range(1, 5):
        platform.records.add_course(
            CourseBuilder(f"ELE000{n}", f"Elective {n}").credits(6)
            .department("Electives").semester(Semester.INTERIM).build()
        )
    for n in range(1, 5):
        _try_enroll(platform, "24BCE10002", f"ELE000{n}")
    _try_enroll(platform, "24BCE10002", "CSE0002")

    print("  Deactivating Rohan and trying once more...")
    platform.records.deactivate_student("24BCE10002")
    _try_enroll(platform, "24BCE10002", "MAT0001")

    print("  Unenrolling Asha from a course she never took...")
    result = platform.enrollment_service.unenroll_student(
        platform.records.get_student("24BCE10001"), platform.records.get_course("MAT0001")
    )
    print(f"  {result.status.value}: {result.message}")


def demonstrate_grading(platform):
    """Grade Asha's courses and print her transcript."""
    service = platform.enrollment_service
    asha = platform.records.get_student("24BCE10001")

    service.assign_grade(asha, platform.records.get_course("CSE0001"), Grade.A)
    print(f"  GPA with one graded course: {service.calculate_gpa(asha):.2f}")

    try:
        service.assign_grade(asha, platform.records.get_course("MAT0001"), Grade.S)
    except EnrollmentError as e:
        print(f"  ✗ Grading MAT0001: {e.message}")

    service.assign_grade(asha, platform.records.get_course("CSE0002"), Grade.A)
    print()
    print(service.generate_transcript(asha))


def demonstrate_persistence(platform):
    """Save to the data files, reload into a fresh store and back up."""
    platform.save_data()

    reloaded = RegistrarPlatform(platform.config)
    reloaded.load_data()
    asha = reloaded.records.get_student("24BCE10001")
    print(f"  Reloaded Asha: {len(asha.enrollments)} enrollments, "
          f"GPA {reloaded.enrollment_service.calculate_gpa(asha):.2f}")
    rohan = reloaded.records.get_student("24BCE10002")
    print(f"  Reloaded Rohan: active={rohan.is_active}, {len(rohan.enrollments)} enrollments kept")

    path = platform.backup_service.perform_backup()
    print(f"  ✓ Backup created at {path} ({platform.backup_service.directory_size()} bytes)")


def show_statistics(platform):
    """Display record and enrollment statistics."""
    statistics = {
        "records": platform.store.get_statistics(),
        "enrollment": platform.enrollment_service.get_statistics(platform.records.list_students()),
    }
    print(json.dumps(statistics, indent=2))


if __name__ == "__main__":
    run_demo()
