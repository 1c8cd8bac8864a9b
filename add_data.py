"""
Script to add sample records to the registrar via its REST API.
Make sure the server is running before executing this script.

Usage:
    python -m registrar.main --serve      (in another terminal)
    python add_data.py
"""

import requests
import json
import sys
import os


def _console_supports_utf8() -> bool:
    enc = getattr(sys.stdout, "encoding", None)
    return enc is not None and "utf" in enc.lower()


_OK_CHAR = "✓" if _console_supports_utf8() else "[OK]"
_FAIL_CHAR = "✗" if _console_supports_utf8() else "[FAIL]"
_WARN_CHAR = "⚠" if _console_supports_utf8() else "[WARN]"


def _detect_base_url() -> str:
    """Determine a reachable BASE_URL.

    Priority: environment variable `REGISTRAR_BASE_URL`, then common local ports.
    If nothing responds, fall back to http://127.0.0.1:8000.
    """
    env = os.environ.get("REGISTRAR_BASE_URL")
    if env:
        return env

    candidates = [
        "http://127.0.0.1:8000",
        "http://localhost:8000",
        "http://127.0.0.1:8888",
    ]

    for c in candidates:
        try:
            resp = requests.get(f"{c}/health", timeout=0.5)
            if resp.status_code == 200:
                return c
        except requests.exceptions.RequestException:
            continue

    return candidates[0]


BASE_URL = _detect_base_url()


def check_server():
    """Check if the server is running."""
    try:
        response = requests.get(f"{BASE_URL}/health", timeout=2)
        if response.status_code == 200:
            print(f"{_OK_CHAR} Server is running")
            return True
    except requests.exceptions.RequestException:
        pass
    print(f"{_FAIL_CHAR} Server is not running!")
    print("\nPlease start the server first:")
    print("  python -m registrar.main --serve --rest-port 8000")
    return False


def _error_text(response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return response.text
    if isinstance(detail, dict):
        return f"{detail.get('error_code')}: {detail.get('message')}"
    return str(detail)


def create_student(full_name, email, date_of_birth, reg_no):
    """Create a new student."""
    data = {
        "full_name": full_name,
        "email": email,
        "date_of_birth": date_of_birth,
        "reg_no": reg_no
    }
    try:
        response = requests.post(f"{BASE_URL}/students", json=data)
        if response.status_code == 201:
            print(f"{_OK_CHAR} Created student: {full_name} ({reg_no})")
            return response.json()
        print(f"{_FAIL_CHAR} Failed to create student: {_error_text(response)}")
        return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error creating student: {e}")
        return None


def create_instructor(instructor_id, full_name, email, date_of_birth, employee_id, department):
    """Create a new instructor."""
    data = {
        "instructor_id": instructor_id,
        "full_name": full_name,
        "email": email,
        "date_of_birth": date_of_birth,
        "employee_id": employee_id,
        "department": department
    }
    try:
        response = requests.post(f"{BASE_URL}/instructors", json=data)
        if response.status_code == 201:
            print(f"{_OK_CHAR} Created instructor: {full_name} ({employee_id})")
            return response.json()
        print(f"{_FAIL_CHAR} Failed to create instructor: {_error_text(response)}")
        return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error creating instructor: {e}")
        return None


def create_course(code, title, credits, department, semester, instructor_employee_id=None):
    """Create a new course."""
    data = {
        "code": code,
        "title": title,
        "credits": credits,
        "department": department,
        "semester": semester,
        "instructor_employee_id": instructor_employee_id
    }
    try:
        response = requests.post(f"{BASE_URL}/courses", json=data)
        if response.status_code == 201:
            print(f"{_OK_CHAR} Created course: {code} - {title}")
            return response.json()
        print(f"{_FAIL_CHAR} Failed to create course: {_error_text(response)}")
        return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error creating course: {e}")
        return None


def enroll_student(reg_no, course_code):
    """Enroll a student in a course."""
    data = {"reg_no": reg_no, "course_code": course_code}
    try:
        response = requests.post(f"{BASE_URL}/enrollments", json=data)
        if response.status_code == 200:
            result = response.json()
            print(f"{_OK_CHAR} {result['message']}")
            return result
        if response.status_code == 409:
            print(f"{_WARN_CHAR} {reg_no} not enrolled in {course_code}: {_error_text(response)}")
            return None
        print(f"{_FAIL_CHAR} Failed to enroll student: {_error_text(response)}")
        return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error enrolling student: {e}")
        return None


def assign_grade(reg_no, course_code, grade):
    """Grade a student's enrollment."""
    data = {"reg_no": reg_no, "course_code": course_code, "grade": grade}
    try:
        response = requests.post(f"{BASE_URL}/grades", json=data)
        if response.status_code == 200:
            print(f"{_OK_CHAR} Graded {reg_no} in {course_code}: {grade}")
            return response.json()
        print(f"{_FAIL_CHAR} Failed to assign grade: {_error_text(response)}")
        return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error assigning grade: {e}")
        return None


def list_students():
    """List all students."""
    try:
        response = requests.get(f"{BASE_URL}/students")
        if response.status_code == 200:
            students = response.json()
            print(f"\n{'='*60}")
            print(f"Students ({len(students)})")
            print(f"{'='*60}")
            for student in students:
                print(f"  {student['reg_no']:10} | {student['full_name']:20} | "
                      f"{student['total_credits']:2} credits | {student['email']}")
            return students
        print(f"{_FAIL_CHAR} Failed to list students: {_error_text(response)}")
        return []
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error listing students: {e}")
        return []


def list_courses():
    """List all courses."""
    try:
        response = requests.get(f"{BASE_URL}/courses")
        if response.status_code == 200:
            courses = response.json()
            print(f"\n{'='*60}")
            print(f"Courses ({len(courses)})")
            print(f"{'='*60}")
            for course in courses:
                instructor = course.get('instructor_name') or "Unassigned"
                print(f"  {course['code']:8} | {course['title']:28} | {course['credits']} credits | "
                      f"{course['semester']:7} | {instructor}")
            return courses
        print(f"{_FAIL_CHAR} Failed to list courses: {_error_text(response)}")
        return []
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error listing courses: {e}")
        return []


def show_transcript(reg_no):
    """Print a student's transcript."""
    try:
        response = requests.get(f"{BASE_URL}/students/{reg_no}/transcript")
        if response.status_code == 200:
            print()
            print(response.json()['transcript'])
            return response.json()
        print(f"{_FAIL_CHAR} Failed to get transcript: {_error_text(response)}")
        return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error getting transcript: {e}")
        return None


def get_statistics():
    """Get system statistics."""
    try:
        response = requests.get(f"{BASE_URL}/statistics")
        if response.status_code == 200:
            stats = response.json()
            print(f"\n{'='*60}")
            print("System Statistics")
            print(f"{'='*60}")
            print(json.dumps(stats['statistics'], indent=2))
            return stats
        print(f"{_FAIL_CHAR} Failed to get statistics: {_error_text(response)}")
        return None
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error getting statistics: {e}")
        return None


def save_data():
    """Ask the server to write its data files."""
    try:
        response = requests.post(f"{BASE_URL}/data/save")
        if response.status_code == 200:
            for result in response.json():
                print(f"{_OK_CHAR} Saved {result['processed']} {result['entity_type']} records")
            return True
        print(f"{_FAIL_CHAR} Failed to save data: {_error_text(response)}")
        return False
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error saving data: {e}")
        return False


def main():
    """Main execution."""
    print("="*60)
    print("Registrar - Data Addition Script")
    print("="*60)
    print()

    if not check_server():
        sys.exit(1)

    print("\n" + "="*60)
    print("Adding Sample Data...")
    print("="*60 + "\n")

    print("Creating instructors...")
    create_instructor("I001", "Ravi Kumar", "ravi.kumar@college.edu", "12-04-1980", "EMP001", "Computer Science")
    create_instructor("I002", "Meera Nair", "meera.nair@college.edu", "03-09-1976", "EMP002", "Mathematics")
    create_instructor("I003", "John Dsouza", "john.dsouza@college.edu", "28-01-1985", "EMP003", "Physics")

    print("\nCreating courses...")
    create_course("CSE0001", "Programming in Python", 4, "Computer Science", "FALL", "EMP001")
    create_course("CSE0002", "Data Structures", 4, "Computer Science", "FALL", "EMP001")
    create_course("CSE0003", "Database Systems", 3, "Computer Science", "WINTER")
    create_course("MAT0001", "Linear Algebra", 4, "Mathematics", "FALL", "EMP002")
    create_course("MAT0002", "Probability", 3, "Mathematics", "WINTER", "EMP002")
    create_course("PHY0001", "Mechanics", 4, "Physics", "INTERIM", "EMP003")
    create_course("PHY0002", "Electromagnetism", 4, "Physics", "WINTER", "EMP003")
    create_course("CSE0004", "Capstone Project", 8, "Computer Science", "WINTER", "EMP001")

    print("\nCreating students...")
    create_student("Asha Verma", "asha.verma@college.edu", "21-03-2005", "24BCE10001")
    create_student("Rohan Mehta", "rohan.mehta@college.edu", "02-11-2004", "24BCE10002")
    create_student("Priya Iyer", "priya.iyer@college.edu", "15-07-2005", "24BCE10003")
    create_student("Karan Singh", "karan.singh@college.edu", "30-12-2004", "24BME10004")

    print("\nEnrolling students...")
    enroll_student("24BCE10001", "CSE0001")
    enroll_student("24BCE10001", "CSE0002")
    enroll_student("24BCE10002", "CSE0001")
    enroll_student("24BCE10002", "MAT0001")
    enroll_student("24BCE10003", "MAT0001")
    enroll_student("24BCE10003", "MAT0002")
    enroll_student("24BME10004", "PHY0001")

    # Rohan reaches 22 credits. The capstone would take him past 27 and is refused.
    # MAT0001 is already taken and is refused as a duplicate.
    for code in ("CSE0003", "MAT0001", "MAT0002", "PHY0001", "PHY0002", "CSE0004"):
        enroll_student("24BCE10002", code)

    # Duplicate enrollment is refused as well.
    enroll_student("24BCE10001", "CSE0001")

    print("\nAssigning grades...")
    assign_grade("24BCE10001", "CSE0001", "A")
    assign_grade("24BCE10002", "CSE0001", "S")
    assign_grade("24BCE10002", "MAT0001", "B")
    assign_grade("24BCE10003", "MAT0001", "C")

    list_students()
    list_courses()
    show_transcript("24BCE10001")
    get_statistics()

    print("\nSaving data files...")
    save_data()

    print("\n" + "="*60)
    print(f"{_OK_CHAR} Sample data added successfully!")
    print("="*60)
    print("\nYou can now:")
    print(f"  - View API docs: {BASE_URL}/docs")
    print(f"  - List students: curl {BASE_URL}/students")
    print(f"  - Transcript: curl {BASE_URL}/students/24BCE10001/transcript")
    print(f"  - Get statistics: curl {BASE_URL}/statistics")
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print(f"\n\n{_FAIL_CHAR} Interrupted by user")
        sys.exit(1)
