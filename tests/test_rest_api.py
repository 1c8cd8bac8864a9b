import pytest
from fastapi.testclient import TestClient

from registrar.api import RegistrarRestAPI


@pytest.fixture
def client(records, enrollment_service, io_service, backup_service):
    api = RegistrarRestAPI(records, enrollment_service, io_service, backup_service)
    return TestClient(api.app)


@pytest.fixture
def seeded(client):
    client.post("/instructors", json={
        "instructor_id": "I001", "full_name": "Ravi Kumar", "email": "ravi.kumar@college.edu",
        "date_of_birth": "12-04-1980", "employee_id": "EMP001", "department": "Computer Science",
    })
    client.post("/students", json={
        "full_name": "Asha Verma", "email": "asha.verma@college.edu",
        "date_of_birth": "21-03-2005", "reg_no": "24BCE10001",
    })
    for code, title, credits in (("CSE0001", "Programming in Python", 4), ("CSE0002", "Data Structures", 4)):
        client.post("/courses", json={
            "code": code, "title": title, "credits": credits,
            "department": "Computer Science", "semester": "fall",
        })
    return client


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


class TestStudents:
    def test_create_and_get(self, seeded):
        response = seeded.get("/students/24BCE10001")
        assert response.status_code == 200
        body = response.json()
        assert body["full_name"] == "Asha Verma"
        assert body["date_of_birth"] == "21-03-2005"
        assert body["is_active"] is True
        assert body["total_credits"] == 0

    def test_duplicate_reg_no(self, seeded):
        response = seeded.post("/students", json={
            "full_name": "Asha Again", "email": "asha2@college.edu",
            "date_of_birth": "21-03-2005", "reg_no": "24BCE10001",
        })
        assert response.status_code == 409

    @pytest.mark.parametrize("field, value", [
        ("reg_no", "ABC"),
        ("email", "not-an-email"),
        ("date_of_birth", "2005-03-21"),
        ("full_name", "Verma, Asha"),
        ("full_name", "Asha\x0cVerma"),
        ("full_name", "Asha\u2028Verma"),
        ("full_name", "   "),
    ])
    def test_invalid_input(self, client, field, value):
        payload = {
            "full_name": "Asha Verma", "email": "asha.verma@college.edu",
            "date_of_birth": "21-03-2005", "reg_no": "24BCE10001",
        }
        payload[field] = value
        assert client.post("/students", json=payload).status_code == 422

    def test_surrounding_whitespace_is_stripped(self, client):
        response = client.post("/students", json={
            "full_name": "  Asha Verma  ", "email": " asha.verma@college.edu ",
            "date_of_birth": "21-03-2005", "reg_no": "24BCE10001",
        })
        assert response.status_code == 201
        assert response.json()["full_name"] == "Asha Verma"
        assert client.get("/students/24BCE10001").json()["email"] == "asha.verma@college.edu"

    def test_future_birth_date(self, client):
        response = client.post("/students", json={
            "full_name": "Asha Verma", "email": "asha.verma@college.edu",
            "date_of_birth": "01-01-2999", "reg_no": "24BCE10001",
        })
        assert response.status_code == 400

    def test_unknown_student(self, client):
        assert client.get("/students/24BCE99999").status_code == 404

    def test_update_and_deactivate(self, seeded):
        response = seeded.patch("/students/24BCE10001", json={"email": "asha@new.edu"})
        assert response.json()["email"] == "asha@new.edu"

        assert seeded.post("/students/24BCE10001/deactivate").json()["is_active"] is False

        response = seeded.patch("/students/24BCE10001", json={"full_name": "Someone"})
        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "STUDENT_INACTIVE"


class TestCourses:
    def test_semester_is_normalised(self, seeded):
        assert seeded.get("/courses/CSE0001").json()["semester"] == "FALL"

    def test_unknown_semester(self, client):
        response = client.post("/courses", json={
            "code": "CSE0009", "title": "X", "credits": 3,
            "department": "Computer Science", "semester": "SUMMER",
        })
        assert response.status_code == 422

    def test_filters(self, seeded):
        seeded.post("/courses", json={
            "code": "MAT0001", "title": "Linear Algebra", "credits": 3,
            "department": "Mathematics", "semester": "WINTER",
        })
        codes = [c["code"] for c in seeded.get("/courses", params={"department": "mathematics"}).json()]
        assert codes == ["MAT0001"]
        codes = [c["code"] for c in seeded.get("/courses", params={"semester": "fall"}).json()]
        assert codes == ["CSE0001", "CSE0002"]
        assert seeded.get("/courses", params={"semester": "SPRING"}).status_code == 400

    def test_assign_instructor(self, seeded):
        response = seeded.put("/courses/CSE0001/instructor", json={"employee_id": "EMP001"})
        assert response.status_code == 200
        assert response.json()["instructor_name"] == "Ravi Kumar"

        instructors = seeded.get("/instructors").json()
        assert instructors[0]["assigned_courses"] == ["CSE0001"]

    def test_course_with_unknown_instructor(self, client):
        response = client.post("/courses", json={
            "code": "CSE0009", "title": "X", "credits": 3, "department": "Computer Science",
            "semester": "FALL", "instructor_employee_id": "EMP404",
        })
        assert response.status_code == 404


class TestEnrollments:
    def enroll(self, client, course_code, reg_no="24BCE10001"):
        return client.post("/enrollments", json={"reg_no": reg_no, "course_code": course_code})

    def test_scenario(self, seeded):
        assert self.enroll(seeded, "CSE0001").json()["status"] == "confirmed"
        assert self.enroll(seeded, "CSE0002").status_code == 200

        duplicate = self.enroll(seeded, "CSE0001")
        assert duplicate.status_code == 409
        assert duplicate.json()["detail"]["error_code"] == "DUPLICATE_ENROLLMENT"

        graded = seeded.post("/grades", json={"reg_no": "24BCE10001", "course_code": "CSE0001", "grade": "a"})
        assert graded.json()["grade"] == "A"

        assert seeded.get("/students/24BCE10001/gpa").json()["gpa"] == 9.0
        transcript = seeded.get("/students/24BCE10001/transcript").json()
        assert [e["grade"] for e in transcript["enrollments"]] == ["A", None]
        assert "Cumulative GPA: 9.00" in transcript["transcript"]

    def test_credit_limit(self, seeded):
        seeded.post("/courses", json={
            "code": "CSE0100", "title": "Capstone", "credits": 20,
            "department": "Computer Science", "semester": "WINTER",
        })
        self.enroll(seeded, "CSE0100")
        self.enroll(seeded, "CSE0001")

        response = self.enroll(seeded, "CSE0002")
        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "CREDIT_LIMIT_EXCEEDED"
        assert seeded.get("/students/24BCE10001").json()["total_credits"] == 24

    def test_inactive_student_cannot_enroll(self, seeded):
        seeded.post("/students/24BCE10001/deactivate")
        response = self.enroll(seeded, "CSE0001")
        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "STUDENT_INACTIVE"

    def test_unknown_course(self, seeded):
        assert self.enroll(seeded, "CSE9999").status_code == 404

    def test_unenroll(self, seeded):
        self.enroll(seeded, "CSE0001")
        assert seeded.delete("/enrollments/24BCE10001/CSE0001").json()["status"] == "dropped"

        again = seeded.delete("/enrollments/24BCE10001/CSE0001")
        assert again.status_code == 200
        assert again.json()["success"] is False
        assert again.json()["status"] == "not_enrolled"

    def test_grade_without_enrollment(self, seeded):
        response = seeded.post("/grades", json={"reg_no": "24BCE10001", "course_code": "CSE0001", "grade": "B"})
        assert response.status_code == 409
        assert response.json()["detail"]["error_code"] == "NOT_ENROLLED"


def test_save_and_load(seeded):
    seeded.post("/enrollments", json={"reg_no": "24BCE10001", "course_code": "CSE0001"})

    saved = seeded.post("/data/save").json()
    assert [r["processed"] for r in saved] == [1, 1, 2, 1]

    loaded = seeded.post("/data/load").json()
    assert all(r["success"] for r in loaded)
    assert seeded.get("/students/24BCE10001").json()["enrolled_courses"] == ["CSE0001"]


def test_backup(seeded):
    assert seeded.post("/backups").json()["success"] is False

    seeded.post("/data/save")
    response = seeded.post("/backups").json()
    assert response["success"] is True
    assert response["backup_size"] > 0


def test_statistics(seeded):
    stats = seeded.get("/statistics").json()["statistics"]
    assert stats["records"]["students"] == 1
    assert stats["records"]["courses"] == 2
    assert stats["enrollment"]["max_credits"] == 27
