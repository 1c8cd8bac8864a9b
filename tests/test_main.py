import os

import pytest

from registrar.config import RegistrarConfig
from registrar.main import RegistrarPlatform
from registrar.persistence import STUDENTS_FILE, COURSES_FILE


@pytest.fixture
def platform(tmp_path):
    config = RegistrarConfig(data_dir=str(tmp_path / "data"), backup_dir=str(tmp_path / "backups"))
    return RegistrarPlatform(config)


def write_data(platform, filename, *lines):
    os.makedirs(platform.config.data_dir, exist_ok=True)
    with open(os.path.join(platform.config.data_dir, filename), "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")


def test_demo_on_empty_data(platform, capsys):
    platform.load_data()
    platform.run_demo()

    out = capsys.readouterr().out
    assert "✓ Sample data created" in out
    assert "Cumulative GPA: 9.00" in out
    assert "✗" not in out
    assert "✓ Demo completed" in out


def test_demo_with_inactive_student(platform, capsys):
    write_data(platform, STUDENTS_FILE, "Asha Verma,asha.verma@college.edu,21-03-2005,24BCE10001,false")
    write_data(platform, COURSES_FILE,
               "CSE0001,Programming in Python,4,Computer Science,FALL,NULL",
               "CSE0002,Data Structures,4,Computer Science,FALL,NULL")
    platform.load_data()

    platform.run_demo()

    out = capsys.readouterr().out
    assert out.count("✗ Enrollment Error: Cannot enroll inactive student 24BCE10001") == 2
    assert "✗ Grading Error: Student is not enrolled in this course." in out
    assert "No courses enrolled." in out
    assert "✓ Demo completed" in out


def test_demo_without_courses(platform, capsys):
    write_data(platform, STUDENTS_FILE, "Asha Verma,asha.verma@college.edu,21-03-2005,24BCE10001,true")
    platform.load_data()

    platform.run_demo()

    out = capsys.readouterr().out
    assert "✗ Error: " in out
    assert "✗ Grading Error: " in out
    assert "✓ Demo completed" in out
