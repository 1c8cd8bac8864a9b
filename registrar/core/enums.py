"""
Enumerations and constants for the records domain.
"""

from enum import Enum


class Semester(Enum):
    """Teaching periods a course can be offered in."""
    FALL = "FALL"
    INTERIM = "INTERIM"
    WINTER = "WINTER"


class Grade(Enum):
    """Letter grades with their grade points."""
    S = 10
    A = 9
    B = 8
    C = 7
    D = 6
    E = 5
    F = 0

    @property
    def grade_point(self) -> int:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "Grade":
        """Resolve a grade from user input such as ``"a"`` or ``" B "``."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(g.name for g in cls)
            raise ValueError(f"Invalid grade '{name}'. Expected one of: {valid}")


class EnrollmentStatus(Enum):
    """Outcome of an enrollment operation."""
    CONFIRMED = "confirmed"
    DROPPED = "dropped"
    NOT_ENROLLED = "not_enrolled"


class EntityType(Enum):
    """Entity collections persisted to their own file."""
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    COURSE = "course"
    ENROLLMENT = "enrollment"


# Column separator and absent-reference marker of the flat files.
DELIMITER = ","
NULL_SENTINEL = "NULL"

# dd-MM-yyyy, used by the flat files and the REST schemas.
DATE_FORMAT = "%d-%m-%Y"

DEFAULT_MAX_CREDITS = 27
