"""
Core module containing the entity model, enums, interfaces and exceptions.
"""

from .entities import *
from .interfaces import *
from .exceptions import *
from .enums import *

__all__ = [
    # Entities
    "PersonalDetails",
    "Student",
    "Instructor",
    "Course",
    "CourseBuilder",
    "Enrollment",
    
    # Interfaces
    "Profile",
    "EnrollmentPolicy",
    "RecordStore",
    
    # Enums
    "Semester",
    "Grade",
    "EnrollmentStatus",
    "EntityType",
    
    # Exceptions
    "RegistrarException",
    "ValidationError",
    "ResourceNotFoundError",
    "PersistenceError",
    "ConfigurationError",
    "EnrollmentError",
    "DuplicateEnrollmentError",
    "CreditLimitExceededError",
    "NotEnrolledError",
    "InactiveStudentError",
]
