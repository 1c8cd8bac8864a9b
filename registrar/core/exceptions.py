"""
Custom exceptions for the registrar.
"""

from typing import Optional, Any, Dict


class RegistrarException(Exception):
    """Base exception for all registrar errors."""
    
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(RegistrarException):
    """Raised when data validation fails."""
    pass


class ResourceNotFoundError(RegistrarException):
    """Raised when a requested record is not found."""
    pass


class PersistenceError(RegistrarException):
    """Raised when reading or writing a data file fails."""
    pass


class ConfigurationError(RegistrarException):
    """Raised when configuration is invalid."""
    pass


class EnrollmentError(RegistrarException):
    """Base class for enrollment rule violations."""
    pass


class DuplicateEnrollmentError(EnrollmentError):
    """Raised when a student is already enrolled in the course."""
    pass


class CreditLimitExceededError(EnrollmentError):
    """Raised when an enrollment would push a student over the credit ceiling."""
    pass


class NotEnrolledError(EnrollmentError):
    """Raised when grading a course the student is not enrolled in."""
    pass


class InactiveStudentError(EnrollmentError):
    """Raised when acting on a deactivated student."""
    pass
