"""
Services module containing the enrollment rules, the catalog of records and
the backup utility.
"""

from .enrollment_service import (
    EnrollmentService, EnrollmentResult, DuplicateEnrollmentPolicy, CreditLimitPolicy, total_credits,
)
from .records_service import RecordsService
from .backup_service import BackupService

__all__ = [
    "EnrollmentService",
    "EnrollmentResult",
    "DuplicateEnrollmentPolicy",
    "CreditLimitPolicy",
    "total_credits",
    "RecordsService",
    "BackupService",
]
