"""
Core interfaces and abstract base classes for the records domain.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, TypeVar, Generic


T = TypeVar('T')


class Profile(ABC):
    """Interface for people that can describe themselves in one line."""
    
    @abstractmethod
    def profile_details(self) -> str:
        """Get a one-line profile summary."""
        pass


class EnrollmentPolicy(ABC):
    """Abstract base class for enrollment rules."""
    
    @abstractmethod
    def check(self, student: 'Student', course: 'Course') -> None:
        """Raise an EnrollmentError if the student may not enroll in the course."""
        pass
    
    @abstractmethod
    def get_policy_name(self) -> str:
        """Get the name of this policy."""
        pass


class RecordStore(ABC, Generic[T]):
    """Keyed in-memory table for one entity type."""
    
    @abstractmethod
    def put(self, key: str, entity: T) -> None:
        """Store an entity, overwriting any entity with the same key."""
        pass
    
    @abstractmethod
    def get(self, key: str) -> Optional[T]:
        """Find an entity by key."""
        pass
    
    @abstractmethod
    def values(self) -> Iterable[T]:
        """Get all stored entities."""
        pass
