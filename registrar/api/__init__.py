"""
API module for the REST front end.
"""

from .rest_api import RegistrarRestAPI

__all__ = [
    "RegistrarRestAPI",
]
