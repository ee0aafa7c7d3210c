"""
API endpoints package.
Imports all endpoint modules for the API router.
"""

from . import status, users

__all__ = ["status", "users"]
