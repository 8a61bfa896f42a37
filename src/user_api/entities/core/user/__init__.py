"""User entity module.

This module contains all User-related classes organized by responsibility:
- User: Domain entity with business logic
- UserTable: Database persistence model
- UserRepository: Data access layer
- UserForCreate / UserForUpdate / UserRead: wire representations
- mapper: conversions between the entity and the representations

This structure keeps all User-related code together while maintaining
separation of concerns within the module.
"""

from . import mapper
from .entity import User
from .repository import UserPage, UserRepository
from .representations import UserForCreate, UserForUpdate, UserRead
from .table import UserTable

__all__ = [
    "User",
    "UserTable",
    "UserRepository",
    "UserPage",
    "UserForCreate",
    "UserForUpdate",
    "UserRead",
    "mapper",
]
