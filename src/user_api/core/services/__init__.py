"""Core services exports."""

# Database Service
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# User Services
from .user import UserResourceService

__all__ = [
    # Database Service
    "DbManageService",
    "DbSessionService",
    # User Services
    "UserResourceService",
]
