"""User resource services."""

from .patch import PatchOp, PatchOperation, PatchResult, apply_patch, parse_operations
from .user_resource import (
    ALLOWED_METHODS,
    USER_ROUTE,
    USERS_ROUTE,
    CreatedResult,
    UserListResult,
    UserResourceService,
    parse_user_id,
)

__all__ = [
    "ALLOWED_METHODS",
    "USER_ROUTE",
    "USERS_ROUTE",
    "CreatedResult",
    "PatchOp",
    "PatchOperation",
    "PatchResult",
    "UserListResult",
    "UserResourceService",
    "apply_patch",
    "parse_operations",
    "parse_user_id",
]
