"""Conversions between the user entity and its wire representations."""

from .entity import User
from .representations import UserForCreate, UserForUpdate, UserRead


def create_to_entity(representation: UserForCreate) -> User:
    """Build an entity from a create payload; the repository replaces its id."""
    return User(
        first_name=representation.first_name,
        last_name=representation.last_name,
        email=representation.email,
        phone=representation.phone,
        address=representation.address,
    )


def update_to_entity(representation: UserForUpdate, user_id: str) -> User:
    return User(
        id=user_id,
        first_name=representation.first_name,
        last_name=representation.last_name,
        email=representation.email,
        phone=representation.phone,
        address=representation.address,
    )


def entity_to_update(user: User) -> UserForUpdate:
    return UserForUpdate(
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        phone=user.phone,
        address=user.address,
    )


def entity_to_read(user: User) -> UserRead:
    return UserRead(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        display_name=user.display_name,
        email=user.email,
        phone=user.phone,
        address=user.address,
    )
