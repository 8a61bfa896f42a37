"""User repository for data access operations."""

from __future__ import annotations

import math
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime

from loguru import logger
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from src.user_api.entities.core._base import new_identifier

from .entity import User
from .table import UserTable

_PROFILE_FIELDS = ("first_name", "last_name", "email", "phone", "address")


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class KeyedLock:
    """Process-wide mutual exclusion per key.

    Entries are reference counted and dropped once no thread holds or waits
    on them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, _KeyLock] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, _KeyLock())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[key]


_user_locks = KeyedLock()


@dataclass(frozen=True)
class UserPage:
    """A bounded, ordered slice of the user collection."""

    items: list[User]
    total_count: int
    current_page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages


class UserRepository:
    """Data-access layer for users.

    Every write commits its own transaction; per-id writes are serialised
    through a process-wide keyed lock.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_id(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return self._to_entity(row)

    def insert(self, user: User) -> User:
        """Store ``user`` under a freshly generated identifier."""
        row = UserTable(id=new_identifier(), **self._profile(user))
        self._session.add(row)
        self._session.commit()
        self._session.refresh(row)
        logger.debug("Inserted user {}", row.id)
        return self._to_entity(row)

    def update(self, user: User) -> User:
        """Overwrite an existing user.

        Raises:
            ValueError: If no user with ``user.id`` exists.
        """
        with _user_locks.hold(user.id):
            row = self._session.get(UserTable, user.id)
            if row is None:
                raise ValueError(f"User {user.id} not found")
            self._overwrite(row, user)
            self._session.commit()
            self._session.refresh(row)
            return self._to_entity(row)

    def update_or_insert(self, user: User) -> tuple[User, bool]:
        """Insert ``user`` under its own id, or overwrite the existing record.

        Returns:
            The stored user and whether it was inserted.
        """
        with _user_locks.hold(user.id):
            row = self._session.get(UserTable, user.id)
            inserted = row is None
            if inserted:
                row = UserTable(id=user.id, **self._profile(user))
                self._session.add(row)
                try:
                    self._session.commit()
                except IntegrityError:
                    # Another process inserted the same id first; overwrite it.
                    self._session.rollback()
                    logger.info("Concurrent insert of user {}, overwriting", user.id)
                    row = self._session.get(UserTable, user.id)
                    if row is None:
                        raise
                    inserted = False
                    self._overwrite(row, user)
                    self._session.commit()
            else:
                self._overwrite(row, user)
                self._session.commit()

            self._session.refresh(row)
            return self._to_entity(row), inserted

    def delete(self, user_id: str) -> bool:
        with _user_locks.hold(user_id):
            row = self._session.get(UserTable, user_id)
            if row is None:
                return False
            self._session.delete(row)
            self._session.commit()
            return True

    def get_page(self, page_number: int, page_size: int) -> UserPage:
        """Return page ``page_number`` (1-based) of ``page_size`` users.

        Pages past the end are empty rather than an error.
        """
        total_count = self._session.exec(
            select(func.count()).select_from(UserTable)
        ).one()

        offset = (page_number - 1) * page_size
        items: list[User] = []
        if offset < total_count:
            statement = (
                select(UserTable)
                .order_by(UserTable.created_at, UserTable.id)
                .offset(offset)
                .limit(page_size)
            )
            items = [self._to_entity(row) for row in self._session.exec(statement)]

        return UserPage(
            items=items,
            total_count=total_count,
            current_page=page_number,
            page_size=page_size,
        )

    @staticmethod
    def _profile(user: User) -> dict:
        return {name: getattr(user, name) for name in _PROFILE_FIELDS}

    def _overwrite(self, row: UserTable, user: User) -> None:
        for name, value in self._profile(user).items():
            setattr(row, name, value)
        row.updated_at = datetime.now(UTC)
        self._session.add(row)

    @staticmethod
    def _to_entity(row: UserTable) -> User:
        return User.model_validate(row, from_attributes=True)
