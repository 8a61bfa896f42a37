"""Unit tests for the user repository against SQLite."""

import threading
import uuid

from sqlmodel import Session, select

from src.user_api.entities.core.user import User, UserRepository, UserTable
from src.user_api.entities.core.user.repository import KeyedLock


def _user(**overrides) -> User:
    values = {"first_name": "Ann", "last_name": "Smith", "email": "ann@example.com"}
    values.update(overrides)
    return User(**values)


class TestUserRepository:
    """Test the persistence operations."""

    def test_insert_assigns_new_id(self, user_repository):
        """The repository owns identifier generation on insert."""
        user = _user(id="client-chosen")

        stored = user_repository.insert(user)

        assert stored.id != "client-chosen"
        uuid.UUID(stored.id)
        assert user_repository.find_by_id(stored.id) == stored

    def test_find_missing_returns_none(self, user_repository):
        assert user_repository.find_by_id(str(uuid.uuid4())) is None

    def test_update_overwrites_every_field(self, user_repository):
        stored = user_repository.insert(_user(phone="555"))

        updated = user_repository.update(
            User(id=stored.id, first_name="Bo", last_name="Jones")
        )

        assert updated.first_name == "Bo"
        assert updated.phone is None
        assert updated.email is None
        assert user_repository.find_by_id(stored.id) == updated

    def test_update_missing_raises(self, user_repository):
        try:
            user_repository.update(_user(id=str(uuid.uuid4())))
        except ValueError as exc:
            assert "not found" in str(exc)
        else:
            raise AssertionError("update of a missing user should fail")

    def test_update_or_insert_inserts_under_given_id(self, user_repository):
        user_id = str(uuid.uuid4())

        stored, inserted = user_repository.update_or_insert(_user(id=user_id))

        assert inserted is True
        assert stored.id == user_id

    def test_update_or_insert_overwrites_existing(self, user_repository):
        user_id = str(uuid.uuid4())
        user_repository.update_or_insert(_user(id=user_id))

        stored, inserted = user_repository.update_or_insert(
            _user(id=user_id, first_name="Bo")
        )

        assert inserted is False
        assert stored.first_name == "Bo"
        assert user_repository.get_page(1, 10).total_count == 1

    def test_delete(self, user_repository):
        stored = user_repository.insert(_user())

        assert user_repository.delete(stored.id) is True
        assert user_repository.find_by_id(stored.id) is None
        assert user_repository.delete(stored.id) is False

    def test_page_is_ordered_by_creation(self, user_repository):
        ids = [user_repository.insert(_user(first_name=f"U{i}")).id for i in range(5)]

        first = user_repository.get_page(1, 2)
        last = user_repository.get_page(3, 2)

        assert [user.id for user in first.items] == ids[:2]
        assert [user.id for user in last.items] == ids[4:]
        assert first.total_count == 5
        assert first.total_pages == 3

    def test_page_past_the_end_is_empty(self, user_repository):
        user_repository.insert(_user())

        page = user_repository.get_page(4, 10)

        assert page.items == []
        assert page.total_count == 1
        assert page.current_page == 4


class TestConcurrentUpsert:
    """Concurrent replaces of one unseen id must create exactly one user."""

    def test_single_insert_under_contention(self, file_engine):
        user_id = str(uuid.uuid4())
        barrier = threading.Barrier(8)
        outcomes: list[bool] = []
        failures: list[BaseException] = []
        outcomes_lock = threading.Lock()

        def worker(index: int) -> None:
            try:
                with Session(file_engine) as session:
                    barrier.wait()
                    _, inserted = UserRepository(session).update_or_insert(
                        _user(id=user_id, first_name=f"Writer{index}")
                    )
                with outcomes_lock:
                    outcomes.append(inserted)
            except BaseException as exc:  # noqa: BLE001
                with outcomes_lock:
                    failures.append(exc)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert failures == []
        assert outcomes.count(True) == 1
        assert outcomes.count(False) == 7

        with Session(file_engine) as session:
            rows = session.exec(select(UserTable)).all()
        assert len(rows) == 1
        assert rows[0].id == user_id


class TestKeyedLock:
    def test_entries_are_released(self):
        locks = KeyedLock()

        with locks.hold("a"):
            assert "a" in locks._locks

        assert locks._locks == {}

    def test_same_key_is_exclusive(self):
        locks = KeyedLock()
        order: list[str] = []
        entered = threading.Event()

        def second() -> None:
            with locks.hold("a"):
                order.append("second")

        with locks.hold("a"):
            thread = threading.Thread(target=second)
            thread.start()
            entered.wait(0.1)
            order.append("first")

        thread.join()
        assert order == ["first", "second"]

    def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        acquired = threading.Event()

        def other() -> None:
            with locks.hold("b"):
                acquired.set()

        with locks.hold("a"):
            thread = threading.Thread(target=other)
            thread.start()
            assert acquired.wait(2)

        thread.join()
