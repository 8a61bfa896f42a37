"""Unit tests for database engine and schema management."""

import pytest
from sqlalchemy import StaticPool, inspect
from sqlmodel import select

from src.user_api.core.services import DbManageService, DbSessionService
from src.user_api.entities.core.user import UserTable
from src.user_api.runtime.config.config_data import ConfigData, DatabaseConfig
from src.user_api.runtime.init_db import init_db


@pytest.fixture
def memory_config() -> ConfigData:
    return ConfigData(database=DatabaseConfig(url="sqlite:///:memory:"))


class TestDbSessionService:
    def test_in_memory_database_uses_single_connection(self, memory_config):
        service = DbSessionService(memory_config)
        try:
            assert isinstance(service.engine.pool, StaticPool)
        finally:
            service.dispose()

    def test_health_check(self, memory_config):
        service = DbSessionService(memory_config)
        try:
            assert service.health_check() is True
        finally:
            service.dispose()

    def test_sessions_share_the_in_memory_database(self, memory_config):
        """A commit in one session is visible to the next."""
        service = DbSessionService(memory_config)
        DbManageService(engine=service.engine).create_all()
        try:
            with service.get_session() as session:
                session.add(UserTable(first_name="Ann", last_name="Smith"))
                session.commit()

            with service.get_session() as session:
                rows = session.exec(select(UserTable)).all()
            assert [row.first_name for row in rows] == ["Ann"]
        finally:
            service.dispose()

    def test_objects_stay_loaded_after_commit(self, memory_config):
        service = DbSessionService(memory_config)
        DbManageService(engine=service.engine).create_all()
        try:
            with service.get_session() as session:
                row = UserTable(first_name="Ann", last_name="Smith")
                session.add(row)
                session.commit()
            assert row.first_name == "Ann"
        finally:
            service.dispose()


def test_init_db_creates_users_table(tmp_path):
    config = ConfigData(database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'init.db'}"))

    init_db(config)

    service = DbSessionService(config)
    try:
        assert "users" in inspect(service.engine).get_table_names()
    finally:
        service.dispose()
