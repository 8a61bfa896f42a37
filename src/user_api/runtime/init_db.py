"""Database initialization script."""

from src.user_api.core.services.database.db_manage import DbManageService
from src.user_api.runtime.config.config_data import ConfigData


def init_db(config: ConfigData | None = None) -> None:
    """Create all database tables."""
    DbManageService(config=config).create_all()


if __name__ == "__main__":
    init_db()
