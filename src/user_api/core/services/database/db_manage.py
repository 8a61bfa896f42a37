"""Schema management for the application database."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from src.user_api.runtime.config.config_data import ConfigData
from src.user_api.runtime.context import get_config


class DbManageService:
    def __init__(self, engine: Engine | None = None, config: ConfigData | None = None):
        if engine is None:
            main_config = config or get_config()
            engine = create_engine(main_config.database.connection_string, echo=False)
        self._engine = engine

    def create_all(self) -> None:
        """Create all database tables."""
        from src.user_api.entities.core.user import UserTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")
