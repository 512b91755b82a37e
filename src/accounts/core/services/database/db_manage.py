"""Schema management for the accounts database."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from src.accounts.core.services.database.db_session import build_engine
from src.accounts.runtime.context import get_config


def register_tables() -> None:
    """Import every table model so it is registered on ``SQLModel.metadata``."""
    from src.accounts.entities.core.identity import IdentityTable  # noqa: F401
    from src.accounts.entities.core.platform_entity import PlatformEntityTable  # noqa: F401
    from src.accounts.entities.core.user import UserTable  # noqa: F401


class DbManageService:
    def __init__(self, engine: Engine | None = None):
        self._engine = engine or build_engine(get_config())

    def create_all(self) -> None:
        """Create all database tables."""
        register_tables()
        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")
