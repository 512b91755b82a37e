"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from src.accounts.core.errors import AccountsError
from src.accounts.runtime.config.config_data import ConfigData
from src.accounts.runtime.context import get_config


def build_engine(main_config: ConfigData) -> Engine:
    """Create the SQLAlchemy engine described by the database configuration."""
    db_config = main_config.database

    if db_config.is_sqlite:
        if main_config.app.environment == "production":
            logger.warning(
                "SQLite is not recommended for production use. "
                "Consider PostgreSQL for better performance and reliability."
            )
        return create_engine(
            db_config.connection_string,
            echo=db_config.echo,
            connect_args={"check_same_thread": False, "timeout": 20},
        )

    return create_engine(
        db_config.connection_string,
        echo=db_config.echo,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_recycle=db_config.pool_recycle,
        pool_pre_ping=True,
        connect_args={"application_name": f"{main_config.app.name}_{main_config.app.environment}"},
    )


class DbSessionService:
    def __init__(self, engine: Engine | None = None):
        """Initialize the shared database engine and session factory.

        Args:
            engine: Pre-built engine, mainly for tests; built from config otherwise
        """
        if engine is None:
            main_config = get_config()
            logger.info(
                "Configuring database engine for environment: {}",
                main_config.app.environment,
            )
            engine = build_engine(main_config)
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Unit of work: commit on success, roll back and re-raise on error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except AccountsError as e:
            db.rollback()
            logger.debug("Unit of work rolled back: {}", e.code)
            raise
        except Exception as e:
            db.rollback()
            logger.error("Database transaction failed: {}", type(e).__name__)
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error("Database health check failed: {}: {}", type(e).__name__, e)
            return False
