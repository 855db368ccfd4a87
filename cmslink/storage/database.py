"""Engine and session management for the links table."""

from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from cmslink.config import Settings, get_settings
from cmslink.models.base import Base


class Database:
    """Owns the engine links are stored through and hands out sessions."""

    def __init__(self, database_url: str | None = None, settings: Settings | None = None):
        """
        Create the engine.

        Args:
            database_url: Connection URL. If None, uses settings.database_url.
            settings: Pool and echo settings. If None, uses get_settings().
        """
        settings = settings or get_settings()
        self.database_url = database_url or settings.database_url

        engine_args: dict[str, Any] = {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_timeout": settings.db_pool_timeout,
            "pool_pre_ping": True,
            "echo": settings.sql_echo,
        }
        if self.database_url.startswith("sqlite"):
            # Sessions may be opened from worker threads
            engine_args["connect_args"] = {"check_same_thread": False}

        self.engine: Engine = create_engine(self.database_url, **engine_args)
        self.SessionLocal = sessionmaker(autoflush=False, bind=self.engine)

    def create_tables(self) -> None:
        """Create the links table if it does not exist."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Open a session that commits on exit and rolls back on error.

        Usage:
            with db.session() as session:
                service = LinkService(session)
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
