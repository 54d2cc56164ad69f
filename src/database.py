import logging
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Owns the engine and the session factory.

    Nothing is connected at import time: call ``open()`` at process start and
    ``close()`` at shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def open(self) -> "Database":
        kwargs = {"echo": self.echo}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # a single shared connection, otherwise every session sees an empty database
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(self.url, **kwargs)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info("Database opened (%s)", self.engine.url.render_as_string(hide_password=True))
        return self

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database engine disposed")
        self.engine = None
        self._session_factory = None


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency: one session per request, always closed afterwards.
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
