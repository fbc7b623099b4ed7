"""
Database handle for the inventory system.
- pool_pre_ping=True
- Bounded pool and connect timeouts
- SQLite foreign keys switched on per connection
- One explicitly constructed handle per process, owned by the composition point
"""
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import QueuePool
from contextlib import contextmanager
import logging
from typing import Generator, Optional
import time

logger = logging.getLogger(__name__)

# Declarative base for models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the SQLAlchemy engine and session factory for one backend."""

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 5,
        pool_timeout: int = 30,
        connect_timeout: int = 10,
    ):
        self.url = url

        if url.startswith("sqlite"):
            # Driver-level busy timeout bounds every lock wait
            self.engine: Engine = create_engine(
                url,
                echo=echo,
                connect_args={
                    "check_same_thread": False,
                    "timeout": connect_timeout,
                },
            )
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_engine(
                url,
                poolclass=QueuePool,
                pool_pre_ping=True,
                pool_size=pool_size,
                max_overflow=10,
                pool_recycle=300,
                pool_timeout=pool_timeout,
                echo=echo,
                connect_args={"connect_timeout": connect_timeout},
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False,
        )
        logger.info(f"Database configured for {self.engine.url.get_backend_name()}")

    @classmethod
    def from_settings(cls, settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            pool_size=settings.DB_POOL_SIZE,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            connect_timeout=settings.DB_CONNECT_TIMEOUT,
        )

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session scope; the caller decides when to commit."""
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def get_db(self) -> Generator[Session, None, None]:
        """FastAPI dependency flavour of session()"""
        with self.session() as db:
            yield db

    def create_all(self) -> None:
        # Import models so every table is registered on Base.metadata
        from techstore import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def test_connection(self, attempts: int = 3, delay: float = 1.0) -> tuple[bool, str]:
        """Preflight check, retried on OperationalError"""
        last_error: Optional[Exception] = None
        for attempt in range(attempts):
            try:
                with self.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                return True, "Database connection successful"
            except OperationalError as e:
                last_error = e
                logger.warning(f"Database connection attempt {attempt + 1} failed: {e}")
                if attempt < attempts - 1:
                    time.sleep(delay)
        return False, f"Database connection failed: {last_error}"

    def dispose(self) -> None:
        self.engine.dispose()
