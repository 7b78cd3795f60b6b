import logging
from contextlib import contextmanager
from typing import Optional, TypeVar, Generic, Type

from sqlalchemy import Engine, delete
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from database.db_utils import get_db_connection
from database.repositories.exceptions import (
    DatabaseConnectionError,
    DuplicateEntityError,
    StoreReadFailed,
    StoreWriteFailed,
)

# Set up logger
logger = logging.getLogger(__name__)

# Type variable for ORM models
T = TypeVar("T")

UNIQUE_VIOLATION_PGCODE = '23505'


def _is_unique_violation(error: IntegrityError) -> bool:
    if getattr(error.orig, 'pgcode', None) == UNIQUE_VIOLATION_PGCODE:
        return True
    return "unique constraint" in str(error).lower()


class BaseRepository(Generic[T]):
    """
    Base repository class providing common database operations and connection management.
    Every statement runs in its own short session, so each insert or delete is atomic on its own.
    """

    def __init__(self, model_class: Type[T] = None, engine: Optional[Engine] = None):
        """
        Initialize the repository.

        Args:
            model_class: The SQLAlchemy model class this repository manages (optional)
            engine: Engine to use instead of the shared application engine (optional)
        """
        self._engine: Optional[Engine] = engine
        self.model_class = model_class
        self._session_factory = None

    @property
    def engine(self) -> Engine:
        """Lazy load the database engine."""
        if self._engine is None:
            self._engine = get_db_connection()
            if self._engine is None:
                raise DatabaseConnectionError("Failed to obtain database connection")
        return self._engine

    @property
    def session_factory(self):
        """Lazy load the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    @contextmanager
    def session(self, read_only: bool = False) -> Session:
        """
        Context manager for ORM sessions.
        Handles commit/rollback automatically and maps SQLAlchemy errors onto
        StoreReadFailed (read_only=True) or StoreWriteFailed.
        """
        failure = StoreReadFailed if read_only else StoreWriteFailed
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            if _is_unique_violation(e):
                logger.debug(f"Unique constraint hit in session: {e}")
                raise DuplicateEntityError(f"Duplicate entity: {e}") from e
            logger.error(f"Integrity Error in session: {e}")
            raise failure(f"Database integrity error: {e}") from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database Error in session: {e}")
            raise failure(f"Database error: {e}") from e
        except Exception as e:
            session.rollback()
            logger.error(f"Unexpected error in session: {e}")
            raise
        finally:
            session.close()

    # Common CRUD Patterns

    def create(self, entity: T) -> T:
        """Insert a new entity and return it with its generated key."""
        with self.session() as session:
            session.add(entity)
            session.flush()
            session.refresh(entity)
            return entity

    def delete_where(self, *criteria) -> int:
        """Bulk delete rows of this repository's model matching the criteria; returns the row count."""
        with self.session() as session:
            result = session.execute(delete(self.model_class).where(*criteria))
            return result.rowcount
