"""
Base CRUD operations with SQLAlchemy 2.x patterns.
Storage errors are logged and re-raised as PersistenceFailure, never swallowed.
"""
from sqlalchemy import select, insert
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.orm import Session
import logging
from typing import TypeVar, Generic, Type, Optional, List, Dict, Any

from techstore.database import Base
from techstore.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)
ModelType = TypeVar("ModelType", bound=Base)

class CRUDBase(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: int) -> Optional[ModelType]:
        """Get record by ID using SQLAlchemy 2.x select()"""
        try:
            stmt = select(self.model).where(self.model.id == id)
            result = db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.model.__name__} {id}: {e}")
            raise PersistenceFailure(f"Could not read {self.model.__name__} {id}", e) from e

    def get_multi(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[ModelType]:
        """Get multiple records ordered by ID"""
        try:
            stmt = select(self.model).order_by(self.model.id).offset(skip).limit(limit)
            result = db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error getting multiple {self.model.__name__}: {e}")
            raise PersistenceFailure(f"Could not list {self.model.__name__}", e) from e

    def create(self, db: Session, *, obj_in: Dict[str, Any]) -> ModelType:
        """Create and commit a record using SQLAlchemy 2.x insert()

        IntegrityError is re-raised untouched so callers can translate
        constraint violations into their own domain errors.
        """
        try:
            stmt = insert(self.model).values(**obj_in).returning(self.model)
            result = db.execute(stmt)
            created = result.scalar_one()
            db.commit()
            return created
        except IntegrityError as e:
            db.rollback()
            logger.error(f"Integrity error creating {self.model.__name__}: {e}")
            raise
        except (SQLAlchemyError, OverflowError) as e:
            db.rollback()
            logger.error(f"Error creating {self.model.__name__}: {e}")
            raise PersistenceFailure(f"Could not create {self.model.__name__}", e) from e
