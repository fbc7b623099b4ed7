"""
Movement ledger: append-only record of stock changes.
- Quantity is always the unsigned magnitude; direction comes from movement_type
- No update or delete operations exist
- Aggregates are recomputed from the rows on every call
"""
from sqlalchemy import select, insert, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging
from typing import List, Optional, Dict

from techstore.models import StockMovement, Product, MovementType
from techstore.crud.base import CRUDBase
from techstore.exceptions import InvalidQuantity, PersistenceFailure

logger = logging.getLogger(__name__)

class MovementLedger(CRUDBase[StockMovement]):
    def __init__(self):
        super().__init__(StockMovement)

    def append(
        self,
        db: Session,
        *,
        product_id: int,
        movement_type: MovementType,
        quantity: int,
        notes: Optional[str] = None,
        operation_id: Optional[str] = None,
    ) -> StockMovement:
        """Write one immutable record. Does not commit; the timestamp comes from the database."""
        if quantity <= 0:
            raise InvalidQuantity(quantity, "Ledger quantities must be positive magnitudes")

        stmt = (
            insert(StockMovement)
            .values(
                product_id=product_id,
                movement_type=MovementType(movement_type).value,
                quantity=quantity,
                notes=notes,
                operation_id=operation_id,
            )
            .returning(StockMovement)
        )
        return db.execute(stmt).scalar_one()

    def recent(self, db: Session, limit: int) -> List[StockMovement]:
        """Most recent first, capped at limit"""
        if limit <= 0:
            return []
        try:
            stmt = (
                select(StockMovement)
                .order_by(StockMovement.id.desc())
                .limit(limit)
            )
            return list(db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error reading recent movements: {e}")
            raise PersistenceFailure("Could not read recent movements", e) from e

    def for_product(self, db: Session, product_id: int, *, limit: int = 100) -> List[StockMovement]:
        """Movements of a single product, most recent first"""
        if limit <= 0:
            return []
        try:
            stmt = (
                select(StockMovement)
                .where(StockMovement.product_id == product_id)
                .order_by(StockMovement.id.desc())
                .limit(limit)
            )
            return list(db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error reading movements for product {product_id}: {e}")
            raise PersistenceFailure(f"Could not read movements for product {product_id}", e) from e

    def get_by_operation_id(self, db: Session, operation_id: str) -> Optional[StockMovement]:
        try:
            stmt = select(StockMovement).where(StockMovement.operation_id == operation_id)
            return db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error looking up operation {operation_id}: {e}")
            raise PersistenceFailure(f"Could not look up operation {operation_id}", e) from e

    def top_by_quantity(self, db: Session, movement_type: MovementType, limit: int) -> Dict[str, int]:
        """
        Rank products by total quantity moved for one movement type.

        Groups by product name, orders by summed quantity descending. Ties keep
        the order in which the groups were first seen in the ledger (lowest
        movement id first). The returned dict preserves ranking order.
        """
        if limit <= 0:
            return {}
        total = func.sum(StockMovement.quantity).label("total_quantity")
        first_seen = func.min(StockMovement.id)
        try:
            stmt = (
                select(Product.name, total)
                .select_from(StockMovement)
                .join(Product, StockMovement.product_id == Product.id)
                .where(StockMovement.movement_type == MovementType(movement_type).value)
                .group_by(Product.name)
                .order_by(total.desc(), first_seen.asc())
                .limit(limit)
            )
            rows = db.execute(stmt).all()
        except SQLAlchemyError as e:
            logger.error(f"Error ranking {movement_type} movements: {e}")
            raise PersistenceFailure("Could not compute movement ranking", e) from e

        ranking: Dict[str, int] = {}
        for name, total_quantity in rows:
            ranking[name] = int(total_quantity)
        return ranking

# Create instances
movement_ledger = MovementLedger()
