"""
Inventory engine: the only writer of stock levels.

Every sale or restock runs as one database transaction that updates the
product's stock and appends the matching ledger record. Validation happens
before any write, so refused operations leave both tables untouched.

Concurrency:
- One in-flight mutation per product id (per-product lock)
- The decrement itself is conditional at storage level (stock + delta >= 0)
- Different products are never serialized against each other
"""
from sqlalchemy.exc import SQLAlchemyError
from contextlib import contextmanager
from dataclasses import dataclass
import logging
import threading
import weakref
from typing import Dict, List, Optional

from techstore.database import Database
from techstore.models import MovementType, Product, StockMovement
from techstore.crud.catalog import CatalogStore
from techstore.crud.ledger import MovementLedger
from techstore.exceptions import (
    TechStoreError, ProductNotFound, InsufficientStock, InvalidQuantity, PersistenceFailure,
    OperationConflict
)

logger = logging.getLogger(__name__)

# Integer columns are 32-bit on PostgreSQL
MAX_QUANTITY = 2**31 - 1
MAX_PRODUCT_ID = 2**31 - 1


@dataclass
class MovementReceipt:
    """A recorded movement and the stock it left behind, read in the same transaction."""
    movement: StockMovement
    new_stock: int


class ProductLocks:
    """Mutex per product id, kept only while someone holds or waits on it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()

    @contextmanager
    def hold(self, product_id: int):
        with self._guard:
            lock = self._locks.get(product_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[product_id] = lock
        with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


def _check_product_id(product_id: int) -> None:
    if not 0 < product_id <= MAX_PRODUCT_ID:
        raise ProductNotFound(product_id)


class InventoryEngine:
    def __init__(
        self,
        database: Database,
        catalog: Optional[CatalogStore] = None,
        ledger: Optional[MovementLedger] = None,
    ):
        self.database = database
        self.catalog = catalog or CatalogStore()
        self.ledger = ledger or MovementLedger()
        self._locks = ProductLocks()

    # ====================
    # STOCK MUTATIONS
    # ====================

    def sell(
        self,
        product_id: int,
        quantity: int,
        note: Optional[str] = None,
        *,
        operation_id: Optional[str] = None,
    ) -> StockMovement:
        """
        Remove quantity units from stock and record a SALE.

        Raises InvalidQuantity, ProductNotFound, InsufficientStock,
        OperationConflict or PersistenceFailure. On any failure no stock
        change and no ledger record are persisted.
        """
        return self.record(MovementType.SALE, product_id, quantity, note, operation_id=operation_id).movement

    def restock(
        self,
        product_id: int,
        quantity: int,
        note: Optional[str] = None,
        *,
        operation_id: Optional[str] = None,
    ) -> StockMovement:
        """Add quantity units to stock and record a RESTOCK."""
        return self.record(MovementType.RESTOCK, product_id, quantity, note, operation_id=operation_id).movement

    def record(
        self,
        movement_type: MovementType,
        product_id: int,
        quantity: int,
        note: Optional[str] = None,
        *,
        operation_id: Optional[str] = None,
    ) -> MovementReceipt:
        """Apply one movement and return it with the resulting stock level."""
        movement_type = MovementType(movement_type)
        if not 0 < quantity <= MAX_QUANTITY:
            logger.warning(f"Refused {movement_type.value} of {quantity} for product {product_id}")
            raise InvalidQuantity(
                quantity, f"Quantity must be between 1 and {MAX_QUANTITY} (got {quantity})"
            )
        _check_product_id(product_id)

        delta = -quantity if movement_type is MovementType.SALE else quantity

        with self._locks.hold(product_id):
            try:
                with self.database.session() as db, db.begin():
                    if operation_id:
                        existing = self.ledger.get_by_operation_id(db, operation_id)
                        if existing is not None:
                            if (existing.product_id, existing.movement_type, existing.quantity) != (
                                product_id, movement_type.value, quantity
                            ):
                                raise OperationConflict(operation_id, existing.id)
                            logger.info(f"Operation {operation_id} already applied as movement {existing.id}")
                            return MovementReceipt(existing, self.catalog.get_stock(db, product_id))

                    current_stock = self.catalog.get_stock(db, product_id)
                    if current_stock is None:
                        raise ProductNotFound(product_id)

                    if movement_type is MovementType.SALE and quantity > current_stock:
                        raise InsufficientStock(product_id, have=current_stock, want=quantity)

                    if not self.catalog.apply_delta(db, product_id, delta):
                        # Stock moved or the row vanished after our own check
                        latest = self.catalog.get_stock(db, product_id)
                        if latest is None:
                            raise PersistenceFailure(
                                f"Product {product_id} disappeared while applying {movement_type.value}"
                            )
                        raise InsufficientStock(product_id, have=latest, want=quantity)

                    movement = self.ledger.append(
                        db,
                        product_id=product_id,
                        movement_type=movement_type,
                        quantity=quantity,
                        notes=note,
                        operation_id=operation_id,
                    )
                    new_stock = self.catalog.get_stock(db, product_id)
            except TechStoreError as e:
                if not isinstance(e, PersistenceFailure):
                    logger.warning(f"{movement_type.value} refused for product {product_id}: {e}")
                raise
            except (SQLAlchemyError, OverflowError) as e:
                # OverflowError: the driver cannot bind a value that does not fit the column
                logger.error(f"{movement_type.value} failed for product {product_id}: {e}")
                raise PersistenceFailure(f"Could not record {movement_type.value} for product {product_id}", e) from e

        logger.info(
            f"{movement_type.value} recorded: product {product_id}, quantity {quantity}, "
            f"movement {movement.id}, stock now {new_stock}"
        )
        return MovementReceipt(movement, new_stock)

    # ====================
    # READ PASSTHROUGHS
    # ====================

    def get_stock(self, product_id: int) -> int:
        _check_product_id(product_id)
        with self.database.session() as db:
            stock = self.catalog.get_stock(db, product_id)
        if stock is None:
            raise ProductNotFound(product_id)
        return stock

    def get_product(self, product_id: int) -> Product:
        _check_product_id(product_id)
        with self.database.session() as db:
            product = self.catalog.get(db, product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def list_products(self) -> List[Product]:
        with self.database.session() as db:
            return self.catalog.list_all(db)

    def low_stock(self, threshold: int) -> List[Product]:
        with self.database.session() as db:
            return self.catalog.list_below(db, threshold)

    def recent_movements(self, limit: int) -> List[StockMovement]:
        with self.database.session() as db:
            return self.ledger.recent(db, limit)

    def product_movements(self, product_id: int, limit: int = 100) -> List[StockMovement]:
        _check_product_id(product_id)
        with self.database.session() as db:
            if self.catalog.get_stock(db, product_id) is None:
                raise ProductNotFound(product_id)
            return self.ledger.for_product(db, product_id, limit=limit)

    def best_sellers(self, limit: int = 3) -> Dict[str, int]:
        with self.database.session() as db:
            return self.ledger.top_by_quantity(db, MovementType.SALE, limit)
