"""
Catalog store: product, category and provider rows.
- Stock is only changed through apply_delta
- apply_delta never commits; the inventory engine owns the transaction
- SKU is globally unique
"""
from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.orm import Session
import logging
from typing import List, Optional, Dict, Any

from techstore.models import Product, Category, Provider
from techstore.crud.base import CRUDBase
from techstore.exceptions import DuplicateSku, PersistenceFailure

logger = logging.getLogger(__name__)

class CatalogStore(CRUDBase[Product]):
    def __init__(self):
        super().__init__(Product)

    def get_stock(self, db: Session, product_id: int) -> Optional[int]:
        """Current stock, or None when the product does not exist"""
        try:
            stmt = select(Product.stock).where(Product.id == product_id)
            return db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error reading stock for product {product_id}: {e}")
            raise PersistenceFailure(f"Could not read stock for product {product_id}", e) from e

    def get_by_sku(self, db: Session, sku: str) -> Optional[Product]:
        try:
            stmt = select(Product).where(Product.sku == sku)
            return db.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting product by SKU {sku}: {e}")
            raise PersistenceFailure(f"Could not read product {sku}", e) from e

    def list_all(self, db: Session) -> List[Product]:
        """Full catalog ordered by ID"""
        try:
            stmt = select(Product).order_by(Product.id)
            return list(db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing products: {e}")
            raise PersistenceFailure("Could not list products", e) from e

    def list_below(self, db: Session, threshold: int) -> List[Product]:
        """Products whose stock is strictly below threshold, ordered by ID"""
        try:
            stmt = (
                select(Product)
                .where(Product.stock < threshold)
                .order_by(Product.id)
            )
            return list(db.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing products below {threshold}: {e}")
            raise PersistenceFailure("Could not run low stock query", e) from e

    def apply_delta(self, db: Session, product_id: int, delta: int) -> bool:
        """
        Add a signed delta to stock in a single UPDATE.

        The WHERE clause refuses any change that would leave stock negative,
        so the decrement is a compare-and-swap at storage level. Returns False
        when no row was updated (missing product or refused decrement).
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .where(Product.stock + delta >= 0)
            .values(stock=Product.stock + delta, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = db.execute(stmt)
        return result.rowcount == 1

    def insert(self, db: Session, product_data: Dict[str, Any]) -> Product:
        """Insert a product and commit; used by catalog administration and bulk import"""
        try:
            return self.create(db, obj_in=product_data)
        except IntegrityError as e:
            sku = product_data.get("sku")
            if sku and self.get_by_sku(db, sku) is not None:
                raise DuplicateSku(sku) from e
            raise PersistenceFailure(f"Could not insert product {sku}", e) from e


class CategoryStore(CRUDBase[Category]):
    def __init__(self):
        super().__init__(Category)

    def insert(self, db: Session, category_data: Dict[str, Any]) -> Category:
        try:
            return self.create(db, obj_in=category_data)
        except IntegrityError as e:
            raise PersistenceFailure(f"Could not insert category {category_data.get('name')}", e) from e


class ProviderStore(CRUDBase[Provider]):
    def __init__(self):
        super().__init__(Provider)

    def insert(self, db: Session, provider_data: Dict[str, Any]) -> Provider:
        try:
            return self.create(db, obj_in=provider_data)
        except IntegrityError as e:
            raise PersistenceFailure(f"Could not insert provider {provider_data.get('name')}", e) from e

# Create instances
catalog_store = CatalogStore()
category_store = CategoryStore()
provider_store = ProviderStore()
