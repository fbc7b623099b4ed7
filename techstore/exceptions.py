"""
Typed failures raised by the stores and the inventory engine.
Front ends map these to user-facing messages; nothing here is HTTP aware.
"""
from typing import Optional


class TechStoreError(Exception):
    """Base class for every inventory failure"""


class ProductNotFound(TechStoreError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product ID {product_id} does not exist")


class InsufficientStock(TechStoreError):
    """Business-rule refusal: the caller can retry with a smaller quantity."""

    def __init__(self, product_id: int, have: int, want: int):
        self.product_id = product_id
        self.have = have
        self.want = want
        super().__init__(
            f"Insufficient stock for product {product_id}: have {have}, cannot sell {want}"
        )

    @property
    def shortfall(self) -> int:
        return self.want - self.have


class InvalidQuantity(TechStoreError):
    def __init__(self, quantity: int, message: Optional[str] = None):
        self.quantity = quantity
        super().__init__(message or f"Quantity must be greater than 0 (got {quantity})")


class DuplicateSku(TechStoreError):
    def __init__(self, sku: str):
        self.sku = sku
        super().__init__(f"A product with SKU '{sku}' already exists")


class PersistenceFailure(TechStoreError):
    """Unexpected storage error. The outcome of the operation is unknown."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message if cause is None else f"{message}: {cause}")


class OperationConflict(TechStoreError):
    """An operation id was reused for a different movement."""

    def __init__(self, operation_id: str, existing_movement_id: int):
        self.operation_id = operation_id
        self.existing_movement_id = existing_movement_id
        super().__init__(
            f"Operation '{operation_id}' was already used for a different movement "
            f"(movement {existing_movement_id})"
        )
