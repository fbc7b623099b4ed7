"""
Translate inventory failures into user-facing HTTP errors.
Insufficient stock is a business answer (409 with a restock hint);
missing products and storage failures are reported as system-level problems.
"""
from fastapi import HTTPException, status

from techstore.exceptions import (
    TechStoreError, ProductNotFound, InsufficientStock, InvalidQuantity, DuplicateSku, PersistenceFailure,
    OperationConflict
)

def to_http_exception(error: TechStoreError) -> HTTPException:
    if isinstance(error, InsufficientStock):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "INSUFFICIENT_STOCK",
                "message": f"Only {error.have} units in stock, cannot sell {error.want}",
                "current_stock": error.have,
                "requested": error.want,
                "shortfall": error.shortfall,
                "suggestion": "Restock the product or lower the quantity",
            },
        )
    if isinstance(error, ProductNotFound):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "PRODUCT_NOT_FOUND", "message": str(error)},
        )
    if isinstance(error, InvalidQuantity):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "INVALID_QUANTITY", "message": str(error)},
        )
    if isinstance(error, DuplicateSku):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "DUPLICATE_SKU", "message": str(error)},
        )
    if isinstance(error, OperationConflict):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "OPERATION_CONFLICT",
                "message": str(error),
                "existing_movement_id": error.existing_movement_id,
            },
        )
    if isinstance(error, PersistenceFailure):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "PERSISTENCE_FAILURE",
                "message": "System error while saving; check recent movements before retrying",
            },
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "SYSTEM_ERROR", "message": str(error)},
    )
