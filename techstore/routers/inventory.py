"""
Stock movement router: sales, restocks and the movement history.
All writes go through the inventory engine.
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from techstore.config import Settings
from techstore.dependencies import get_engine, get_settings
from techstore.engine import InventoryEngine
from techstore.exceptions import TechStoreError
from techstore.models import MovementType
from techstore.routers.errors import to_http_exception
from techstore.schemas.inventory import MovementRequest, MovementResponse, MovementResult

router = APIRouter(prefix="/inventory", tags=["inventory"])

# ====================
# STOCK OPERATIONS
# ====================

@router.post("/products/{product_id}/sell", response_model=MovementResult)
def sell_product(
    product_id: int,
    request: MovementRequest,
    engine: InventoryEngine = Depends(get_engine),
):
    """
    Sell units of a product.
    Refused with 409 when the stock cannot cover the quantity.
    """
    try:
        receipt = engine.record(
            MovementType.SALE, product_id, request.quantity, request.note,
            operation_id=request.operation_id,
        )
    except TechStoreError as e:
        raise to_http_exception(e)

    return MovementResult(
        message="Sale completed",
        movement=MovementResponse.model_validate(receipt.movement),
        new_stock=receipt.new_stock,
    )

@router.post("/products/{product_id}/restock", response_model=MovementResult)
def restock_product(
    product_id: int,
    request: MovementRequest,
    engine: InventoryEngine = Depends(get_engine),
):
    """Add units of a product received from a provider"""
    try:
        receipt = engine.record(
            MovementType.RESTOCK, product_id, request.quantity, request.note,
            operation_id=request.operation_id,
        )
    except TechStoreError as e:
        raise to_http_exception(e)

    return MovementResult(
        message="Stock updated",
        movement=MovementResponse.model_validate(receipt.movement),
        new_stock=receipt.new_stock,
    )

# ====================
# LEDGER OPERATIONS
# ====================

@router.get("/movements/recent", response_model=List[MovementResponse])
def recent_movements(
    limit: Optional[int] = Query(None, ge=0, le=1000),
    engine: InventoryEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    """Latest movements, newest first"""
    if limit is None:
        limit = settings.RECENT_MOVEMENTS_LIMIT
    try:
        return engine.recent_movements(limit)
    except TechStoreError as e:
        raise to_http_exception(e)

@router.get("/products/{product_id}/movements", response_model=List[MovementResponse])
def product_movements(
    product_id: int,
    limit: int = Query(100, ge=0, le=1000),
    engine: InventoryEngine = Depends(get_engine),
):
    try:
        return engine.product_movements(product_id, limit)
    except TechStoreError as e:
        raise to_http_exception(e)
