"""
Catalog router: products, categories, providers and bulk import.
Catalog administration writes rows directly; stock changes go through /inventory.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File, status
from sqlalchemy.orm import Session
from typing import List, Optional
from io import BytesIO
from zipfile import BadZipFile
import logging

from openpyxl.utils.exceptions import InvalidFileException

from techstore.config import Settings
from techstore.crud.catalog import catalog_store, category_store, provider_store
from techstore.dependencies import get_db, get_engine, get_settings
from techstore.engine import InventoryEngine
from techstore.exceptions import TechStoreError
from techstore.routers.errors import to_http_exception
from techstore.schemas.dashboard import LowStockResponse, AlertLevel
from techstore.schemas.inventory import (
    ProductCreate, ProductResponse, StockResponse,
    CategoryCreate, CategoryResponse, ProviderCreate, ProviderResponse,
    ImportSummary, ImportRowError,
)
from techstore.utils.alerts import check_stock_alerts
from techstore.utils.excel_import import import_products

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])

# ====================
# PRODUCTS
# ====================

@router.get("/products", response_model=List[ProductResponse])
def list_products(engine: InventoryEngine = Depends(get_engine)):
    """Full catalog ordered by ID"""
    try:
        return engine.list_products()
    except TechStoreError as e:
        raise to_http_exception(e)

@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(product: ProductCreate, db: Session = Depends(get_db)):
    try:
        created = catalog_store.insert(db, product.model_dump())
    except TechStoreError as e:
        raise to_http_exception(e)
    logger.info(f"Product registered: {created.sku} - {created.name}")
    return created

@router.get("/products/low-stock", response_model=LowStockResponse)
def low_stock_radar(
    threshold: Optional[int] = Query(None, ge=0, le=2**31 - 1),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Products whose stock is strictly below the threshold"""
    if threshold is None:
        threshold = settings.LOW_STOCK_THRESHOLD
    try:
        alerts = check_stock_alerts(db, catalog_store, threshold)
    except TechStoreError as e:
        raise to_http_exception(e)

    return LowStockResponse(
        threshold=threshold,
        alerts=alerts,
        critical_count=len([a for a in alerts if a.level == AlertLevel.CRITICAL]),
        low_count=len([a for a in alerts if a.level == AlertLevel.WARNING]),
    )

@router.post("/products/import", response_model=ImportSummary)
def bulk_import_products(file: UploadFile = File(...), db: Session = Depends(get_db)):
    """
    Load products from an .xlsx workbook.
    Bad rows are reported and skipped; no ledger entries are written.
    """
    if not (file.filename or "").lower().endswith(".xlsx"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .xlsx workbooks are supported"
        )

    try:
        result = import_products(db, catalog_store, BytesIO(file.file.read()))
    except TechStoreError as e:
        raise to_http_exception(e)
    except (BadZipFile, InvalidFileException, OSError, ValueError, KeyError) as e:
        # Not a readable xlsx file
        logger.warning(f"Unreadable workbook {file.filename}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Could not read workbook: {e}"
        )

    return ImportSummary(
        imported=result.imported,
        skipped=result.skipped,
        errors=[ImportRowError(**err) for err in result.errors],
    )

@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, engine: InventoryEngine = Depends(get_engine)):
    try:
        return engine.get_product(product_id)
    except TechStoreError as e:
        raise to_http_exception(e)

@router.get("/products/{product_id}/stock", response_model=StockResponse)
def get_product_stock(product_id: int, engine: InventoryEngine = Depends(get_engine)):
    try:
        return StockResponse(product_id=product_id, stock=engine.get_stock(product_id))
    except TechStoreError as e:
        raise to_http_exception(e)

# ====================
# CATEGORIES / PROVIDERS
# ====================

@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    return category_store.get_multi(db, limit=1000)

@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(category: CategoryCreate, db: Session = Depends(get_db)):
    try:
        return category_store.insert(db, category.model_dump())
    except TechStoreError as e:
        raise to_http_exception(e)

@router.get("/providers", response_model=List[ProviderResponse])
def list_providers(db: Session = Depends(get_db)):
    return provider_store.get_multi(db, limit=1000)

@router.post("/providers", response_model=ProviderResponse, status_code=status.HTTP_201_CREATED)
def create_provider(provider: ProviderCreate, db: Session = Depends(get_db)):
    try:
        return provider_store.insert(db, provider.model_dump())
    except TechStoreError as e:
        raise to_http_exception(e)
