"""
Read-only reports: best sellers, CSV exports and PDF reports.
Every report is recomputed from the current catalog and ledger.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse, Response
from io import StringIO
from datetime import datetime
from typing import List, Optional

from techstore.config import Settings
from techstore.dependencies import get_engine, get_settings
from techstore.engine import InventoryEngine
from techstore.exceptions import TechStoreError
from techstore.routers.errors import to_http_exception
from techstore.schemas.inventory import BestSellerEntry
from techstore.utils.csv_export import write_inventory_csv, write_movements_csv
from techstore.utils.pdf_reports import PDFReportGenerator

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/best-sellers", response_model=List[BestSellerEntry])
def best_sellers(
    limit: Optional[int] = Query(None, ge=0, le=100),
    engine: InventoryEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    """Products ranked by units sold"""
    if limit is None:
        limit = settings.TOP_SELLERS_LIMIT
    try:
        ranking = engine.best_sellers(limit)
    except TechStoreError as e:
        raise to_http_exception(e)

    return [
        BestSellerEntry(rank=position, product_name=name, quantity_sold=quantity)
        for position, (name, quantity) in enumerate(ranking.items(), start=1)
    ]


@router.get("/inventory.csv")
def download_inventory(
    engine: InventoryEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    try:
        products = engine.list_products()
    except TechStoreError as e:
        raise to_http_exception(e)

    output = StringIO()
    write_inventory_csv(products, output, delimiter=settings.CSV_DELIMITER)

    output.seek(0)
    filename = f"inventory_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
    return StreamingResponse(
        output,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/movements.csv")
def download_movements(
    limit: int = Query(1000, ge=0, le=100000),
    engine: InventoryEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    try:
        movements = engine.recent_movements(limit)
    except TechStoreError as e:
        raise to_http_exception(e)

    output = StringIO()
    write_movements_csv(movements, output, delimiter=settings.CSV_DELIMITER)

    output.seek(0)
    filename = f"movements_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
    return StreamingResponse(
        output,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/stock.pdf")
def stock_report_pdf(
    threshold: Optional[int] = Query(None),
    engine: InventoryEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    if threshold is None:
        threshold = settings.LOW_STOCK_THRESHOLD
    try:
        products = engine.list_products()
    except TechStoreError as e:
        raise to_http_exception(e)

    pdf = PDFReportGenerator(settings.APP_NAME).generate_stock_report(products, threshold)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": "attachment; filename=stock_report.pdf"}
    )


@router.get("/best-sellers.pdf")
def best_sellers_pdf(
    engine: InventoryEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    try:
        ranking = engine.best_sellers(settings.TOP_SELLERS_LIMIT)
    except TechStoreError as e:
        raise to_http_exception(e)

    pdf = PDFReportGenerator(settings.APP_NAME).generate_best_sellers_report(ranking)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": "attachment; filename=best_sellers.pdf"}
    )
