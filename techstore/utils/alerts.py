"""
Low stock alert generation.
Read-only: built from the catalog's low stock query, recomputed on every call.
"""
from sqlalchemy.orm import Session
from typing import List

from techstore.crud.catalog import CatalogStore
from techstore.schemas.dashboard import AlertType, AlertLevel, StockAlert

def check_stock_alerts(db: Session, catalog: CatalogStore, threshold: int) -> List[StockAlert]:
    """
    Alerts for every product below threshold.
    Out of stock products are CRITICAL, the rest WARNING.
    """
    alerts = []
    for product in catalog.list_below(db, threshold):
        if product.stock == 0:
            alerts.append(StockAlert(
                alert_type=AlertType.STOCK_OUT,
                level=AlertLevel.CRITICAL,
                message=f"{product.name} is OUT OF STOCK (threshold: {threshold})",
                product_id=product.id,
                sku=product.sku,
                name=product.name,
                current_stock=product.stock,
                threshold=threshold,
            ))
        else:
            alerts.append(StockAlert(
                alert_type=AlertType.STOCK_LOW,
                level=AlertLevel.WARNING,
                message=f"{product.name} stock is LOW: {product.stock} left (threshold: {threshold})",
                product_id=product.id,
                sku=product.sku,
                name=product.name,
                current_stock=product.stock,
                threshold=threshold,
            ))
    return alerts
