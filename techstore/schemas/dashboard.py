"""
Low stock alert schemas.
"""
from pydantic import BaseModel
from typing import List
from enum import Enum

class AlertLevel(str, Enum):
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"

class AlertType(str, Enum):
    STOCK_LOW = "STOCK_LOW"
    STOCK_OUT = "STOCK_OUT"

class StockAlert(BaseModel):
    alert_type: AlertType
    level: AlertLevel
    message: str
    product_id: int
    sku: str
    name: str
    current_stock: int
    threshold: int

class LowStockResponse(BaseModel):
    threshold: int
    alerts: List[StockAlert]
    critical_count: int
    low_count: int
