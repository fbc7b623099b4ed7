"""
Catalog and ledger schemas:
- Money is Decimal, never float
- Quantities are integers; the engine decides what counts as valid
- Ledger records are read-only
"""
from pydantic import BaseModel, ConfigDict, Field, StrictInt
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from techstore.models import MovementType

# Category / Provider
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: bool = True

class CategoryResponse(CategoryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int

class ProviderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=150)
    phone: Optional[str] = Field(None, max_length=30)
    is_active: bool = True

class ProviderResponse(ProviderCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None

# Product Schemas
class ProductBase(BaseModel):
    sku: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, decimal_places=2)
    cost_price: Decimal = Field(..., ge=0, decimal_places=2)
    category_id: int
    provider_id: Optional[int] = None
    is_active: bool = True

class ProductCreate(ProductBase):
    stock: int = Field(0, ge=0)

class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    stock: int
    created_at: Optional[datetime] = None

class StockResponse(BaseModel):
    product_id: int
    stock: int

# Movement Schemas (Append-only)
class MovementRequest(BaseModel):
    quantity: StrictInt
    note: Optional[str] = Field(None, max_length=500)
    operation_id: Optional[str] = Field(None, min_length=1, max_length=64)

class MovementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    movement_type: MovementType
    quantity: int
    notes: Optional[str] = None
    operation_id: Optional[str] = None
    created_at: Optional[datetime] = None

class MovementResult(BaseModel):
    message: str
    movement: MovementResponse
    new_stock: int

# Rankings
class BestSellerEntry(BaseModel):
    rank: int
    product_name: str
    quantity_sold: int

# Bulk import
class ImportRowError(BaseModel):
    row: int
    sku: Optional[str] = None
    error: str

class ImportSummary(BaseModel):
    imported: int
    skipped: int
    errors: List[ImportRowError]
