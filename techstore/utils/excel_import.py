"""
Bulk product import from .xlsx workbooks.

Column layout (first sheet, header in row 1):
  name | description | sku | price | cost price | stock | category id | provider id

Each row is inserted through the catalog store directly: loading a catalog is
not a stock movement, so no ledger records are written. A bad row is recorded
and skipped; the rest of the batch still loads.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
import logging
from typing import Any, BinaryIO, Dict, List, Optional, Union

import openpyxl
from sqlalchemy.orm import Session

from techstore.crud.catalog import CatalogStore
from techstore.exceptions import TechStoreError

logger = logging.getLogger(__name__)

COLUMNS = ("name", "description", "sku", "price", "cost_price", "stock", "category_id", "provider_id")


class RowFormatError(ValueError):
    pass


@dataclass
class ImportResult:
    imported: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.errors)


def _text(value: Any, column: str, required: bool = True) -> Optional[str]:
    if value is None or str(value).strip() == "":
        if required:
            raise RowFormatError(f"'{column}' is empty")
        return None
    return str(value).strip()


def _money(value: Any, column: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise RowFormatError(f"'{column}' is not a number")
    try:
        # str() first so float cells do not leak binary noise into the Decimal
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except InvalidOperation as e:
        raise RowFormatError(f"'{column}' is not a number: {value!r}") from e


def _integer(value: Any, column: str, required: bool = True) -> Optional[int]:
    if value is None or (isinstance(value, str) and value.strip() == ""):
        if required:
            raise RowFormatError(f"'{column}' is empty")
        return None
    if isinstance(value, bool):
        raise RowFormatError(f"'{column}' is not an integer")
    if isinstance(value, float):
        if value != int(value):
            raise RowFormatError(f"'{column}' is not an integer: {value!r}")
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise RowFormatError(f"'{column}' is not an integer: {value!r}") from e


def parse_row(values: tuple) -> Dict[str, Any]:
    """Turn one worksheet row into product data for CatalogStore.insert"""
    cells = list(values) + [None] * (len(COLUMNS) - len(values))
    raw = dict(zip(COLUMNS, cells))
    return {
        "name": _text(raw["name"], "name"),
        "description": _text(raw["description"], "description", required=False),
        "sku": _text(raw["sku"], "sku"),
        "price": _money(raw["price"], "price"),
        "cost_price": _money(raw["cost_price"], "cost_price"),
        "stock": _integer(raw["stock"], "stock"),
        "category_id": _integer(raw["category_id"], "category_id"),
        "provider_id": _integer(raw["provider_id"], "provider_id", required=False),
        "is_active": True,
    }


def import_products(db: Session, catalog: CatalogStore, source: Union[str, Path, BinaryIO]) -> ImportResult:
    """Load every data row of the first sheet. Row failures never abort the batch."""
    workbook = openpyxl.load_workbook(source, read_only=True, data_only=True)
    result = ImportResult()
    try:
        sheet = workbook.worksheets[0]
        logger.info(f"Starting product import from sheet '{sheet.title}'")

        for row_number, values in enumerate(sheet.iter_rows(min_row=2, values_only=True), start=2):
            if not values or values[0] is None or str(values[0]).strip() == "":
                continue

            sku = None
            try:
                product_data = parse_row(values)
                sku = product_data["sku"]
                catalog.insert(db, product_data)
                result.imported += 1
            except (RowFormatError, TechStoreError) as e:
                logger.warning(f"Row {row_number} skipped: {e}")
                result.errors.append({"row": row_number, "sku": sku, "error": str(e)})
    finally:
        workbook.close()

    logger.info(f"Import completed: {result.imported} loaded, {result.skipped} skipped")
    return result
