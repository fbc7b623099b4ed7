"""
CSV export of the catalog and the movement ledger.
Pure functions of the rows they are given; nothing here touches the database.
"""
import csv
from io import StringIO
from pathlib import Path
from typing import Iterable, TextIO, Union

from techstore.models import Product, StockMovement

INVENTORY_HEADER = [
    "ID", "SKU", "NAME", "DESCRIPTION", "PRICE", "COST_PRICE",
    "STOCK", "CATEGORY", "PROVIDER", "ACTIVE",
]

MOVEMENTS_HEADER = ["ID", "PRODUCT_ID", "TYPE", "QUANTITY", "DATE", "NOTES"]


def _writer(stream: TextIO, delimiter: str):
    # QUOTE_MINIMAL quotes fields holding the delimiter, quotes or newlines and doubles quotes
    return csv.writer(stream, delimiter=delimiter, quotechar='"',
                      quoting=csv.QUOTE_MINIMAL, lineterminator="\n")


def write_inventory_csv(products: Iterable[Product], stream: TextIO, delimiter: str = ";") -> int:
    """Write the catalog to stream. Returns the number of product rows."""
    writer = _writer(stream, delimiter)
    writer.writerow(INVENTORY_HEADER)

    count = 0
    for p in products:
        writer.writerow([
            p.id,
            p.sku or "",
            p.name or "",
            p.description or "",
            str(p.price),
            str(p.cost_price),
            p.stock,
            p.category_id,
            "" if p.provider_id is None else p.provider_id,
            "1" if p.is_active else "0",
        ])
        count += 1
    return count


def write_movements_csv(movements: Iterable[StockMovement], stream: TextIO, delimiter: str = ";") -> int:
    writer = _writer(stream, delimiter)
    writer.writerow(MOVEMENTS_HEADER)

    count = 0
    for m in movements:
        writer.writerow([
            m.id,
            m.product_id,
            m.movement_type,
            m.quantity,
            m.created_at.strftime("%Y-%m-%d %H:%M:%S") if m.created_at else "",
            m.notes or "",
        ])
        count += 1
    return count


def inventory_csv(products: Iterable[Product], delimiter: str = ";") -> str:
    output = StringIO()
    write_inventory_csv(products, output, delimiter)
    return output.getvalue()


def export_inventory_to_file(products: Iterable[Product], path: Union[str, Path], delimiter: str = ";") -> int:
    with open(path, "w", encoding="utf-8", newline="") as fh:
        return write_inventory_csv(products, fh, delimiter)
