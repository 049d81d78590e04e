"""Pick the product description out of spreadsheet rows."""

from __future__ import annotations

import datetime as dt
import math
from typing import Iterable, List, Mapping, Optional

from services.models import Product

# Checked in order; the first hint found in any column name wins.
DESCRIPTION_COLUMN_HINTS: tuple[str, ...] = (
    "description",
    "libellé",
    "produit",
    "article",
    "designation",
    "désignation",
    "libelle",
)

NO_DESCRIPTIONS_MESSAGE = (
    "No product descriptions found in the Excel file. "
    "Please ensure the file has a column with product descriptions."
)


class NoDescriptionsError(ValueError):
    """Raised when no row yields a usable product description."""

    def __init__(self, message: str = NO_DESCRIPTIONS_MESSAGE) -> None:
        super().__init__(message)


def find_description_key(row: Mapping[str, object]) -> Optional[str]:
    keys = list(row.keys())
    for hint in DESCRIPTION_COLUMN_HINTS:
        for key in keys:
            if hint in str(key).lower():
                return key
    if keys:
        return keys[0]
    return None


def cell_to_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, dt.datetime) and not (value.hour or value.minute or value.second):
        return value.date().isoformat()
    return str(value)


def extract_description(row: Mapping[str, object]) -> Optional[str]:
    key = find_description_key(row)
    if key is None:
        return None
    return cell_to_text(row[key])


def extract_products(rows: Iterable[Mapping[str, object]]) -> List[Product]:
    products: List[Product] = []
    for row in rows:
        description = extract_description(row)
        if description is None or not description.strip():
            continue
        products.append(Product(description=description))
    return products
