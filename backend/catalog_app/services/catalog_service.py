# Overview: Read-only queries over the cached product catalog.

from __future__ import annotations

from typing import Any, Optional

from flask import current_app

from ..extensions import catalog
from ..models import Product
from ..state import normalize_sku
from ..validation import ValidationError


def _distinct_sorted(values) -> list[str]:
    return sorted({v for v in values if v})


def list_brands() -> list[str]:
    return _distinct_sorted(p.brand for p in catalog.state.products)


def list_categories() -> list[str]:
    return _distinct_sorted(p.category for p in catalog.state.products)


def list_subcategories(category: Optional[str] = None) -> list[str]:
    products = catalog.state.products
    if category:
        products = [p for p in products if p.category == category]
    return _distinct_sorted(p.sub_category for p in products)


def _matches_query(p: Product, term: str) -> bool:
    return (
        term in p.sku.lower()
        or term in p.name.lower()
        or term in p.category.lower()
        or term in p.sub_category.lower()
    )


def search_products(
    *,
    brand: Optional[str] = None,
    category: Optional[str] = None,
    q: Optional[str] = None,
    sub_category: Optional[str] = None,
) -> list[Product]:
    """
    Filter the cached catalog. Every non-empty filter must hold:
    brand/category/sub_category match exactly, q is a case-insensitive
    substring of sku, name, category or sub-category.
    """
    filtered = catalog.state.products

    if brand:
        filtered = [p for p in filtered if p.brand == brand]
    if category:
        filtered = [p for p in filtered if p.category == category]
    if sub_category:
        filtered = [p for p in filtered if p.sub_category == sub_category]
    if q:
        term = q.lower()
        filtered = [p for p in filtered if _matches_query(p, term)]

    return list(filtered)


def bulk_lookup(skus: Any) -> list[Product]:
    """Products whose SKU equals any of skus, ignoring case and surrounding whitespace."""
    if not isinstance(skus, list):
        raise ValidationError("skus must be an array")
    wanted = {normalize_sku(str(s)) for s in skus if s is not None}
    wanted.discard("")
    return [p for p in catalog.state.products if normalize_sku(p.sku) in wanted]


def locate_sku(sku: str) -> Optional[str]:
    """Name of the sheet already holding sku (catalog first), or None."""
    state = catalog.state
    if state.find_product(sku) is not None:
        return current_app.config["CATALOG_SHEET_NAME"]
    if state.find_pending(sku) is not None:
        return current_app.config["PENDING_SHEET_NAME"]
    return None


def check_sku(sku: str) -> dict:
    location = locate_sku(sku)
    return {"sku": sku, "exists": location is not None, "location": location}
