# Overview: Pending-approval queue; submit, approve and reject product submissions.

"""
Pending-Approval Queue

The in-memory pending list mirrors the item_pending sheet. Every change is
written to the sheet first and applied to memory only if the sheet call
succeeded.

A SKU may live in at most one of {catalog, pending}; ensure_sku_available()
is checked before every insertion into pending and before approval.

Approval is not transactional: the pending row is deleted before the catalog
row is appended, and a failed append leaves the sheets and the cache out of
step until the next refresh.
"""
from __future__ import annotations

from typing import Optional

from flask import current_app

from ..extensions import catalog
from ..models import PENDING_COLUMNS, PendingProduct, Product
from ..state import normalize_sku
from ..time_utils import utcnow
from ..validation import DuplicateError, NotFoundError, PayloadPolicy, UpstreamError, validate_payload
from .catalog_service import locate_sku
from .loader_service import find_sheet, header_of, is_live_pending, iter_records, select_catalog_sheet

PENDING_POLICY = PayloadPolicy(
    writable_fields=(
        "sku",
        "brand",
        "productName",
        "category",
        "subCategory",
        "size",
        "color",
        "submittedBy",
    ),
    required_on_create=("sku", "brand", "productName"),
)

# Fallback column order when the catalog sheet has no header row
DEFAULT_CATALOG_COLUMNS = ["SKU", "Brand", "ProductName_Short", "Category", "Sub_Category"]


def _spreadsheet_id() -> str:
    spreadsheet_id = current_app.config.get("GOOGLE_SHEET_ID")
    if not spreadsheet_id:
        raise UpstreamError("GOOGLE_SHEET_ID is not configured")
    return spreadsheet_id


def ensure_sku_available(sku: str) -> None:
    """Raise DuplicateError if sku is already in the catalog or pending."""
    location = locate_sku(sku)
    if location is not None:
        raise DuplicateError(
            f"SKU already exists in {location}: {sku}", sku=sku, location=location
        )


def pending_sheet_title(create: bool = True) -> Optional[str]:
    spreadsheet_id = _spreadsheet_id()
    name = current_app.config["PENDING_SHEET_NAME"]
    sheet = find_sheet(catalog.gateway.list_sheets(spreadsheet_id), name)
    if sheet is not None:
        return sheet.title
    if not create:
        return None
    current_app.logger.info("Creating pending sheet %r", name)
    catalog.gateway.add_sheet(spreadsheet_id, name, PENDING_COLUMNS)
    return name


def add_pending(
    *,
    sku: str,
    brand: str,
    product_name: str,
    category: str = "",
    sub_category: str = "",
    size: str = "",
    color: str = "",
    submitted_by: str = "",
    sheet_title: Optional[str] = None,
) -> PendingProduct:
    """
    Append a submission to the pending sheet and queue.

    Callers validate required fields; this checks duplicates. sheet_title
    skips the sheet lookup when the caller already resolved it.
    Raises DuplicateError, UpstreamError.
    """
    ensure_sku_available(sku)

    record = PendingProduct(
        sku=sku,
        brand=brand,
        product_name=product_name,
        category=category,
        sub_category=sub_category,
        size=size,
        color=color,
        submitted_by=submitted_by,
        submitted_at=utcnow(),
    )
    title = sheet_title or pending_sheet_title(create=True)
    catalog.gateway.append_row(_spreadsheet_id(), title, record.to_sheet_row())
    catalog.state.add_pending(record)
    current_app.logger.info("Queued SKU %s for approval (by %s)", sku, submitted_by or "unknown")
    return record


def submit_pending(payload) -> PendingProduct:
    """Validate a JSON submission and queue it. Raises ValidationError, DuplicateError, UpstreamError."""
    fields = validate_payload(payload=payload, policy=PENDING_POLICY)
    return add_pending(
        sku=fields["sku"],
        brand=fields["brand"],
        product_name=fields["productName"],
        category=fields["category"],
        sub_category=fields["subCategory"],
        size=fields["size"],
        color=fields["color"],
        submitted_by=fields["submittedBy"],
    )


def list_pending() -> list[PendingProduct]:
    return list(catalog.state.pending)


def _delete_pending_row(sku: str) -> bool:
    """Delete the sheet row holding sku. False if the sheet has no such row."""
    title = pending_sheet_title(create=False)
    if title is None:
        current_app.logger.warning("Pending sheet missing while removing SKU %s", sku)
        return False

    spreadsheet_id = _spreadsheet_id()
    key = normalize_sku(sku)
    values = catalog.gateway.read_values(spreadsheet_id, title)
    for row_index, record in iter_records(values):
        if normalize_sku(record.get("SKU")) == key and is_live_pending(record):
            catalog.gateway.delete_row(spreadsheet_id, title, row_index)
            return True

    current_app.logger.warning("SKU %s not found in pending sheet, removing from memory only", sku)
    return False


def build_catalog_row(header: list[str], record: PendingProduct) -> list[str]:
    """
    Catalog sheet row for an approved submission, aligned to header.

    Only identity, brand, name, category, sub-category, size and color are
    carried over; every other catalog column is left blank.
    """
    by_column = {
        "sku": record.sku,
        "brand": record.brand,
        "productname_short": record.product_name,
        "product name": record.product_name,
        "productname": record.product_name,
        "category": record.category,
        "sub_category": record.sub_category,
        "subcategory": record.sub_category,
        "size": record.size,
        "color": record.color,
    }
    columns = header if any(header) else DEFAULT_CATALOG_COLUMNS
    row = [by_column.get(col.strip().lower(), "") for col in columns]
    # ProductName_Short and Product Name may both exist; fill only the first
    seen_name = False
    for i, col in enumerate(columns):
        if col.strip().lower() in ("productname_short", "product name", "productname"):
            if seen_name:
                row[i] = ""
            seen_name = True
    return row


def _catalog_sheet() -> tuple[str, list[str]]:
    spreadsheet_id = _spreadsheet_id()
    sheet = select_catalog_sheet(
        catalog.gateway.list_sheets(spreadsheet_id),
        current_app.config["CATALOG_SHEET_NAME"],
        current_app.config["PENDING_SHEET_NAME"],
    )
    if sheet is None:
        raise UpstreamError("No usable catalog sheet found")
    values = catalog.gateway.read_values(spreadsheet_id, sheet.title)
    return sheet.title, header_of(values)


def approve_pending(sku: str) -> Product:
    """
    Move a pending submission into the catalog.

    Raises NotFoundError (not pending), DuplicateError (already in catalog),
    UpstreamError.
    """
    state = catalog.state
    record = state.find_pending(sku)
    if record is None:
        raise NotFoundError(f"Pending product not found: {sku}")
    if state.find_product(record.sku) is not None:
        raise DuplicateError(
            f"SKU already exists in {current_app.config['CATALOG_SHEET_NAME']}: {record.sku}",
            sku=record.sku,
            location=current_app.config["CATALOG_SHEET_NAME"],
        )

    title, header = _catalog_sheet()
    _delete_pending_row(record.sku)
    try:
        catalog.gateway.append_row(_spreadsheet_id(), title, build_catalog_row(header, record))
    except UpstreamError:
        current_app.logger.error(
            "Pending row for SKU %s was deleted but the catalog append failed", record.sku
        )
        raise

    product = state.add_product(
        Product(
            sku=record.sku,
            brand=record.brand,
            name=record.product_name,
            category=record.category,
            sub_category=record.sub_category,
        )
    )
    state.remove_pending(record.sku)
    current_app.logger.info("Approved SKU %s into %s", record.sku, title)
    return product


def reject_pending(sku: str, reason: Optional[str] = None) -> PendingProduct:
    """Drop a pending submission. The reason is logged, not stored. Raises NotFoundError, UpstreamError."""
    state = catalog.state
    record = state.find_pending(sku)
    if record is None:
        raise NotFoundError(f"Pending product not found: {sku}")

    _delete_pending_row(record.sku)
    state.remove_pending(record.sku)
    current_app.logger.info("Rejected SKU %s (reason: %s)", record.sku, reason or "none given")
    return record
