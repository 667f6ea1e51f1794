# Overview: Loaders that read the catalog, inventory and pending sheets and the Drive image folder.

"""
Sheet/Drive loaders.

Each loader issues its read calls through the Google gateway, transforms the
result and replaces one collection of the catalog state wholesale.

Failure policy:
- load_images, load_inventory, load_pending log UpstreamError and keep the
  previous collection, so a partial catalog can still be served.
- load_catalog propagates UpstreamError; a failed catalog load is fatal at
  startup.
"""
from __future__ import annotations

import os
from collections import defaultdict
from typing import Iterator, Optional

from flask import current_app

from ..extensions import catalog
from ..models import ImageEntry, InventoryRecord, PendingProduct, PENDING_STATUS, Product
from ..time_utils import parse_iso_datetime
from ..validation import UpstreamError
from .google_gateway import SheetInfo

CATALOG_NAME_KEYWORDS = ("item", "master", "inventory")


# =============================================================================
# ROW HELPERS
# =============================================================================

def _is_numeric_or_empty(cell: str) -> bool:
    s = (cell or "").strip()
    if not s:
        return True
    try:
        float(s.replace(",", ""))
    except ValueError:
        return False
    return True


def detect_header(values: list[list[str]]) -> int:
    """
    Index of the header row in a sheet's values.

    The first row is the header unless every one of its cells is numeric or
    empty (a title/number row above the real header), in which case it is
    the second row.
    """
    if len(values) > 1 and all(_is_numeric_or_empty(c) for c in values[0]):
        return 1
    return 0


def iter_records(values: list[list[str]]) -> Iterator[tuple[int, dict[str, str]]]:
    """
    Yield (row_index, record) for each data row below the detected header.

    row_index is the 0-based grid index of the row (usable for deletion);
    record maps each non-blank header to the stripped cell value.
    """
    if not values:
        return
    header_idx = detect_header(values)
    headers = [h.strip() for h in values[header_idx]]
    for offset, row in enumerate(values[header_idx + 1:], start=header_idx + 1):
        if not any((c or "").strip() for c in row):
            continue
        record = {}
        for col, name in enumerate(headers):
            if not name:
                continue
            record[name] = row[col].strip() if col < len(row) else ""
        yield offset, record


def header_of(values: list[list[str]]) -> list[str]:
    if not values:
        return []
    return [h.strip() for h in values[detect_header(values)]]


def parse_quantity(value) -> int:
    """Sheet cell -> non-negative int; blanks and garbage become 0."""
    s = str(value or "").strip().replace(",", "")
    if not s:
        return 0
    try:
        qty = int(float(s))
    except ValueError:
        return 0
    return max(qty, 0)


def select_catalog_sheet(
    sheets: list[SheetInfo],
    catalog_name: str,
    pending_name: str,
) -> Optional[SheetInfo]:
    """
    The configured catalog sheet, else the first sheet whose title looks like
    an item master, else the first sheet with data rows.
    """
    wanted = catalog_name.lower()
    pending = pending_name.lower()
    for sheet in sheets:
        if sheet.title.lower() == wanted:
            return sheet
    for sheet in sheets:
        title = sheet.title.lower()
        if title == pending:
            continue
        if any(k in title for k in CATALOG_NAME_KEYWORDS):
            current_app.logger.warning(
                "Catalog sheet %r not found, using %r", catalog_name, sheet.title
            )
            return sheet
    for sheet in sheets:
        if sheet.title.lower() != pending and sheet.row_count > 1:
            current_app.logger.warning(
                "Catalog sheet %r not found, using first data sheet %r", catalog_name, sheet.title
            )
            return sheet
    return None


def find_sheet(sheets: list[SheetInfo], title: str) -> Optional[SheetInfo]:
    wanted = title.lower()
    return next((s for s in sheets if s.title.lower() == wanted), None)


# =============================================================================
# LOADERS
# =============================================================================

def load_images() -> int:
    """Map SKU -> Drive image (file base name is the SKU). Returns mapped count."""
    folder_id = current_app.config.get("GOOGLE_DRIVE_FOLDER_ID")
    if not folder_id:
        current_app.logger.warning("GOOGLE_DRIVE_FOLDER_ID not set, skipping images")
        return 0

    try:
        files = catalog.gateway.list_folder_images(folder_id)
    except UpstreamError as e:
        current_app.logger.error("Drive image load failed: %s", e)
        return len(catalog.state.image_map)

    image_map: dict[str, ImageEntry] = {}
    for f in files:
        name = str(f.get("name") or "")
        sku = os.path.splitext(name)[0]
        if not sku:
            continue
        image_map[sku] = ImageEntry(sku=sku, file_id=str(f.get("id")), name=name)

    catalog.state.replace_images(image_map)
    current_app.logger.info("Found %d image files, %d mapped to SKUs", len(files), len(image_map))
    return len(image_map)


def load_inventory() -> int:
    """Group the Inventory sheet by SKU. Returns the number of SKUs with records."""
    spreadsheet_id = current_app.config.get("GOOGLE_INVENTORY_SHEET_ID")
    if not spreadsheet_id:
        current_app.logger.warning("GOOGLE_INVENTORY_SHEET_ID not set, skipping inventory")
        return 0

    sheet_name = current_app.config["INVENTORY_SHEET_NAME"]
    gateway = catalog.gateway
    try:
        sheet = find_sheet(gateway.list_sheets(spreadsheet_id), sheet_name)
        if sheet is None:
            current_app.logger.warning("Inventory sheet %r not found", sheet_name)
            return len(catalog.state.inventory_map)
        values = gateway.read_values(spreadsheet_id, sheet.title)
    except UpstreamError as e:
        current_app.logger.error("Inventory load failed: %s", e)
        return len(catalog.state.inventory_map)

    inventory_map: dict[str, list[InventoryRecord]] = defaultdict(list)
    rows = 0
    for _, record in iter_records(values):
        sku = record.get("sku", "")
        if not sku:
            continue
        inventory_map[sku].append(
            InventoryRecord(
                location=record.get("location", ""),
                on_hand=parse_quantity(record.get("onHand")),
                reserved=parse_quantity(record.get("reserved")),
                available=parse_quantity(record.get("available")),
            )
        )
        rows += 1

    catalog.state.replace_inventory(dict(inventory_map))
    current_app.logger.info("Loaded %d inventory rows for %d SKUs", rows, len(inventory_map))
    return len(inventory_map)


def product_from_record(record: dict[str, str]) -> Product:
    return Product(
        sku=record.get("SKU", ""),
        brand=record.get("Brand", ""),
        name=record.get("ProductName_Short") or record.get("Product Name", ""),
        category=record.get("Category", ""),
        sub_category=record.get("Sub_Category", ""),
        stock=record.get("Stock") or None,
        price=record.get("Price") or None,
    )


def load_catalog() -> int:
    """
    Load the item_master sheet into the product cache.

    Raises UpstreamError when the sheet cannot be read or no usable sheet
    exists; the previous cache is kept in that case.
    """
    spreadsheet_id = current_app.config.get("GOOGLE_SHEET_ID")
    if not spreadsheet_id:
        raise UpstreamError("GOOGLE_SHEET_ID is not configured")

    gateway = catalog.gateway
    sheets = gateway.list_sheets(spreadsheet_id)
    sheet = select_catalog_sheet(
        sheets,
        current_app.config["CATALOG_SHEET_NAME"],
        current_app.config["PENDING_SHEET_NAME"],
    )
    if sheet is None:
        raise UpstreamError("No usable catalog sheet found")

    values = gateway.read_values(spreadsheet_id, sheet.title)
    products = [product_from_record(r) for _, r in iter_records(values)]
    products = [p for p in products if p.sku]

    catalog.state.replace_products(products)
    current_app.logger.info("Loaded %d products from sheet %r", len(products), sheet.title)
    return len(products)


def is_live_pending(record: dict[str, str]) -> bool:
    """Blank or "pending" status; approved/rejected rows stay in the sheet as history."""
    status = record.get("Status", "").strip().lower()
    return not status or status == PENDING_STATUS


def pending_from_record(record: dict[str, str]) -> PendingProduct:
    submitted_at = None
    raw_ts = record.get("SubmittedAt", "")
    if raw_ts:
        try:
            submitted_at = parse_iso_datetime(raw_ts)
        except ValueError:
            current_app.logger.warning("Unparseable SubmittedAt %r for SKU %s", raw_ts, record.get("SKU"))
    return PendingProduct(
        sku=record.get("SKU", ""),
        brand=record.get("Brand", ""),
        product_name=record.get("ProductName", ""),
        category=record.get("Category", ""),
        sub_category=record.get("SubCategory", ""),
        size=record.get("Size", ""),
        color=record.get("Color", ""),
        submitted_by=record.get("SubmittedBy", ""),
        submitted_at=submitted_at,
    )


def load_pending() -> int:
    """Mirror the item_pending sheet into the pending queue. Missing sheet means empty queue."""
    spreadsheet_id = current_app.config.get("GOOGLE_SHEET_ID")
    if not spreadsheet_id:
        return 0

    sheet_name = current_app.config["PENDING_SHEET_NAME"]
    gateway = catalog.gateway
    try:
        sheet = find_sheet(gateway.list_sheets(spreadsheet_id), sheet_name)
        if sheet is None:
            current_app.logger.warning("Pending sheet %r not found", sheet_name)
            catalog.state.replace_pending([])
            return 0
        values = gateway.read_values(spreadsheet_id, sheet.title)
    except UpstreamError as e:
        current_app.logger.error("Pending load failed: %s", e)
        return len(catalog.state.pending)

    pending = []
    for _, record in iter_records(values):
        if not record.get("SKU"):
            continue
        if not is_live_pending(record):
            continue
        pending.append(pending_from_record(record))

    catalog.state.replace_pending(pending)
    current_app.logger.info("Loaded %d pending products", len(pending))
    return len(pending)
