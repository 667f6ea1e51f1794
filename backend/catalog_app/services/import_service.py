# Overview: CSV bulk import into the pending queue and the downloadable CSV template.

"""
CSV Bulk Import

Pipeline for an uploaded file:
1. reject ZIP/XLSX content by its magic bytes
2. strip a UTF-8 byte-order mark
3. parse with a header row (csv.DictReader)
4. classify each row as success / duplicate / error
5. return counts plus the three classified lists

Rows are independent: a failure on one row never aborts the others and
nothing is rolled back. Row numbers count the header as row 1, so the first
data row is row 2. The three lists always partition the input rows.
"""
from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from typing import Any

from flask import current_app

from ..validation import DuplicateError, MalformedCSVError, UnsupportedFileTypeError, UpstreamError
from .pending_service import add_pending, pending_sheet_title

ZIP_MAGIC = b"PK\x03\x04"
UTF8_BOM = b"\xef\xbb\xbf"

TEMPLATE_COLUMNS = [
    "SKU",
    "Brand",
    "ProductName",
    "Category",
    "SubCategory",
    "Size",
    "Color",
    "SubmittedBy",
]
REQUIRED_COLUMNS = ("SKU", "Brand", "ProductName")


@dataclass
class ImportReport:
    success: list[dict[str, Any]] = field(default_factory=list)
    duplicates: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.success) + len(self.duplicates) + len(self.errors)

    def to_dict(self) -> dict:
        return {
            "message": (
                f"Processed {self.total} rows: {len(self.success)} queued, "
                f"{len(self.duplicates)} duplicates, {len(self.errors)} errors"
            ),
            "successCount": len(self.success),
            "duplicateCount": len(self.duplicates),
            "errorCount": len(self.errors),
            "total": self.total,
            "results": {
                "success": self.success,
                "duplicates": self.duplicates,
                "errors": self.errors,
            },
        }


def parse_csv(data: bytes) -> list[dict[str, str]]:
    """
    Decode and parse an uploaded CSV into header-keyed records.

    Raises UnsupportedFileTypeError for XLSX/ZIP content and MalformedCSVError
    when the content cannot be decoded or parsed, or holds no data rows.
    """
    if data[:4] == ZIP_MAGIC:
        raise UnsupportedFileTypeError(
            "Excel (.xlsx) files are not supported. Save the sheet as CSV (UTF-8) and upload again."
        )
    if data.startswith(UTF8_BOM):
        data = data[len(UTF8_BOM):]

    try:
        text = data.decode("utf-8")
        reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
        if reader.fieldnames is not None:
            reader.fieldnames = [(name or "").strip() for name in reader.fieldnames]
        records = [
            {k: (v or "").strip() if isinstance(v, str) else "" for k, v in row.items() if k}
            for row in reader
        ]
    except (UnicodeDecodeError, csv.Error) as e:
        raise MalformedCSVError(f"Could not parse CSV file: {e}") from e

    if not records:
        raise MalformedCSVError("CSV file has no data rows")
    return records


def import_rows(records: list[dict[str, str]]) -> ImportReport:
    report = ImportReport()
    # looked up on the first row that needs it, then reused
    sheet_title = None

    for row_number, record in enumerate(records, start=2):
        sku = record.get("SKU", "")
        missing = [col for col in REQUIRED_COLUMNS if not record.get(col)]
        if missing:
            report.errors.append({
                "row": row_number,
                "sku": sku,
                "error": f"Missing required fields: {', '.join(missing)}",
            })
            continue

        try:
            if sheet_title is None:
                sheet_title = pending_sheet_title(create=True)
            pending = add_pending(
                sku=sku,
                brand=record["Brand"],
                product_name=record["ProductName"],
                category=record.get("Category", ""),
                sub_category=record.get("SubCategory", ""),
                size=record.get("Size", ""),
                color=record.get("Color", ""),
                submitted_by=record.get("SubmittedBy", ""),
                sheet_title=sheet_title,
            )
        except DuplicateError as e:
            report.duplicates.append({"row": row_number, "sku": sku, "location": e.location})
            continue
        except UpstreamError as e:
            current_app.logger.error("CSV row %d (SKU %s) could not be queued: %s", row_number, sku, e)
            report.errors.append({"row": row_number, "sku": sku, "error": str(e)})
            continue

        report.success.append({"row": row_number, "sku": pending.sku, "name": pending.product_name})

    return report


def import_csv(data: bytes) -> dict:
    """Parse an uploaded CSV and queue every valid, new row. Returns the report dict."""
    records = parse_csv(data)
    report = import_rows(records)
    current_app.logger.info(
        "CSV import: %d rows, %d queued, %d duplicates, %d errors",
        report.total, len(report.success), len(report.duplicates), len(report.errors),
    )
    return report.to_dict()


def template_csv() -> bytes:
    """Header-only CSV template with a UTF-8 BOM (so spreadsheet apps detect the encoding)."""
    buf = io.StringIO(newline="")
    writer = csv.writer(buf, lineterminator="\r\n")
    writer.writerow(TEMPLATE_COLUMNS)
    return UTF8_BOM + buf.getvalue().encode("utf-8")
