"""
Pytest fixtures for the catalog backend tests.

Provides an in-memory stand-in for the Google gateway, seeded spreadsheets,
an application per test and admin credential helpers.
"""

import copy

import pytest

from catalog_app import create_app
from catalog_app.extensions import catalog
from catalog_app.models import PENDING_COLUMNS
from catalog_app.services.auth_service import hash_password
from catalog_app.services.google_gateway import SheetInfo
from catalog_app.validation import UpstreamError

CATALOG_SHEET_ID = "catalog-spreadsheet"
INVENTORY_SHEET_ID = "inventory-spreadsheet"
DRIVE_FOLDER_ID = "image-folder"
ADMIN_PASSWORD = "Warehouse2024"

CATALOG_HEADER = ["SKU", "Brand", "ProductName_Short", "Category", "Sub_Category", "Stock", "Price"]


class FakeGateway:
    """
    In-memory replacement for GoogleGateway.

    spreadsheets: {spreadsheet_id: {sheet_title: [[cell, ...], ...]}}
    fail(method): make the next calls to method raise UpstreamError.
    """

    def __init__(self):
        self.spreadsheets = {}
        self.images = []
        self.files = {}
        self.failures = {}
        self.calls = []

    def fail(self, method: str, message: str = "backend unavailable"):
        self.failures[method] = message

    def heal(self, method: str):
        self.failures.pop(method, None)

    def _check(self, method: str, *args):
        self.calls.append((method, args))
        if method in self.failures:
            raise UpstreamError(f"{method} failed: {self.failures[method]}")

    def list_sheets(self, spreadsheet_id):
        self._check("list_sheets", spreadsheet_id)
        sheets = self.spreadsheets.get(spreadsheet_id)
        if sheets is None:
            raise UpstreamError(f"spreadsheets.get failed: Requested entity was not found ({spreadsheet_id})")
        return [
            SheetInfo(sheet_id=i + 1, title=title, row_count=len(rows))
            for i, (title, rows) in enumerate(sheets.items())
        ]

    def read_values(self, spreadsheet_id, title):
        self._check("read_values", spreadsheet_id, title)
        return copy.deepcopy(self.spreadsheets[spreadsheet_id][title])

    def append_row(self, spreadsheet_id, title, values):
        self._check("append_row", spreadsheet_id, title)
        self.spreadsheets[spreadsheet_id][title].append(list(values))

    def add_sheet(self, spreadsheet_id, title, header):
        self._check("add_sheet", spreadsheet_id, title)
        self.spreadsheets[spreadsheet_id][title] = [list(header)]

    def delete_row(self, spreadsheet_id, title, row_index):
        self._check("delete_row", spreadsheet_id, title)
        del self.spreadsheets[spreadsheet_id][title][row_index]

    def list_folder_images(self, folder_id):
        self._check("list_folder_images", folder_id)
        return [dict(f) for f in self.images]

    def download_file(self, file_id):
        self._check("download_file", file_id)
        if file_id not in self.files:
            raise UpstreamError("drive.files.get_media failed: File not found")
        return self.files[file_id]

    # -- helpers for assertions -------------------------------------------

    def sheet(self, title, spreadsheet_id=CATALOG_SHEET_ID):
        return self.spreadsheets[spreadsheet_id][title]

    def skus_in(self, title, spreadsheet_id=CATALOG_SHEET_ID):
        return [row[0] for row in self.sheet(title, spreadsheet_id)[1:] if row]


def seed_gateway() -> FakeGateway:
    gateway = FakeGateway()
    gateway.spreadsheets[CATALOG_SHEET_ID] = {
        "item_master": [
            list(CATALOG_HEADER),
            ["ABC-1", "Acme", "Acme Runner", "Shoes", "Running", "5", "59000"],
            ["XYZ-9", "Zeta", "Zeta Cap", "Hats", "Caps", "", ""],
            ["ABC-2", "Acme", "Acme Trail", "Shoes", "Trail", "", ""],
            ["", "Ghost", "Row without SKU", "Hats", "Caps", "", ""],
        ],
        "item_pending": [
            list(PENDING_COLUMNS),
            ["PEN-1", "Acme", "Acme Sandal", "Shoes", "Sandals", "270", "Black", "kim", "2026-10-01T09:00:00Z", "pending"],
        ],
    }
    gateway.spreadsheets[INVENTORY_SHEET_ID] = {
        "Inventory": [
            ["sku", "location", "onHand", "reserved", "available"],
            ["ABC-1", "Main", "10", "2", "8"],
            ["ABC-1", "Sub", "3", "0", "3"],
            ["XYZ-9", "Main", "lots", "", "-4"],
        ],
    }
    gateway.images = [
        {"id": "file-abc-1", "name": "ABC-1.png"},
        {"id": "file-xyz-9", "name": "XYZ-9.JPG"},
    ]
    gateway.files = {
        "file-abc-1": b"\x89PNG\r\n\x1a\nfake-png",
        "file-xyz-9": b"\xff\xd8\xfffake-jpeg",
    }
    return gateway


@pytest.fixture(scope="session")
def admin_password_hash():
    """bcrypt hash of ADMIN_PASSWORD (low cost factor to keep tests fast)."""
    return hash_password(ADMIN_PASSWORD, rounds=4)


@pytest.fixture
def test_config(admin_password_hash):
    return {
        "TESTING": True,
        "GOOGLE_SHEET_ID": CATALOG_SHEET_ID,
        "GOOGLE_INVENTORY_SHEET_ID": INVENTORY_SHEET_ID,
        "GOOGLE_DRIVE_FOLDER_ID": DRIVE_FOLDER_ID,
        "CATALOG_SHEET_NAME": "item_master",
        "PENDING_SHEET_NAME": "item_pending",
        "INVENTORY_SHEET_NAME": "Inventory",
        "ADMIN_PASSWORD_HASH": admin_password_hash,
        "ADMIN_PASSWORD": "",
        "LOAD_ON_STARTUP": True,
    }


@pytest.fixture
def gateway():
    return seed_gateway()


@pytest.fixture
def app(test_config, gateway):
    """Application loaded from the seeded fake gateway."""
    app = create_app(test_config, gateway=gateway)
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def state(app):
    return catalog.state


def admin_headers(password: str = ADMIN_PASSWORD) -> dict:
    return {"x-admin-password": password}


def bearer_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
