# backend/catalog_app/config.py
from __future__ import annotations
import os

from dotenv import load_dotenv

# .env next to the repo root, then the working directory
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Spreadsheet holding item_master and item_pending
    GOOGLE_SHEET_ID = os.environ.get("GOOGLE_SHEET_ID", "")
    # Optional second spreadsheet holding the Inventory sheet
    GOOGLE_INVENTORY_SHEET_ID = os.environ.get("GOOGLE_INVENTORY_SHEET_ID", "")
    GOOGLE_DRIVE_FOLDER_ID = os.environ.get("GOOGLE_DRIVE_FOLDER_ID", "")
    GOOGLE_CREDENTIALS_FILE = os.environ.get("GOOGLE_CREDENTIALS_FILE", "credentials.json")

    CATALOG_SHEET_NAME = os.environ.get("CATALOG_SHEET_NAME", "item_master")
    PENDING_SHEET_NAME = os.environ.get("PENDING_SHEET_NAME", "item_pending")
    INVENTORY_SHEET_NAME = os.environ.get("INVENTORY_SHEET_NAME", "Inventory")

    # bcrypt hash of the admin secret; ADMIN_PASSWORD is hashed at startup if no hash is set
    ADMIN_PASSWORD_HASH = os.environ.get("ADMIN_PASSWORD_HASH", "")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "")
    ADMIN_SESSION_HOURS = int(os.environ.get("ADMIN_SESSION_HOURS", "12"))

    LOAD_ON_STARTUP = _env_bool("LOAD_ON_STARTUP", True)

    CORS_ORIGINS = [
        o.strip()
        for o in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if o.strip()
    ]

    # Upload size cap for the CSV bulk import
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024
