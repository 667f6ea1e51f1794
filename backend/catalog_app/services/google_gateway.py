# Overview: Thin wrapper over the Google Sheets v4 and Drive v3 clients.

"""
Google Gateway

The only module that imports the Google client libraries. Every client
failure (HTTP error, auth error, transport error) surfaces as UpstreamError.
No retries: each call is attempted exactly once.

googleapiclient/httplib2 are not thread-safe, so all calls made through one
gateway are serialized with a lock.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleClientError
from googleapiclient.errors import HttpError

from ..validation import UpstreamError

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.readonly",
]

DRIVE_PAGE_SIZE = 1000


@dataclass(frozen=True)
class SheetInfo:
    sheet_id: int
    title: str
    row_count: int


def quote_sheet_title(title: str) -> str:
    """A1 notation sheet reference; single quotes are doubled."""
    return "'" + title.replace("'", "''") + "'"


class GoogleGateway:
    def __init__(self, credentials_file: str):
        self.credentials_file = credentials_file
        self._credentials = None
        self._sheets_service = None
        self._drive_service = None
        self._lock = threading.Lock()

    # -- client construction ---------------------------------------------

    def _get_credentials(self):
        if self._credentials is None:
            try:
                self._credentials = Credentials.from_service_account_file(
                    self.credentials_file, scopes=SCOPES
                )
            except (OSError, ValueError) as e:
                raise UpstreamError(f"Failed to load Google credentials: {e}") from e
        return self._credentials

    def _sheets(self):
        if self._sheets_service is None:
            self._sheets_service = build(
                "sheets", "v4", credentials=self._get_credentials(), cache_discovery=False
            )
        return self._sheets_service

    def _drive(self):
        if self._drive_service is None:
            self._drive_service = build(
                "drive", "v3", credentials=self._get_credentials(), cache_discovery=False
            )
        return self._drive_service

    @contextmanager
    def _call(self, description: str):
        with self._lock:
            try:
                yield
            except HttpError as e:
                raise UpstreamError(f"{description} failed: {e.reason or e}") from e
            except (GoogleClientError, GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
                raise UpstreamError(f"{description} failed: {e}") from e

    # -- Sheets ------------------------------------------------------------

    def list_sheets(self, spreadsheet_id: str) -> list[SheetInfo]:
        with self._call("spreadsheets.get"):
            resp = (
                self._sheets()
                .spreadsheets()
                .get(
                    spreadsheetId=spreadsheet_id,
                    fields="sheets(properties(sheetId,title,gridProperties(rowCount)))",
                )
                .execute()
            )
        sheets = []
        for sh in resp.get("sheets", []):
            props = sh.get("properties", {})
            grid = props.get("gridProperties", {})
            sheets.append(
                SheetInfo(
                    sheet_id=int(props.get("sheetId", 0)),
                    title=str(props.get("title", "")),
                    row_count=int(grid.get("rowCount", 0)),
                )
            )
        return sheets

    def read_values(self, spreadsheet_id: str, title: str) -> list[list[str]]:
        """All populated cells of a sheet as rows of formatted strings."""
        with self._call(f"values.get {title}"):
            resp = (
                self._sheets()
                .spreadsheets()
                .values()
                .get(spreadsheetId=spreadsheet_id, range=quote_sheet_title(title))
                .execute()
            )
        return [[str(cell) for cell in row] for row in resp.get("values", [])]

    def append_row(self, spreadsheet_id: str, title: str, values: list[str]) -> None:
        with self._call(f"values.append {title}"):
            (
                self._sheets()
                .spreadsheets()
                .values()
                .append(
                    spreadsheetId=spreadsheet_id,
                    range=f"{quote_sheet_title(title)}!A1",
                    valueInputOption="RAW",
                    insertDataOption="INSERT_ROWS",
                    body={"values": [values]},
                )
                .execute()
            )

    def add_sheet(self, spreadsheet_id: str, title: str, header: list[str]) -> None:
        """Create a tab with a frozen header row."""
        with self._call(f"addSheet {title}"):
            (
                self._sheets()
                .spreadsheets()
                .batchUpdate(
                    spreadsheetId=spreadsheet_id,
                    body={
                        "requests": [
                            {
                                "addSheet": {
                                    "properties": {
                                        "title": title,
                                        "gridProperties": {"frozenRowCount": 1},
                                    }
                                }
                            }
                        ]
                    },
                )
                .execute()
            )
        self.append_row(spreadsheet_id, title, header)

    def delete_row(self, spreadsheet_id: str, title: str, row_index: int) -> None:
        """Delete one row; row_index is 0-based (row 1 in the UI is index 0)."""
        sheet = next((s for s in self.list_sheets(spreadsheet_id) if s.title == title), None)
        if sheet is None:
            raise UpstreamError(f"Sheet not found: {title}")
        with self._call(f"deleteDimension {title}"):
            (
                self._sheets()
                .spreadsheets()
                .batchUpdate(
                    spreadsheetId=spreadsheet_id,
                    body={
                        "requests": [
                            {
                                "deleteDimension": {
                                    "range": {
                                        "sheetId": sheet.sheet_id,
                                        "dimension": "ROWS",
                                        "startIndex": row_index,
                                        "endIndex": row_index + 1,
                                    }
                                }
                            }
                        ]
                    },
                )
                .execute()
            )

    # -- Drive -------------------------------------------------------------

    def list_folder_images(self, folder_id: str) -> list[dict]:
        """[{"id": ..., "name": ...}] for every non-trashed image in a folder."""
        query = f"'{folder_id}' in parents and mimeType contains 'image/' and trashed = false"
        files: list[dict] = []
        page_token = None
        with self._call("drive.files.list"):
            while True:
                resp = (
                    self._drive()
                    .files()
                    .list(
                        q=query,
                        fields="nextPageToken, files(id, name)",
                        pageSize=DRIVE_PAGE_SIZE,
                        pageToken=page_token,
                    )
                    .execute()
                )
                files.extend(resp.get("files", []))
                page_token = resp.get("nextPageToken")
                if not page_token:
                    break
        return files

    def download_file(self, file_id: str) -> bytes:
        with self._call("drive.files.get_media"):
            return self._drive().files().get_media(fileId=file_id).execute()
