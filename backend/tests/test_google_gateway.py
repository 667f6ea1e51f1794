"""
GoogleGateway error mapping, driven through stubbed client services.
"""

import httplib2
import pytest
from googleapiclient.errors import UnknownApiNameOrVersion

from catalog_app import create_app
from catalog_app.extensions import catalog
from catalog_app.services import import_service, loader_service
from catalog_app.services.google_gateway import GoogleGateway
from catalog_app.validation import UpstreamError


class _Request:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error

    def execute(self):
        if self.error is not None:
            raise self.error
        return self.result


class _Node:
    """Resource stub: attribute calls chain down to a _Request."""

    def __init__(self, routes, path=""):
        self._routes = routes
        self._path = path

    def __getattr__(self, name):
        path = f"{self._path}.{name}" if self._path else name

        def call(*args, **kwargs):
            if path in self._routes:
                return self._routes[path]
            return _Node(self._routes, path)

        return call


def stub_gateway(sheets=None, drive=None) -> GoogleGateway:
    gateway = GoogleGateway("unused-credentials.json")
    gateway._sheets_service = _Node(sheets or {})
    gateway._drive_service = _Node(drive or {})
    return gateway


@pytest.fixture
def offline_app(test_config):
    def make(gateway):
        config = dict(test_config, LOAD_ON_STARTUP=False)
        app = create_app(config, gateway=gateway)
        return app

    return make


class TestErrorMapping:
    def test_transport_error_becomes_upstream_error(self):
        gateway = stub_gateway(drive={
            "files.list": _Request(error=httplib2.ServerNotFoundError("Unable to find the server")),
        })
        with pytest.raises(UpstreamError, match="drive.files.list failed"):
            gateway.list_folder_images("folder")

    def test_client_library_error_becomes_upstream_error(self):
        gateway = stub_gateway(sheets={
            "spreadsheets.get": _Request(error=UnknownApiNameOrVersion("sheets v4")),
        })
        with pytest.raises(UpstreamError):
            gateway.list_sheets("sheet-id")

    def test_successful_calls_pass_through(self):
        gateway = stub_gateway(drive={
            "files.list": _Request(result={"files": [{"id": "f1", "name": "A-1.png"}]}),
        })
        assert gateway.list_folder_images("folder") == [{"id": "f1", "name": "A-1.png"}]


class TestLoadersSwallowTransportErrors:
    def test_image_load_keeps_previous_map(self, offline_app):
        gateway = stub_gateway(drive={
            "files.list": _Request(error=httplib2.ServerNotFoundError("Unable to find the server")),
        })
        app = offline_app(gateway)
        with app.app_context():
            assert loader_service.load_images() == 0
            assert catalog.state.image_map == {}

    def test_pending_load_keeps_previous_queue(self, offline_app):
        gateway = stub_gateway(sheets={
            "spreadsheets.get": _Request(error=httplib2.RedirectLimit("Redirected too many times", {}, b"")),
        })
        app = offline_app(gateway)
        with app.app_context():
            assert loader_service.load_pending() == 0

    def test_import_reports_transport_failure_per_row(self, offline_app):
        sheets = {
            "spreadsheets.get": _Request(result={
                "sheets": [{"properties": {"sheetId": 7, "title": "item_pending", "gridProperties": {"rowCount": 1}}}],
            }),
            "spreadsheets.values.append": _Request(error=httplib2.ServerNotFoundError("Unable to find the server")),
        }
        app = offline_app(stub_gateway(sheets=sheets))
        with app.app_context():
            report = import_service.import_csv(
                b"SKU,Brand,ProductName\r\nT-1,Acme,One\r\nT-2,Acme,Two\r\n"
            )
        assert report["errorCount"] == 2
        assert [e["row"] for e in report["results"]["errors"]] == [2, 3]
