"""Shared test fixtures for uniform transfer tests."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from uniform_transfer_server.directory import StaticDirectory
from uniform_transfer_server.erp_client import ErpClient
from uniform_transfer_server.service import TransferService

from tests.fixtures.directory import DIRECTORY_DATA


@pytest.fixture
def mock_response():
    """Factory for creating mock HTTP responses.

    Usage:
        resp = mock_response(200, {"key": "value"})
        resp = mock_response(401, text="Unauthorized")
    """
    def _make(status_code=200, json_data=None, text=None, headers=None):
        response = MagicMock()
        response.status_code = status_code
        if json_data is not None:
            response.json.return_value = json_data
            response.text = text or str(json_data)
        else:
            response.json.side_effect = ValueError("No JSON")
            response.text = text or ""
        response.headers = headers or {}
        return response
    return _make


@pytest.fixture
def mock_client():
    """Create an ErpClient with mocked _request method."""
    with patch.dict("os.environ", {
        "ERP_BASE_URL": "https://erp.test/api",
        "ERP_API_TOKEN": "test_token",
    }):
        client = ErpClient.from_env()
        client._request = AsyncMock()
        return client


@pytest.fixture
def directory():
    return StaticDirectory.from_data(DIRECTORY_DATA)


@pytest.fixture
def erp():
    """ErpClient stand-in with every web function as an AsyncMock."""
    erp = MagicMock(spec=ErpClient)
    erp.base_url = "https://erp.test/api/"
    for name in (
        "request_journal_table",
        "request_journal_details",
        "request_by_frp",
        "request_journal_create",
        "request_journal_update",
        "request_journal_delete",
        "request_journal_post",
    ):
        setattr(erp, name, AsyncMock())
    return erp


@pytest.fixture
def service(erp, directory):
    return TransferService(erp, directory)


# All resource modules that build a TransferService
_RESOURCE_MODULES = [
    "uniform_transfer_server.resources.transfers",
]


@pytest.fixture
def mock_service_class(directory):
    """Patch TransferService in all resource modules, yield (mock_class, mock_instance).

    The instance carries the real test directory so validation runs unchanged.
    """
    mock_instance = MagicMock()
    mock_instance.directory = directory
    mock_class = MagicMock()
    mock_class.from_env.return_value = mock_instance

    patchers = [patch(f"{mod}.TransferService", mock_class) for mod in _RESOURCE_MODULES]
    for p in patchers:
        p.start()
    yield mock_class, mock_instance
    for p in patchers:
        p.stop()
