"""Tests for the transfer HTTP endpoints with a mocked ERP client."""

from __future__ import annotations

import json

import pytest
from starlette.testclient import TestClient

from uniform_transfer_server.controller import EMPLOYEE_HEADER, TransferController
from uniform_transfer_server.erp_client import ErpClientError
from uniform_transfer_server.server_http import create_app

from tests.fixtures.directory import CALLER_GUID, CALLER_ID, EMPLOYEE_ID, LOCATION_ID
from tests.fixtures.journals import (
    BY_FRP_RESPONSE,
    JOURNAL_DETAILS_RESPONSE,
    JOURNAL_TABLE_RESPONSE,
    RESPONSE_ERROR,
    RESPONSE_OK,
)

BASE = "/uniforms/transfers"
TARGET = {"inventLocationId": LOCATION_ID, "type": "Issuance"}


@pytest.fixture
def client(service, directory):
    """Test client over the REST routes only."""
    app = create_app(TransferController(service, directory))
    return TestClient(app, headers={EMPLOYEE_HEADER: CALLER_ID})


def _create_body(**overrides):
    body = {
        "inventLocationId": LOCATION_ID,
        "date": "2024-06-03",
        "employeeId": EMPLOYEE_ID,
        "type": "Issuance",
        "lines": [{"itemId": "UNI-GLOVES", "condition": "New", "quantity": 3}],
    }
    body.update(overrides)
    return body


def _list_rows(count):
    return [
        {
            "JournalId": f"UJ-{day:06d}",
            "TransDate": f"2024-06-{day:02d}T00:00:00",
            "LocationId": LOCATION_ID,
            "Posted": "No",
            "Employee": EMPLOYEE_ID,
        }
        for day in range(1, count + 1)
    ]


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "uniform-transfers", "mcp": False}

    def test_health_reports_mounted_mcp(self, service, directory):
        from uniform_transfer_server.server import create_mcp_server

        app = create_app(TransferController(service, directory), mcp_server=create_mcp_server())
        response = TestClient(app).get("/health")
        assert response.json()["mcp"] is True


# ---------------------------------------------------------------------------
# TestIndex
# ---------------------------------------------------------------------------


class TestIndex:

    def _params(self, **extra):
        params = dict(TARGET, fromDate="2024-06-01", toDate="2024-06-30")
        params.update(extra)
        return params

    def test_list_envelope(self, client, erp):
        erp.request_journal_table.return_value = JOURNAL_TABLE_RESPONSE["UniformJournalTable"]

        response = client.get(BASE, params=self._params())

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Uniform transfers."
        items = body["data"]["items"]
        assert [item["id"] for item in items] == ["UJ-000102", "UJ-000101"]
        assert items[1]["employeeFullName"] == "Jonas Berg"
        assert items[1]["posted"] is True
        assert items[1]["type"] == "Issuance"
        assert body["data"]["meta"] == {"currentPage": 1, "perPage": 15, "total": 2, "lastPage": 1}

        args = erp.request_journal_table.await_args.args
        assert args[0] == CALLER_GUID

    def test_pagination(self, client, erp):
        erp.request_journal_table.return_value = _list_rows(5)

        response = client.get(BASE, params=self._params(page=3, perPage=2))

        data = response.json()["data"]
        assert [item["id"] for item in data["items"]] == ["UJ-000001"]
        assert data["meta"]["lastPage"] == 3

    def test_filter(self, client, erp):
        erp.request_journal_table.return_value = JOURNAL_TABLE_RESPONSE["UniformJournalTable"]

        response = client.get(BASE, params=self._params(**{"filter[posted]": "false"}))

        assert [item["id"] for item in response.json()["data"]["items"]] == ["UJ-000102"]

    def test_bad_filter_value_is_server_error(self, client, erp):
        erp.request_journal_table.return_value = []

        response = client.get(BASE, params=self._params(**{"filter[posted]": "maybe"}))

        assert response.status_code == 500

    def test_validation_error(self, client, erp):
        response = client.get(BASE, params={"type": "Gift"})

        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "The given data was invalid."
        assert body["status"] == 422
        assert {"inventLocationId", "type", "fromDate", "toDate"} <= set(body["errors"])
        erp.request_journal_table.assert_not_awaited()

    def test_erp_failure(self, client, erp):
        erp.request_journal_table.side_effect = ErpClientError("timeout")

        response = client.get(BASE, params=self._params())

        assert response.status_code == 500
        assert response.json() == {
            "message": "Failed to get the list of uniform transfers: timeout",
            "errors": {},
            "status": 500,
        }


# ---------------------------------------------------------------------------
# TestShow
# ---------------------------------------------------------------------------


class TestShow:

    def test_details_with_lines(self, client, erp):
        erp.request_journal_details.return_value = JOURNAL_DETAILS_RESPONSE
        erp.request_by_frp.return_value = BY_FRP_RESPONSE["UniformByFRP"]

        response = client.get(f"{BASE}/UJ-000101", params=TARGET)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == "UJ-000101"
        assert data["employeeId"] == EMPLOYEE_ID
        assert data["lines"][0] == {
            "lineNum": 1,
            "itemId": "UNI-JACKET-M",
            "itemName": "Jacket, size M",
            "condition": "New",
            "quantity": 2,
            "availableQuantity": 14,
            "reason": "",
        }

    def test_frp_failure(self, client, erp):
        erp.request_journal_details.return_value = JOURNAL_DETAILS_RESPONSE
        erp.request_by_frp.side_effect = ErpClientError("down")

        response = client.get(f"{BASE}/UJ-000101", params=TARGET)

        assert response.status_code == 500
        assert response.json()["message"].startswith("Failed to get the uniform available for return")


# ---------------------------------------------------------------------------
# TestWrites
# ---------------------------------------------------------------------------


class TestCreate:

    def test_created(self, client, erp):
        erp.request_journal_create.return_value = "UJ-000200"

        response = client.post(BASE, json=_create_body())

        assert response.status_code == 201
        assert response.json() == {"message": "Uniform transfer created.", "data": {"id": "UJ-000200"}}

    def test_return_requires_reason(self, client, erp):
        response = client.post(BASE, json=_create_body(type="Return"))

        assert response.status_code == 422
        assert response.json()["errors"] == {
            "lines.0.reason": ["The lines.0.reason field is required."]
        }
        erp.request_journal_create.assert_not_awaited()

    def test_non_finite_quantity_rejected(self, client, erp):
        body = json.dumps(_create_body()).replace('"quantity": 3', '"quantity": NaN')

        response = client.post(BASE, content=body, headers={"Content-Type": "application/json"})

        assert response.status_code == 422
        assert response.json()["errors"] == {
            "lines.0.quantity": ["The lines.0.quantity field must be a number."]
        }
        erp.request_journal_create.assert_not_awaited()

    def test_invalid_json(self, client):
        response = client.post(
            BASE, content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 422
        assert "body" in response.json()["errors"]

    def test_erp_failure(self, client, erp):
        erp.request_journal_create.side_effect = ErpClientError("rejected")

        response = client.post(BASE, json=_create_body())

        assert response.status_code == 500
        assert response.json()["status"] == 500
        assert response.json()["message"] == "Failed to create the uniform transfer: rejected"


class TestUpdatePostDelete:

    def test_update(self, client, erp):
        erp.request_journal_update.return_value = RESPONSE_OK
        body = {
            "inventLocationId": LOCATION_ID,
            "employeeId": EMPLOYEE_ID,
            "type": "Issuance",
            "lines": [{"action": "Delete", "lineNum": 2, "condition": "Used", "quantity": 0}],
        }

        response = client.put(f"{BASE}/UJ-000101", json=body)

        assert response.status_code == 200
        assert response.json()["data"] == {"id": "UJ-000101"}
        assert erp.request_journal_update.await_args.args[2] == "UJ-000101"

    def test_post(self, client, erp):
        erp.request_journal_post.return_value = RESPONSE_OK

        response = client.post(f"{BASE}/UJ-000101/post", json=TARGET)

        assert response.status_code == 200
        assert response.json()["message"] == "Uniform transfer UJ-000101 posted."

    def test_delete_with_query_params(self, client, erp):
        erp.request_journal_delete.return_value = RESPONSE_OK

        response = client.delete(f"{BASE}/UJ-000102", params=TARGET)

        assert response.status_code == 200
        assert response.json()["message"] == "Uniform transfer UJ-000102 deleted."

    def test_delete_failure(self, client, erp):
        erp.request_journal_delete.side_effect = ErpClientError("locked")

        response = client.request("DELETE", f"{BASE}/UJ-000101", json=TARGET)

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to delete the uniform transfer: locked"


class TestBulkDelete:

    def test_all_deleted(self, client, erp):
        erp.request_journal_delete.side_effect = [RESPONSE_OK, RESPONSE_ERROR]

        response = client.request(
            "DELETE", f"{BASE}/bulk", json=dict(TARGET, ids=["UJ-000101", "UJ-000102"])
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"results": {"UJ-000101": True, "UJ-000102": False}}

    def test_failure_stops_and_reports(self, client, erp):
        erp.request_journal_delete.side_effect = [RESPONSE_OK, ErpClientError("locked")]

        response = client.request(
            "DELETE", f"{BASE}/bulk", json=dict(TARGET, ids=["UJ-000101", "UJ-000102", "UJ-000103"])
        )

        assert response.status_code == 500
        assert response.json()["errors"] == {"results": None}
        assert erp.request_journal_delete.await_count == 2

    def test_ids_required(self, client, erp):
        response = client.request("DELETE", f"{BASE}/bulk", json=TARGET)

        assert response.status_code == 422
        assert "ids" in response.json()["errors"]


class TestLines:

    def _line(self, **overrides):
        line = dict(TARGET, itemId="UNI-GLOVES", condition="New", quantity=1)
        line.update(overrides)
        return line

    def test_create_line(self, client, erp):
        response = client.post(f"{BASE}/UJ-000101/lines", json=self._line())

        assert response.status_code == 201
        assert response.json()["message"] == "Line added to uniform transfer UJ-000101."
        erp.request_journal_update.assert_not_awaited()

    def test_update_line(self, client):
        response = client.put(f"{BASE}/UJ-000101/lines/2", json=self._line(quantity=4))

        assert response.status_code == 200
        assert response.json()["message"] == "Line updated in uniform transfer UJ-000101."

    def test_update_line_return_requires_reason(self, client):
        response = client.put(f"{BASE}/UJ-000101/lines/2", json=self._line(type="Return"))

        assert response.status_code == 422
        assert list(response.json()["errors"]) == ["reason"]

    def test_delete_line(self, client):
        response = client.request("DELETE", f"{BASE}/UJ-000101/lines/2", json=TARGET)

        assert response.status_code == 200
        assert response.json()["data"] == {"id": "UJ-000101"}

    def test_line_num_must_be_integer(self, client):
        response = client.request("DELETE", f"{BASE}/UJ-000101/lines/two", json=TARGET)

        assert response.status_code in (404, 405)
