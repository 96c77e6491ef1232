from __future__ import annotations

import asyncio
import os
import logging
import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Sequence

import httpx

from .models import TransferType
from .utils.logging import truncate


logger = logging.getLogger("uniform_transfer_server.http")

MAX_RETRIES = 3
RETRY_DELAYS = [1.0, 2.0, 4.0]

ERP_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _redact_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    redacted = {}
    for k, v in headers.items():
        if str(k).lower() == "authorization":
            redacted[k] = "[REDACTED]"
        else:
            redacted[k] = v
    return redacted


def _erp_date(value: date) -> str:
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    return value.strftime(ERP_DATE_FORMAT)


def _as_rows(data: Any, key: str) -> List[Dict[str, Any]]:
    """Normalize an ERP collection that may be a list, a wrapper or a single row."""
    if isinstance(data, dict) and key in data:
        data = data[key]
    if data is None:
        return []
    if isinstance(data, dict):
        return [data] if data else []
    if isinstance(data, list):
        return [row for row in data if isinstance(row, dict)]
    raise ErpClientError(f"Unexpected {key} payload: {truncate(str(data), 200)}")


class ErpClientError(Exception):
    """Represents an error when communicating with the ERP gateway."""


@dataclass
class ErpClient:
    """Minimal async client for the ERP uniform journal web functions.

    Every operation is a POST of a JSON document to ``<base_url><operation>``.
    Uses a per-request httpx.AsyncClient with automatic retry on transient errors.
    """

    base_url: str
    api_token: str
    company: str = ""

    @classmethod
    def from_env(cls) -> "ErpClient":
        """Create a client using environment variables loaded via dotenv.

        Required env vars:
        - ERP_BASE_URL
        - ERP_API_TOKEN
        Optional:
        - ERP_COMPANY (ERP company / data area header)
        """
        base_url = os.getenv("ERP_BASE_URL")
        api_token = os.getenv("ERP_API_TOKEN")

        if not base_url or not api_token:
            raise ErpClientError("Missing ERP_BASE_URL or ERP_API_TOKEN in environment.")

        if not base_url.endswith("/"):
            base_url = base_url + "/"

        return cls(
            base_url=base_url,
            api_token=api_token,
            company=os.getenv("ERP_COMPANY", ""),
        )

    def _headers(self) -> dict:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_token}",
        }
        if self.company:
            headers["X-Company"] = self.company
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute HTTP request with per-request client and retry logic.

        Any httpx failure surfaces as ErpClientError.
        """
        headers = self._headers()
        logger.debug("HTTP %s %s headers=%s", method.upper(), path, _redact_headers(headers))
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(30.0, connect=10.0),
            ) as client:
                return await self._execute_with_retry(client, method, path, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ErpClientError(f"Request {method.upper()} {path} failed: {e!r}") from e

    async def _execute_with_retry(
        self, client: httpx.AsyncClient, method: str, path: str, **kwargs
    ) -> httpx.Response:
        last_error: Exception | None = None
        for attempt in range(MAX_RETRIES):
            try:
                start = time.perf_counter()
                response = await getattr(client, method)(path, **kwargs)
                elapsed_ms = (time.perf_counter() - start) * 1000.0

                logger.debug(
                    "HTTP %s %s status=%s elapsed_ms=%.2f",
                    method.upper(),
                    path,
                    response.status_code,
                    elapsed_ms,
                )

                # Don't retry client errors (4xx except 429)
                if 400 <= response.status_code < 500 and response.status_code != 429:
                    return response

                # Retry on rate limit (429) and server errors (5xx)
                if response.status_code == 429 or response.status_code >= 500:
                    if attempt < MAX_RETRIES - 1:
                        logger.warning(
                            "Retrying %s %s (status %s, attempt %d/%d)",
                            method.upper(), path, response.status_code,
                            attempt + 1, MAX_RETRIES,
                        )
                        await asyncio.sleep(RETRY_DELAYS[attempt])
                        continue

                return response

            except (httpx.TimeoutException, httpx.NetworkError) as e:
                last_error = e
                if attempt < MAX_RETRIES - 1:
                    logger.warning(
                        "Retrying %s %s (%s, attempt %d/%d)",
                        method.upper(), path, type(e).__name__,
                        attempt + 1, MAX_RETRIES,
                    )
                    await asyncio.sleep(RETRY_DELAYS[attempt])
                    continue

        raise ErpClientError(f"Request failed after {MAX_RETRIES} retries: {last_error}")

    async def _call(self, operation: str, payload: Dict[str, Any]) -> Any:
        """POST payload to an ERP web function and return the decoded body."""
        response = await self._request("post", operation, json=payload)
        try:
            data = response.json()
        except ValueError:
            raise ErpClientError(
                f"{operation} returned an undecodable body: "
                f"{response.status_code} {truncate(response.text or '', 200)}"
            ) from None

        if response.status_code in (200, 201):
            return data

        raise ErpClientError(
            f"{operation} error: {response.status_code} {(response.text or '')[:200]}"
        )

    # ----------------------------- Web functions -----------------------------

    async def request_journal_table(
        self,
        worker_guid: str,
        department_guid: str,
        invent_location_id: str,
        journal_type: TransferType,
        from_date: date,
        to_date: date,
    ) -> List[Dict[str, Any]]:
        """List journal headers for a location, type and date range."""
        data = await self._call(
            "wfRequestUniformJournalTable",
            {
                "WorkerGuid": worker_guid,
                "DepartmentGuid": department_guid,
                "InventLocationId": invent_location_id,
                "JournalsType": journal_type.value,
                "FromDate": _erp_date(from_date),
                "ToDate": _erp_date(to_date),
            },
        )
        return _as_rows(data, "UniformJournalTable")

    async def request_journal_details(
        self,
        worker_guid: str,
        department_guid: str,
        journal_id: str,
        journal_type: TransferType,
    ) -> Dict[str, Any]:
        """Fetch one journal header with its lines."""
        data = await self._call(
            "wfRequestUniformJournalDetails",
            {
                "WorkerGuid": worker_guid,
                "DepartmentGuid": department_guid,
                "JournalId": journal_id,
                "JournalsType": journal_type.value,
            },
        )
        if not isinstance(data, dict):
            raise ErpClientError(
                f"Unexpected journal details payload: {truncate(str(data), 200)}"
            )
        return data

    async def request_by_frp(
        self,
        worker_guid: str,
        department_guid: str,
        employee_id: str,
        invent_location_id: str,
    ) -> List[Dict[str, Any]]:
        """List uniform items an employee may return at a location."""
        data = await self._call(
            "wfRequestUniformByFRP",
            {
                "WorkerGuid": worker_guid,
                "DepartmentGuid": department_guid,
                "EmployeeId": employee_id,
                "InventLocationId": invent_location_id,
            },
        )
        return _as_rows(data, "UniformByFRP")

    async def request_journal_create(
        self,
        worker_guid: str,
        department_guid: str,
        invent_location_id: str,
        employee_id: str,
        journal_type: TransferType,
        trans_date: date,
        lines: Sequence[Dict[str, Any]],
    ) -> str:
        """Create a journal and return its JournalId."""
        data = await self._call(
            "wfRequestUniformJournalCreate",
            {
                "WorkerGuid": worker_guid,
                "DepartmentGuid": department_guid,
                "InventLocationId": invent_location_id,
                "EmployeeId": employee_id,
                "JournalsType": journal_type.value,
                "TransDate": _erp_date(trans_date),
                "Lines": list(lines),
            },
        )
        if isinstance(data, dict):
            if data.get("IsError"):
                raise ErpClientError(
                    f"wfRequestUniformJournalCreate rejected: {data.get('Message') or data}"
                )
            journal_id = data.get("JournalId")
        else:
            journal_id = data
        if not journal_id:
            raise ErpClientError("No JournalId returned from journal creation")
        return str(journal_id)

    async def request_journal_update(
        self,
        worker_guid: str,
        department_guid: str,
        journal_id: str,
        employee_id: str,
        journal_type: TransferType,
        lines: Sequence[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Apply line actions to a journal. Returns the ERP status document."""
        data = await self._call(
            "wfRequestUniformJournalUpdate",
            {
                "WorkerGuid": worker_guid,
                "DepartmentGuid": department_guid,
                "JournalId": journal_id,
                "EmployeeId": employee_id,
                "JournalsType": journal_type.value,
                "Lines": list(lines),
            },
        )
        return data if isinstance(data, dict) else {"result": data}

    async def request_journal_delete(
        self,
        worker_guid: str,
        department_guid: str,
        journal_id: str,
        journal_type: TransferType,
    ) -> Dict[str, Any]:
        """Delete an unposted journal. Returns the ERP status document."""
        data = await self._call(
            "wfRequestUniformJournalDelete",
            {
                "WorkerGuid": worker_guid,
                "DepartmentGuid": department_guid,
                "JournalId": journal_id,
                "JournalsType": journal_type.value,
            },
        )
        return data if isinstance(data, dict) else {"result": data}

    async def request_journal_post(
        self,
        worker_guid: str,
        department_guid: str,
        journal_id: str,
        journal_type: TransferType,
    ) -> Dict[str, Any]:
        """Post (finalize) a journal. Returns the ERP status document."""
        data = await self._call(
            "wfRequestUniformJournalPost",
            {
                "WorkerGuid": worker_guid,
                "DepartmentGuid": department_guid,
                "JournalId": journal_id,
                "JournalsType": journal_type.value,
            },
        )
        return data if isinstance(data, dict) else {"result": data}
