"""Uniform transfer orchestration over the ERP journal web functions."""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from .directory import StaticDirectory
from .erp_client import ErpClient, ErpClientError
from .errors import (
    CreateItemError,
    DeleteItemError,
    GetByFrpError,
    GetDetailsError,
    GetListError,
    PostItemError,
    UpdateItemError,
)
from .mapper import TransferDetailsMapper, map_create_line, map_update_line
from .models import (
    CreateRequest,
    TransferDetails,
    TransferLine,
    TransferRecord,
    TransferType,
    UpdateRequest,
    User,
)
from .utils.logging import truncate

logger = logging.getLogger("uniform_transfer_server.service")


class TransferService:
    """Translates transfer operations into ERP calls.

    Every ERP failure is re-raised as the domain error of the operation;
    nothing is retried or recovered here.
    """

    def __init__(
        self,
        client: ErpClient,
        directory: StaticDirectory,
        mapper: Optional[TransferDetailsMapper] = None,
    ):
        self.client = client
        self.directory = directory
        self.mapper = mapper or TransferDetailsMapper(directory)

    @classmethod
    def from_env(cls) -> "TransferService":
        return cls(ErpClient.from_env(), StaticDirectory.from_env())

    def _worker_guid(self, user: User) -> str:
        employee = self.directory.employee_for_user(user)
        return employee.employee_guid if employee else ""

    async def get_list(
        self,
        user: User,
        invent_location_id: str,
        transfer_type: TransferType,
        from_date: date,
        to_date: date,
    ) -> List[TransferRecord]:
        """ERP wfRequestUniformJournalTable."""
        logger.debug(
            "get_list(location=%s, type=%s, from=%s, to=%s)",
            invent_location_id, transfer_type.value, from_date, to_date,
        )
        worker_guid = self._worker_guid(user)
        department_guid = self.directory.find_department_guid(invent_location_id)

        try:
            rows = await self.client.request_journal_table(
                worker_guid,
                department_guid,
                invent_location_id,
                transfer_type,
                from_date,
                to_date,
            )
        except ErpClientError as exc:
            raise GetListError(exc) from exc

        records = []
        for row in rows:
            employee = self.directory.find_employee(str(row.get("Employee") or ""))
            records.append(TransferRecord(
                id=str(row.get("JournalId") or ""),
                date=str(row.get("TransDate") or ""),
                invent_location_id=str(row.get("LocationId") or ""),
                posted=row.get("Posted") == "Yes",
                employee_id=employee.employee_id if employee else "",
                employee_guid=employee.employee_guid if employee else "",
                first_name=employee.first_name if employee else "",
                last_name=employee.last_name if employee else "",
                type=transfer_type,
            ))

        logger.debug("get_list -> %d records", len(records))
        return records

    async def get_details(
        self,
        user: User,
        invent_location_id: str,
        transfer_type: TransferType,
        journal_id: str,
    ) -> TransferDetails:
        """ERP wfRequestUniformJournalDetails, then wfRequestUniformByFRP."""
        logger.debug(
            "get_details(location=%s, type=%s, id=%s)",
            invent_location_id, transfer_type.value, journal_id,
        )
        worker_guid = self._worker_guid(user)
        department_guid = self.directory.find_department_guid(invent_location_id)

        try:
            details = await self.client.request_journal_details(
                worker_guid,
                department_guid,
                journal_id,
                transfer_type,
            )
        except ErpClientError as exc:
            raise GetDetailsError(exc) from exc

        try:
            frp_rows = await self.client.request_by_frp(
                worker_guid,
                department_guid,
                str(details.get("Employee") or ""),
                invent_location_id,
            )
        except ErpClientError as exc:
            raise GetByFrpError(exc) from exc

        result = self.mapper.map(details, frp_rows, invent_location_id, transfer_type)
        logger.debug("get_details -> %s", truncate(str(result)))
        return result

    async def create(self, user: User, request: CreateRequest) -> str:
        """ERP wfRequestUniformJournalCreate. Returns the new journal id."""
        logger.debug("create(request=%s)", truncate(str(request)))
        worker_guid = self._worker_guid(user)
        department_guid = self.directory.find_department_guid(request.invent_location_id)
        lines = [map_create_line(line) for line in request.lines]

        try:
            journal_id = await self.client.request_journal_create(
                worker_guid,
                department_guid,
                request.invent_location_id,
                request.employee_id,
                request.type,
                request.date,
                lines,
            )
        except ErpClientError as exc:
            raise CreateItemError(exc) from exc

        logger.info("Created uniform journal %s at %s", journal_id, request.invent_location_id)
        return journal_id

    async def update(self, user: User, request: UpdateRequest, journal_id: str) -> bool:
        """ERP wfRequestUniformJournalUpdate."""
        logger.debug("update(id=%s, request=%s)", journal_id, truncate(str(request)))
        worker_guid = self._worker_guid(user)
        department_guid = self.directory.find_department_guid(request.invent_location_id)
        lines = [map_update_line(line) for line in request.lines]

        try:
            result = await self.client.request_journal_update(
                worker_guid,
                department_guid,
                journal_id,
                request.employee_id,
                request.type,
                lines,
            )
        except ErpClientError as exc:
            raise UpdateItemError(exc) from exc

        return not result.get("IsError")

    async def delete(
        self,
        user: User,
        invent_location_id: str,
        transfer_type: TransferType,
        journal_id: str,
    ) -> bool:
        """ERP wfRequestUniformJournalDelete."""
        logger.debug("delete(location=%s, type=%s, id=%s)", invent_location_id, transfer_type.value, journal_id)
        worker_guid = self._worker_guid(user)
        department_guid = self.directory.find_department_guid(invent_location_id)

        try:
            result = await self.client.request_journal_delete(
                worker_guid, department_guid, journal_id, transfer_type
            )
        except ErpClientError as exc:
            raise DeleteItemError(exc) from exc

        return not result.get("IsError")

    async def post(
        self,
        user: User,
        invent_location_id: str,
        transfer_type: TransferType,
        journal_id: str,
    ) -> bool:
        """ERP wfRequestUniformJournalPost."""
        logger.debug("post(location=%s, type=%s, id=%s)", invent_location_id, transfer_type.value, journal_id)
        worker_guid = self._worker_guid(user)
        department_guid = self.directory.find_department_guid(invent_location_id)

        try:
            result = await self.client.request_journal_post(
                worker_guid, department_guid, journal_id, transfer_type
            )
        except ErpClientError as exc:
            raise PostItemError(exc) from exc

        posted = not result.get("IsError")
        if posted:
            logger.info("Posted uniform journal %s", journal_id)
        return posted

    # The ERP exposes no line-level web functions; line edits go through update().

    async def create_line(self, user: User, line: TransferLine) -> bool:
        logger.debug("create_line(item=%s) not forwarded to ERP", line.item_id)
        return True

    async def update_line(self, user: User, line: TransferLine, line_num: int) -> bool:
        logger.debug("update_line(line_num=%s) not forwarded to ERP", line_num)
        return True

    async def delete_line(self, user: User, journal_id: str, line_num: int) -> bool:
        logger.debug("delete_line(id=%s, line_num=%s) not forwarded to ERP", journal_id, line_num)
        return True
