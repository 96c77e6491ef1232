"""Uniform transfer journal tools."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from ..models import DEFAULT_PER_PAGE, User
from ..resource_mappers import details_resource, transfer_page
from ..service import TransferService
from ..utils.logging import truncate
from ..utils.projection import project_dict, project_items
from ..validation import validate_create, validate_index, validate_target, validate_update

logger = logging.getLogger("uniform_transfer_server.resources.transfers")

LIST_BASE_FIELDS = {"id", "date", "type", "posted", "employeeFullName"}
DETAILS_BASE_FIELDS = {"id", "date", "type", "posted", "employeeFullName", "lines"}


def _mcp_user() -> User:
    return User(employee_id=os.getenv("UNIFORM_MCP_EMPLOYEE_ID", ""))


async def uniform_transfers(
    invent_location_id: str,
    transfer_type: str,
    from_date: str,
    to_date: str,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
    fields: list[str] | None = None,
) -> Dict[str, Any]:
    """List uniform transfer journals of a location, newest first.

    Parameters:
    - invent_location_id: Inventory location id (e.g. "WH-000123")
    - transfer_type: One of None, Issuance, Return, WriteOff
    - from_date, to_date: Date range, YYYY-MM-DD, inclusive
    - page, per_page: 1-based pagination
    - fields: Additional fields to include beyond defaults, or ["*"] for all

    Available fields: id, date, inventLocationId, posted, type, employeeId,
        employeeGuid, firstName, lastName, employeeFullName
        Default returns: id, date, type, posted, employeeFullName
    """
    logger.debug(
        "Tool call: uniform_transfers(location=%s, type=%s, from=%s, to=%s, page=%s, per_page=%s)",
        invent_location_id, transfer_type, from_date, to_date, page, per_page,
    )
    service = TransferService.from_env()
    params = validate_index(
        {
            "inventLocationId": invent_location_id,
            "type": transfer_type,
            "fromDate": from_date,
            "toDate": to_date,
            "page": page,
            "perPage": per_page,
        },
        service.directory,
    )
    records = await service.get_list(
        _mcp_user(),
        params.invent_location_id,
        params.type,
        params.from_date,
        params.to_date,
    )
    result_page = transfer_page(records, {}, params.page, params.per_page)

    result = {
        "results": project_items(result_page.items, fields, base_fields=LIST_BASE_FIELDS),
        "has_more": result_page.page < result_page.last_page,
        "page": result_page.page,
        "total": result_page.total,
    }
    logger.debug("Tool result: uniform_transfers -> %s", truncate(str(result)))
    return result


async def uniform_get_transfer(
    transfer_id: str,
    invent_location_id: str,
    transfer_type: str,
    fields: list[str] | None = None,
) -> Dict[str, Any]:
    """Get one uniform transfer journal with its lines.

    Each line carries availableQuantity: for Return journals the quantity the
    employee may still hand back, otherwise the stock available in the line's
    condition (New or Used).

    Parameters:
    - transfer_id: Journal id (required)
    - invent_location_id: Inventory location id
    - transfer_type: One of None, Issuance, Return, WriteOff
    - fields: Additional fields to include beyond defaults, or ["*"] for all
    """
    logger.debug(
        "Tool call: uniform_get_transfer(transfer_id=%s, location=%s, type=%s)",
        transfer_id, invent_location_id, transfer_type,
    )
    service = TransferService.from_env()
    params = validate_target(
        {"inventLocationId": invent_location_id, "type": transfer_type},
        service.directory,
    )
    details = await service.get_details(
        _mcp_user(), params.invent_location_id, params.type, transfer_id
    )

    result = project_dict(details_resource(details), fields, base_fields=DETAILS_BASE_FIELDS)
    logger.debug("Tool result: uniform_get_transfer -> %s", truncate(str(result)))
    return result


async def uniform_create_transfer(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Create a uniform transfer journal.

    Read uniform://templates/transfer first for the payload structure.

    Required fields:
    - inventLocationId, date (YYYY-MM-DD), employeeId, type
    - lines: at least one {itemId, condition (Used|New), quantity >= 0}
    - lines[].reason is required when type is Return
    """
    logger.debug("Tool call: uniform_create_transfer(payload=%s)", truncate(str(payload)))
    service = TransferService.from_env()
    request = validate_create(payload, service.directory)
    journal_id = await service.create(_mcp_user(), request)
    result = {"id": journal_id}
    logger.debug("Tool result: uniform_create_transfer -> %s", result)
    return result


async def uniform_update_transfer(transfer_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Apply line actions to an unposted uniform transfer journal.

    The payload mirrors the create payload without date; every line also
    needs action (Create|Update|Delete) and lineNum.
    """
    logger.debug(
        "Tool call: uniform_update_transfer(transfer_id=%s, payload=%s)",
        transfer_id, truncate(str(payload)),
    )
    service = TransferService.from_env()
    request = validate_update(payload, service.directory)
    updated = await service.update(_mcp_user(), request, transfer_id)
    return {"id": transfer_id, "updated": updated}


async def uniform_post_transfer(
    transfer_id: str,
    invent_location_id: str,
    transfer_type: str,
) -> Dict[str, Any]:
    """Post (finalize) a uniform transfer journal. Posted journals are read-only."""
    logger.debug("Tool call: uniform_post_transfer(transfer_id=%s)", transfer_id)
    service = TransferService.from_env()
    params = validate_target(
        {"inventLocationId": invent_location_id, "type": transfer_type},
        service.directory,
    )
    posted = await service.post(_mcp_user(), params.invent_location_id, params.type, transfer_id)
    return {"id": transfer_id, "posted": posted}


async def uniform_delete_transfer(
    transfer_id: str,
    invent_location_id: str,
    transfer_type: str,
) -> Dict[str, Any]:
    """Delete an unposted uniform transfer journal."""
    logger.debug("Tool call: uniform_delete_transfer(transfer_id=%s)", transfer_id)
    service = TransferService.from_env()
    params = validate_target(
        {"inventLocationId": invent_location_id, "type": transfer_type},
        service.directory,
    )
    deleted = await service.delete(_mcp_user(), params.invent_location_id, params.type, transfer_id)
    return {"id": transfer_id, "deleted": deleted}
