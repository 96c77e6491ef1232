"""Outward representations of transfers and the list page pipeline."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from .models import DetailsLine, TransferDetails, TransferRecord
from .utils.filters import Page, apply_filters, paginate, parse_filters, sort_desc

# Outward field -> value object attribute
TRANSFER_FIELDS_MAP = {
    "id": "id",
    "date": "date",
    "inventLocationId": "invent_location_id",
    "posted": "posted",
    "type": "type",
    "employeeId": "employee_id",
    "employeeGuid": "employee_guid",
    "firstName": "first_name",
    "lastName": "last_name",
    "employeeFullName": "employee_full_name",
}

TRANSFER_FILTER_RULES = {
    "id": "string",
    "date": "string",
    "inventLocationId": "string",
    "posted": "boolean",
    "type": "string",
    "employeeId": "string",
    "firstName": "string",
    "lastName": "string",
    "employeeFullName": "string",
}

LIST_SORT_FIELD = "date"


def _outward(value: Any) -> Any:
    # Enums serialize as their value.
    return getattr(value, "value", value)


def transfer_resource(record: TransferRecord | TransferDetails) -> Dict[str, Any]:
    return {
        field: _outward(getattr(record, attribute))
        for field, attribute in TRANSFER_FIELDS_MAP.items()
    }


def line_resource(line: DetailsLine) -> Dict[str, Any]:
    return {
        "lineNum": line.line_num,
        "itemId": line.item_id,
        "itemName": line.item_name,
        "condition": line.condition,
        "quantity": line.quantity,
        "availableQuantity": line.available_quantity,
        "reason": line.reason,
    }


def details_resource(details: TransferDetails) -> Dict[str, Any]:
    resource = transfer_resource(details)
    resource["lines"] = [line_resource(line) for line in details.lines]
    return resource


def transfer_page(
    records: Iterable[TransferRecord],
    query: Mapping[str, str],
    page: int,
    per_page: int,
) -> Page:
    """Filter by query, order by date descending and cut one page.

    Raises ValueError when a filter value does not cast.
    """
    filters = parse_filters(query, TRANSFER_FILTER_RULES)
    items = apply_filters([transfer_resource(record) for record in records], filters)
    return paginate(sort_desc(items, LIST_SORT_FIELD), page, per_page)
