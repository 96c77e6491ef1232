"""Translation between request models, ERP wire rows and value objects."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .directory import StaticDirectory
from .models import (
    DetailsLine,
    TransferDetails,
    TransferLine,
    TransferType,
    UpdateLine,
)


def map_create_line(line: TransferLine) -> Dict[str, Any]:
    """Request line -> ERP UniformJournalCreate row."""
    return {
        "Condition": line.condition,
        "ItemId": line.item_id,
        "Qty": line.quantity,
        "ReasonReturn": line.reason,
    }


def map_update_line(line: UpdateLine) -> Dict[str, Any]:
    """Request line -> ERP UniformJournalUpdate row."""
    return {
        "Action": line.action,
        "Condition": line.condition,
        "ItemId": line.item_id,
        "LineNum": line.line_num,
        "Qty": line.quantity,
        "ReasonReturn": line.reason,
    }


def journal_lines(details: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Lines of a journal details document.

    The ERP nests them as ``Items.UniformJournalDetails`` and collapses a
    one-element list into a bare object.
    """
    items = details.get("Items") or {}
    rows = items.get("UniformJournalDetails") if isinstance(items, dict) else items
    if rows is None:
        return []
    if isinstance(rows, dict):
        return [rows]
    return [row for row in rows if isinstance(row, dict)]


class TransferDetailsMapper:
    """Builds TransferDetails from the journal details and by-FRP responses."""

    def __init__(self, directory: StaticDirectory):
        self.directory = directory

    def map(
        self,
        details: Dict[str, Any],
        frp_rows: Sequence[Dict[str, Any]],
        invent_location_id: str,
        transfer_type: TransferType,
    ) -> TransferDetails:
        employee = self.directory.find_employee(str(details.get("Employee") or ""))

        lines = tuple(
            self._map_line(row, frp_rows, transfer_type)
            for row in journal_lines(details)
        )

        return TransferDetails(
            id=str(details.get("JournalId") or ""),
            date=str(details.get("TransDate") or ""),
            invent_location_id=invent_location_id,
            posted=details.get("Posted") == "Yes",
            employee_id=employee.employee_id if employee else "",
            employee_guid=employee.employee_guid if employee else "",
            first_name=employee.first_name if employee else "",
            last_name=employee.last_name if employee else "",
            type=transfer_type,
            lines=lines,
        )

    def _map_line(
        self,
        row: Dict[str, Any],
        frp_rows: Sequence[Dict[str, Any]],
        transfer_type: TransferType,
    ) -> DetailsLine:
        item_id = str(row.get("ItemId") or "")
        condition = row.get("Condition") or ""
        return DetailsLine(
            line_num=row.get("LineNum", 0),
            item_id=item_id,
            item_name=self.directory.find_item_name(item_id),
            condition=condition,
            quantity=row.get("Qty", 0),
            available_quantity=available_quantity(row, frp_rows, transfer_type),
            reason=row.get("ReasonReturn") or "",
        )


def available_quantity(
    row: Dict[str, Any],
    frp_rows: Sequence[Dict[str, Any]],
    transfer_type: TransferType,
) -> Any:
    """Quantity still available for the line's item.

    Returns take what the employee may hand back (by-FRP); every other
    type takes the journal's own stock figure for the line's condition.
    """
    if transfer_type is TransferType.RETURN:
        return frp_quantity(frp_rows, row.get("ItemId"), row.get("Condition"))
    if row.get("Condition") == "New":
        return row.get("AvailableQtyNew", 0)
    return row.get("AvailableQtyUsed", 0)


def frp_quantity(frp_rows: Sequence[Dict[str, Any]], item_id: Any, condition: Any) -> Any:
    same_item = [frp for frp in frp_rows if frp.get("ItemId") == item_id]
    for frp in same_item:
        if frp.get("Condition") == condition:
            return frp.get("Qty", 0)
    if same_item:
        return same_item[0].get("Qty", 0)
    return 0
