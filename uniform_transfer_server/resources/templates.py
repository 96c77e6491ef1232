"""MCP resource handlers for payload templates."""

from __future__ import annotations

import json

from ..models import CONDITIONS, TransferType


async def resource_transfer_template() -> str:
    """Blank create payload for uniform_create_transfer.

    Allowed values are listed under "_allowed", which the tool ignores.
    """
    template = {
        "inventLocationId": "",
        "date": "",
        "employeeId": "",
        "type": "",
        "lines": [
            {
                "itemId": "",
                "condition": "",
                "quantity": 0,
                "reason": "",
            }
        ],
        "_allowed": {
            "type": list(TransferType.values()),
            "condition": list(CONDITIONS),
        },
    }
    return json.dumps(template, indent=2)
