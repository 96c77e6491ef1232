"""MCP prompt functions for workflow guidance."""

from __future__ import annotations


async def create_transfer() -> str:
    """Guide for creating and posting a uniform transfer journal."""
    return """Create a uniform transfer journal:

1. Read uniform://templates/transfer to see the payload structure

2. REQUIRED fields:
   - inventLocationId (inventory location of the warehouse)
   - date (YYYY-MM-DD)
   - employeeId (employee receiving or returning the uniform)
   - type (Issuance, Return or WriteOff)
   - lines (at least one): itemId, condition (Used or New), quantity (>= 0)

3. For Return journals every line also needs a reason.
   Check what the employee may return with uniform_get_transfer on an
   existing Return journal: availableQuantity shows the returnable amount.

4. Submit with uniform_create_transfer and keep the returned id

5. Review with uniform_get_transfer, fix lines with uniform_update_transfer

6. Get explicit approval from the user, then finalize with
   uniform_post_transfer. Posted journals cannot be changed or deleted.
"""
