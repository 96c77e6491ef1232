"""Field projection helpers for MCP tools."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


def project_dict(
    data: dict[str, Any],
    fields: list[str] | None,
    base_fields: set[str],
) -> dict[str, Any]:
    """Project a single dict to base_fields + requested fields.

    - fields=None: returns only base_fields (minimal default)
    - fields=["x"]: returns base_fields + x
    - fields=["*"]: returns full data (no projection)
    """
    if fields is not None and "*" in fields:
        return data

    allowed = base_fields | set(fields or [])
    return {k: v for k, v in data.items() if k in allowed}


def project_items(
    items: List[Dict[str, Any]],
    fields: Optional[List[str]],
    base_fields: set[str],
) -> List[Dict[str, Any]]:
    """Project every dict in items with the same rules as project_dict."""
    return [project_dict(item, fields, base_fields) for item in items]
