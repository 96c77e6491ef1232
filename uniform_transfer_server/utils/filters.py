"""Query-string filtering, ordering and pagination of resource lists.

Filters arrive as ``filter[<field>]=<value>`` query parameters. Only fields
declared in a resource's filter rules are honoured; the rule names the cast
applied to the raw query value before comparison:

- ``string``: case-insensitive substring match
- ``boolean``: ``true/1/yes`` or ``false/0/no``, exact match
- ``int``: exact match after ``int()``
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

_FILTER_PARAM = re.compile(r"^filter\[(?P<field>[A-Za-z_][A-Za-z0-9_]*)\]$")

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def _cast_boolean(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean filter value: {raw!r}")


def _cast_int(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"Invalid integer filter value: {raw!r}") from None


_CASTS: Dict[str, Callable[[str], Any]] = {
    "string": lambda raw: raw,
    "boolean": _cast_boolean,
    "int": _cast_int,
}


def parse_filters(query: Mapping[str, str], rules: Mapping[str, str]) -> Dict[str, Any]:
    """Extract and cast ``filter[...]`` parameters declared in rules.

    Raises ValueError for a value that does not cast.
    """
    filters: Dict[str, Any] = {}
    for key, raw in query.items():
        match = _FILTER_PARAM.match(key)
        if not match:
            continue
        field = match.group("field")
        rule = rules.get(field)
        if rule is None:
            continue
        filters[field] = _CASTS[rule](raw)
    return filters


def _matches(value: Any, expected: Any) -> bool:
    if isinstance(expected, str):
        return expected.lower() in str(value if value is not None else "").lower()
    return value == expected


def apply_filters(items: List[Dict[str, Any]], filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Keep the items matching every filter."""
    return [
        item for item in items
        if all(_matches(item.get(field), expected) for field, expected in filters.items())
    ]


def sort_desc(items: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    # Stable, so equal keys keep the ERP order.
    return sorted(items, key=lambda item: item.get(key) or "", reverse=True)


@dataclass(frozen=True)
class Page:
    items: List[Dict[str, Any]]
    page: int
    per_page: int
    total: int

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1)

    def meta(self) -> Dict[str, int]:
        return {
            "currentPage": self.page,
            "perPage": self.per_page,
            "total": self.total,
            "lastPage": self.last_page,
        }


def paginate(items: List[Dict[str, Any]], page: int, per_page: int) -> Page:
    """Slice items for a 1-based page number."""
    start = (page - 1) * per_page
    return Page(
        items=items[start:start + per_page],
        page=page,
        per_page=per_page,
        total=len(items),
    )
