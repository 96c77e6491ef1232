"""Local directory lookups: employees, inventory locations and item names.

The ERP identifies workers and departments by GUID while callers speak in
employee ids and inventory location ids. The directory bridges the two and
supplies display fields (names) the ERP responses do not carry.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .models import Employee, User

logger = logging.getLogger("uniform_transfer_server.directory")


class DirectoryError(Exception):
    """Represents a problem loading directory data."""


@dataclass
class StaticDirectory:
    """In-memory directory, usually loaded from a JSON export.

    Expected document shape::

        {
          "employees": [{"employeeId", "employeeGuid", "firstName", "lastName"}],
          "inventLocations": [{"inventLocationId", "departmentGuid"}],
          "items": [{"code", "name"}]
        }
    """

    employees: Dict[str, Employee] = field(default_factory=dict)
    department_guids: Dict[str, str] = field(default_factory=dict)
    item_names: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "StaticDirectory":
        try:
            employees = {
                str(row["employeeId"]): Employee(
                    employee_id=str(row["employeeId"]),
                    employee_guid=str(row.get("employeeGuid") or ""),
                    first_name=row.get("firstName") or "",
                    last_name=row.get("lastName") or "",
                )
                for row in data.get("employees", [])
            }
            department_guids = {
                str(row["inventLocationId"]): str(row.get("departmentGuid") or "")
                for row in data.get("inventLocations", [])
            }
            item_names = {
                str(row["code"]): row.get("name") or ""
                for row in data.get("items", [])
            }
        except (KeyError, TypeError, AttributeError) as exc:
            raise DirectoryError(f"Malformed directory data: {exc}") from exc

        return cls(
            employees=employees,
            department_guids=department_guids,
            item_names=item_names,
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "StaticDirectory":
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            raise DirectoryError(f"Cannot read directory file {path}: {exc}") from exc

        directory = cls.from_data(data)
        logger.info(
            "Loaded directory from %s: %d employees, %d locations, %d items",
            path,
            len(directory.employees),
            len(directory.department_guids),
            len(directory.item_names),
        )
        return directory

    @classmethod
    def from_env(cls) -> "StaticDirectory":
        """Load the file named by UNIFORM_DIRECTORY_FILE."""
        path = os.getenv("UNIFORM_DIRECTORY_FILE")
        if not path:
            raise DirectoryError("Missing UNIFORM_DIRECTORY_FILE in environment.")
        return cls.from_file(path)

    # ----------------------------- Lookups -----------------------------

    def find_employee(self, employee_id: str) -> Optional[Employee]:
        return self.employees.get(str(employee_id))

    def employee_for_user(self, user: User) -> Optional[Employee]:
        if not user.employee_id:
            return None
        return self.find_employee(user.employee_id)

    def has_invent_location(self, invent_location_id: str) -> bool:
        return invent_location_id in self.department_guids

    def find_department_guid(self, invent_location_id: str) -> str:
        return self.department_guids.get(invent_location_id, "")

    def find_item_name(self, code: str) -> str:
        return self.item_names.get(code, "")
