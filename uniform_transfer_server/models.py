"""Transfer types, value objects and request models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date as Date
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Tuple, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

Number = Union[int, float]

CONDITIONS = ("Used", "New")
ACTIONS = ("Create", "Update", "Delete")
DEFAULT_PER_PAGE = 15


class TransferType(str, Enum):
    NONE = "None"
    ISSUANCE = "Issuance"
    RETURN = "Return"
    WRITE_OFF = "WriteOff"

    @classmethod
    def values(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass(frozen=True)
class User:
    """The caller on whose behalf the ERP is contacted."""

    employee_id: str = ""


@dataclass(frozen=True)
class Employee:
    employee_id: str
    employee_guid: str
    first_name: str = ""
    last_name: str = ""


def full_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}"


# ----------------------------- Value objects -----------------------------


@dataclass(frozen=True)
class TransferRecord:
    """One journal header as returned by the list operation."""

    id: str
    date: str
    invent_location_id: str
    posted: bool
    employee_id: str
    employee_guid: str
    first_name: str
    last_name: str
    type: TransferType

    @property
    def employee_full_name(self) -> str:
        return full_name(self.first_name, self.last_name)


@dataclass(frozen=True)
class DetailsLine:
    line_num: Number
    item_id: str
    item_name: str
    condition: str
    quantity: Number
    available_quantity: Number
    reason: str = ""


@dataclass(frozen=True)
class TransferDetails:
    """A journal header with its lines and computed availability."""

    id: str
    date: str
    invent_location_id: str
    posted: bool
    employee_id: str
    employee_guid: str
    first_name: str
    last_name: str
    type: TransferType
    lines: Tuple[DetailsLine, ...] = field(default_factory=tuple)

    @property
    def employee_full_name(self) -> str:
        return full_name(self.first_name, self.last_name)


# ----------------------------- Request models -----------------------------

Condition = Literal["Used", "New"]
Action = Literal["Create", "Update", "Delete"]


def _non_negative_number(value: Any) -> Any:
    """Numeric and >= 0. The value is passed on as given."""
    if value is None or value == "":
        raise PydanticCustomError("missing", "Field required")
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise PydanticCustomError("float_type", "Input should be a valid number")
    try:
        number = float(value)
    except (OverflowError, ValueError):
        raise PydanticCustomError("float_parsing", "Input should be a valid number") from None
    if not math.isfinite(number):
        raise PydanticCustomError("finite_number", "Input should be a finite number")
    if number < 0:
        raise PydanticCustomError(
            "greater_than_equal", "Input should be greater than or equal to {ge}", {"ge": 0}
        )
    return value


def _reason_for_returns(value: Optional[str], info: ValidationInfo) -> Optional[str]:
    # Return journals need a reason on every line.
    if not value and (info.context or {}).get("reason_required"):
        raise PydanticCustomError("reason_required", "A reason is required for returns")
    return value


RequiredStr = Annotated[str, Field(min_length=1)]
Quantity = Annotated[Any, AfterValidator(_non_negative_number)]
Reason = Annotated[Optional[str], AfterValidator(_reason_for_returns)]


class RequestModel(BaseModel):
    """Validated input. Populated from camelCase payloads, read in snake_case."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class TransferLine(RequestModel):
    item_id: RequiredStr = Field(alias="itemId")
    condition: Condition
    quantity: Quantity
    reason: Reason = Field(None, validate_default=True)


class UpdateLine(RequestModel):
    action: Action
    item_id: Optional[str] = Field(None, alias="itemId")
    line_num: int = Field(alias="lineNum")
    condition: Condition
    quantity: Quantity
    reason: Reason = Field(None, validate_default=True)


class TransferTarget(RequestModel):
    """Location and journal type, shared by show/post/delete/deleteLine."""

    invent_location_id: RequiredStr = Field(alias="inventLocationId")
    type: TransferType


class IndexQuery(TransferTarget):
    from_date: Date = Field(alias="fromDate")
    to_date: Date = Field(alias="toDate")
    page: int = Field(1, ge=1)
    per_page: int = Field(DEFAULT_PER_PAGE, ge=1, alias="perPage")

    @field_validator("to_date")
    @classmethod
    def check_date_order(cls, value: Date, info: ValidationInfo) -> Date:
        from_date = info.data.get("from_date")
        if from_date is not None and value < from_date:
            raise PydanticCustomError(
                "to_date_before_from_date", "The toDate must be a date after or equal to fromDate."
            )
        return value


class LineRequest(TransferLine):
    """Single line sub-resource (create/update line)."""

    type: TransferType
    invent_location_id: RequiredStr = Field(alias="inventLocationId")


class BulkDeleteRequest(TransferTarget):
    ids: Tuple[RequiredStr, ...] = Field(min_length=1)


class CreateRequest(RequestModel):
    invent_location_id: RequiredStr = Field(alias="inventLocationId")
    date: Date
    employee_id: RequiredStr = Field(alias="employeeId")
    type: TransferType
    lines: Tuple[TransferLine, ...] = Field(min_length=1)


class UpdateRequest(RequestModel):
    invent_location_id: RequiredStr = Field(alias="inventLocationId")
    employee_id: RequiredStr = Field(alias="employeeId")
    type: TransferType
    lines: Tuple[UpdateLine, ...] = Field(min_length=1)
