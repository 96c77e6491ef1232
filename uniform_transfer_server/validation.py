"""Input validation for transfer endpoints and tools.

Shape, types and ranges are checked by the pydantic request models in
``models``; this module adds the directory existence checks and reports
every failure keyed by field path (``lines.0.reason``).
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List, Mapping, Sequence, Type, TypeVar

from pydantic import ValidationError as ModelValidationError

from .directory import StaticDirectory
from .models import (
    BulkDeleteRequest,
    CreateRequest,
    IndexQuery,
    LineRequest,
    RequestModel,
    TransferTarget,
    TransferType,
    UpdateRequest,
)

RequestT = TypeVar("RequestT", bound=RequestModel)

_REQUIRED_ERRORS = {"missing", "string_too_short", "too_short", "reason_required"}
_NUMBER_ERRORS = {"float_type", "float_parsing", "finite_number"}
_ARRAY_ERRORS = {"list_type", "tuple_type"}
_OBJECT_ERRORS = {"model_type", "model_attributes_type", "dict_type"}


class ValidationError(Exception):
    """Input rejected; errors maps field paths to messages."""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        super().__init__("The given data was invalid.")


def _message(path: str, error: Mapping[str, Any]) -> str:
    kind = error["type"]
    if kind in _REQUIRED_ERRORS:
        return f"The {path} field is required."
    if kind == "string_type":
        return f"The {path} field must be a string."
    if kind in ("enum", "literal_error"):
        return f"The selected {path} is invalid."
    if kind.startswith("int_"):
        return f"The {path} field must be an integer."
    if kind in _NUMBER_ERRORS:
        return f"The {path} field must be a number."
    if kind == "greater_than_equal":
        return f"The {path} field must be at least {error['ctx']['ge']}."
    if kind.startswith("date_"):
        return f"The {path} field is not a valid date."
    if kind in _ARRAY_ERRORS:
        return f"The {path} field must be an array."
    if kind in _OBJECT_ERRORS:
        return f"The {path} field must be an object."
    return error["msg"]


def error_messages(exc: ModelValidationError) -> Dict[str, List[str]]:
    """pydantic errors -> {"lines.0.reason": ["The lines.0.reason field is required."]}."""
    errors: Dict[str, List[str]] = defaultdict(list)
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"])
        errors[path].append(_message(path, error))
    return dict(errors)


def _directory_errors(
    data: Mapping[str, Any],
    directory: StaticDirectory,
    keys: Sequence[str],
) -> Dict[str, List[str]]:
    lookups = {
        "inventLocationId": directory.has_invent_location,
        "employeeId": lambda employee_id: directory.find_employee(employee_id) is not None,
    }
    errors = {}
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value and not lookups[key](value):
            errors[key] = [f"The selected {key} is invalid."]
    return errors


def _validate(
    model: Type[RequestT],
    data: Mapping[str, Any],
    directory: StaticDirectory,
    keys: Sequence[str] = ("inventLocationId",),
) -> RequestT:
    context = {"reason_required": data.get("type") == TransferType.RETURN.value}
    errors: Dict[str, List[str]] = {}
    result = None
    try:
        result = model.model_validate(data, context=context)
    except ModelValidationError as exc:
        errors = error_messages(exc)

    for key, messages in _directory_errors(data, directory, keys).items():
        errors.setdefault(key, messages)
    if errors:
        raise ValidationError(errors)
    return result


def validate_target(data: Mapping[str, Any], directory: StaticDirectory) -> TransferTarget:
    return _validate(TransferTarget, data, directory)


def validate_index(data: Mapping[str, Any], directory: StaticDirectory) -> IndexQuery:
    return _validate(IndexQuery, data, directory)


def validate_create(data: Mapping[str, Any], directory: StaticDirectory) -> CreateRequest:
    return _validate(CreateRequest, data, directory, ("inventLocationId", "employeeId"))


def validate_update(data: Mapping[str, Any], directory: StaticDirectory) -> UpdateRequest:
    return _validate(UpdateRequest, data, directory, ("inventLocationId", "employeeId"))


def validate_line(data: Mapping[str, Any], directory: StaticDirectory) -> LineRequest:
    return _validate(LineRequest, data, directory)


def validate_bulk_delete(data: Mapping[str, Any], directory: StaticDirectory) -> BulkDeleteRequest:
    return _validate(BulkDeleteRequest, data, directory)
