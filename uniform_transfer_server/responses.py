"""JSON response envelopes."""

from __future__ import annotations

from typing import Any, Dict, Optional

from starlette.responses import JSONResponse


def success_response(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse({"message": message, "data": data if data is not None else {}}, status_code=status_code)


def failed_response(
    message: str,
    errors: Optional[Dict[str, Any]] = None,
    status_code: int = 500,
) -> JSONResponse:
    return JSONResponse(
        {"message": message, "errors": errors if errors is not None else {}, "status": status_code},
        status_code=status_code,
    )
