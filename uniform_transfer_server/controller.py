"""HTTP endpoints for uniform transfer journals."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .directory import StaticDirectory
from .models import RequestModel, User
from .resource_mappers import details_resource, transfer_page
from .responses import failed_response, success_response
from .service import TransferService
from .validation import (
    ValidationError,
    validate_bulk_delete,
    validate_create,
    validate_index,
    validate_line,
    validate_target,
    validate_update,
)

logger = logging.getLogger("uniform_transfer_server.controller")

EMPLOYEE_HEADER = "X-Employee-Id"
PREFIX = "/uniforms/transfers"

MESSAGES = {
    "index": "Uniform transfers.",
    "show": "Uniform transfer details.",
    "create": "Uniform transfer created.",
    "update": "Uniform transfer updated.",
    "post": "Uniform transfer {id} posted.",
    "delete": "Uniform transfer {id} deleted.",
    "delete_bulk": "Uniform transfers deleted.",
    "line_create": "Line added to uniform transfer {id}.",
    "line_update": "Line updated in uniform transfer {id}.",
    "line_delete": "Line deleted from uniform transfer {id}.",
}


def request_user(request: Request) -> User:
    return User(employee_id=request.headers.get(EMPLOYEE_HEADER, ""))


async def request_input(request: Request) -> Dict[str, Any]:
    """Query parameters merged with the JSON body (body wins)."""
    data: Dict[str, Any] = dict(request.query_params)
    body = await request.body()
    if body.strip():
        try:
            payload = json.loads(body)
        except ValueError:
            raise ValidationError({"body": ["The request body must be valid JSON."]}) from None
        if not isinstance(payload, dict):
            raise ValidationError({"body": ["The request body must be a JSON object."]})
        data.update(payload)
    return data


def invalid_response(exc: ValidationError) -> JSONResponse:
    return failed_response(str(exc), exc.errors, 422)


def error_response(action: str, exc: Exception, errors: Dict[str, Any] | None = None) -> JSONResponse:
    logger.error("Uniform transfer %s failed: %s", action, exc, exc_info=True)
    return failed_response(str(exc), errors, 500)


class TransferController:
    """Validates input, calls the service and wraps results into envelopes.

    Every failure raised past validation answers 500 with the error message.
    """

    def __init__(self, service: TransferService, directory: StaticDirectory):
        self.service = service
        self.directory = directory

    def routes(self) -> List[Route]:
        return [
            Route(PREFIX, self.index, methods=["GET"]),
            Route(PREFIX, self.create, methods=["POST"]),
            Route(f"{PREFIX}/bulk", self.delete_bulk, methods=["DELETE"]),
            Route(PREFIX + "/{id}", self.show, methods=["GET"]),
            Route(PREFIX + "/{id}", self.update, methods=["PUT"]),
            Route(PREFIX + "/{id}", self.delete, methods=["DELETE"]),
            Route(PREFIX + "/{id}/post", self.post, methods=["POST"]),
            Route(PREFIX + "/{id}/lines", self.create_line, methods=["POST"]),
            Route(PREFIX + "/{id}/lines/{line_num:int}", self.update_line, methods=["PUT"]),
            Route(PREFIX + "/{id}/lines/{line_num:int}", self.delete_line, methods=["DELETE"]),
        ]

    async def _validated(self, request: Request, validator: Callable[..., RequestModel], *args) -> RequestModel:
        return validator(await request_input(request), self.directory, *args)

    async def index(self, request: Request) -> JSONResponse:
        """List journals for a location, type and date range."""
        try:
            params = await self._validated(request, validate_index)
        except ValidationError as exc:
            return invalid_response(exc)

        try:
            records = await self.service.get_list(
                request_user(request),
                params.invent_location_id,
                params.type,
                params.from_date,
                params.to_date,
            )
            page = transfer_page(records, request.query_params, params.page, params.per_page)
        except Exception as exc:
            return error_response("list", exc)

        return success_response(MESSAGES["index"], {"items": page.items, "meta": page.meta()})

    async def show(self, request: Request) -> JSONResponse:
        journal_id = request.path_params["id"]
        try:
            params = await self._validated(request, validate_target)
        except ValidationError as exc:
            return invalid_response(exc)

        try:
            details = await self.service.get_details(
                request_user(request),
                params.invent_location_id,
                params.type,
                journal_id,
            )
        except Exception as exc:
            return error_response("details", exc)

        return success_response(MESSAGES["show"], details_resource(details))

    async def create(self, request: Request) -> JSONResponse:
        try:
            params = await self._validated(request, validate_create)
        except ValidationError as exc:
            return invalid_response(exc)

        try:
            journal_id = await self.service.create(request_user(request), params)
        except Exception as exc:
            return error_response("create", exc)

        return success_response(MESSAGES["create"], {"id": journal_id}, 201)

    async def update(self, request: Request) -> JSONResponse:
        journal_id = request.path_params["id"]
        try:
            params = await self._validated(request, validate_update)
        except ValidationError as exc:
            return invalid_response(exc)

        try:
            await self.service.update(request_user(request), params, journal_id)
        except Exception as exc:
            return error_response("update", exc)

        return success_response(MESSAGES["update"], {"id": journal_id})

    async def post(self, request: Request) -> JSONResponse:
        """Post (finalize) a journal in the ERP."""
        journal_id = request.path_params["id"]
        try:
            params = await self._validated(request, validate_target)
        except ValidationError as exc:
            return invalid_response(exc)

        try:
            await self.service.post(
                request_user(request), params.invent_location_id, params.type, journal_id
            )
        except Exception as exc:
            return error_response("post", exc)

        return success_response(MESSAGES["post"].format(id=journal_id), {"id": journal_id})

    async def delete(self, request: Request) -> JSONResponse:
        journal_id = request.path_params["id"]
        try:
            params = await self._validated(request, validate_target)
        except ValidationError as exc:
            return invalid_response(exc)

        try:
            await self.service.delete(
                request_user(request), params.invent_location_id, params.type, journal_id
            )
        except Exception as exc:
            return error_response("delete", exc)

        return success_response(MESSAGES["delete"].format(id=journal_id), {"id": journal_id})

    async def delete_bulk(self, request: Request) -> JSONResponse:
        """Delete journals one by one; the first failure fails the whole request."""
        try:
            params = await self._validated(request, validate_bulk_delete)
        except ValidationError as exc:
            return invalid_response(exc)

        user = request_user(request)
        results: Dict[str, bool] = {}
        try:
            for journal_id in params.ids:
                results[journal_id] = await self.service.delete(
                    user, params.invent_location_id, params.type, journal_id
                )
        except Exception as exc:
            return error_response("bulk delete", exc, {"results": None})

        return success_response(MESSAGES["delete_bulk"], {"results": results})

    async def create_line(self, request: Request) -> JSONResponse:
        journal_id = request.path_params["id"]
        try:
            params = await self._validated(request, validate_line)
        except ValidationError as exc:
            return invalid_response(exc)

        try:
            await self.service.create_line(request_user(request), params)
        except Exception as exc:
            return error_response("line create", exc)

        return success_response(MESSAGES["line_create"].format(id=journal_id), {"id": journal_id}, 201)

    async def update_line(self, request: Request) -> JSONResponse:
        journal_id = request.path_params["id"]
        line_num = request.path_params["line_num"]
        try:
            params = await self._validated(request, validate_line)
        except ValidationError as exc:
            return invalid_response(exc)

        try:
            await self.service.update_line(request_user(request), params, line_num)
        except Exception as exc:
            return error_response("line update", exc)

        return success_response(MESSAGES["line_update"].format(id=journal_id), {"id": journal_id})

    async def delete_line(self, request: Request) -> JSONResponse:
        journal_id = request.path_params["id"]
        line_num = request.path_params["line_num"]
        try:
            await self._validated(request, validate_target)
        except ValidationError as exc:
            return invalid_response(exc)

        try:
            await self.service.delete_line(request_user(request), journal_id, line_num)
        except Exception as exc:
            return error_response("line delete", exc)

        return success_response(MESSAGES["line_delete"].format(id=journal_id), {"id": journal_id})
