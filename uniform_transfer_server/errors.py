"""Domain errors raised by the transfer service."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable application error codes, one per failing ERP operation."""

    GET_LIST = "ERP_UNIFORM_GET_LIST_ERROR"
    GET_DETAILS = "ERP_UNIFORM_GET_DETAILS_ERROR"
    BY_FRP = "ERP_UNIFORM_BY_FRP_ERROR"
    CREATE_ITEM = "ERP_UNIFORM_CREATE_ITEM_ERROR"
    UPDATE_ITEM = "ERP_UNIFORM_UPDATE_ITEM_ERROR"
    DELETE_ITEM = "ERP_UNIFORM_DELETE_ITEM_ERROR"
    POST_ITEM = "ERP_UNIFORM_POST_ITEM_ERROR"


ERROR_DESCRIPTIONS = {
    ErrorCode.GET_LIST: "Failed to get the list of uniform transfers",
    ErrorCode.GET_DETAILS: "Failed to get the uniform transfer details",
    ErrorCode.BY_FRP: "Failed to get the uniform available for return",
    ErrorCode.CREATE_ITEM: "Failed to create the uniform transfer",
    ErrorCode.UPDATE_ITEM: "Failed to update the uniform transfer",
    ErrorCode.DELETE_ITEM: "Failed to delete the uniform transfer",
    ErrorCode.POST_ITEM: "Failed to post the uniform transfer",
}


class TransferServiceError(Exception):
    """An ERP failure wrapped with the application error code of the operation."""

    code: ErrorCode

    def __init__(self, previous: Exception | None = None):
        self.previous = previous
        message = ERROR_DESCRIPTIONS[self.code]
        if previous is not None and str(previous):
            message = f"{message}: {previous}"
        super().__init__(message)


class GetListError(TransferServiceError):
    code = ErrorCode.GET_LIST


class GetDetailsError(TransferServiceError):
    code = ErrorCode.GET_DETAILS


class GetByFrpError(TransferServiceError):
    code = ErrorCode.BY_FRP


class CreateItemError(TransferServiceError):
    code = ErrorCode.CREATE_ITEM


class UpdateItemError(TransferServiceError):
    code = ErrorCode.UPDATE_ITEM


class DeleteItemError(TransferServiceError):
    code = ErrorCode.DELETE_ITEM


class PostItemError(TransferServiceError):
    code = ErrorCode.POST_ITEM
