"""Translate handler results and failures into HTTP status codes and JSON bodies."""

from enum import Enum
from typing import Any

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.services.base import InvalidInputError, NotFoundError
from app.utils.logger import get_logger

logger = get_logger(__name__)


class OperationSite(str, Enum):
    """Where a handler failed; decides the status for unclassified errors."""

    READ = "read"
    DELETE = "delete"
    CREATE = "create"
    UPDATE = "update"


# Reads and deletes fail as store faults, writes as client input faults.
FAILURE_STATUS = {
    OperationSite.READ: 500,
    OperationSite.DELETE: 500,
    OperationSite.CREATE: 400,
    OperationSite.UPDATE: 400,
}


def encode_document(content: Any) -> Any:
    """Make BSON documents JSON-safe (ObjectId as hex string, dates as ISO-8601)."""
    return jsonable_encoder(content, custom_encoder={ObjectId: str})


def message_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def success_response(content: Any, *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=encode_document(content))


def failure_response(exc: Exception, site: OperationSite) -> JSONResponse:
    """
    Map an exception raised inside a handler to its response.

    NotFoundError is always 404 and InvalidInputError always 400. Anything else
    is classified by ``site`` only, with the error message passed through.
    """
    message = str(exc)
    if isinstance(exc, NotFoundError):
        return message_response(404, message)
    if isinstance(exc, InvalidInputError):
        logger.warning(f"Rejected {site.value} request: {message}")
        return message_response(400, message)

    status_code = FAILURE_STATUS[site]
    if status_code >= 500:
        logger.error(f"Store error during {site.value}: {message}", exc_info=True)
    else:
        logger.warning(f"Invalid input during {site.value}: {message}")
    return message_response(status_code, message)
