"""
EventDesk Backend — JSON Envelope Rendering
=============================================

What:  Turns service results and exceptions into the uniform JSON envelope
       every endpoint returns.

    success: {"success": true, "data"?: ..., "message"?: str, "pagination"?: {...}}
    failure: {"success": false, "message": str, "error"?: str}

The raw `error` detail is attached to 500 responses only, and only when the
server is not running in production.
"""

from typing import Any, Dict

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from eventdesk.config import settings
from eventdesk.exceptions import EventDeskError
from eventdesk.models.event import DOCUMENT_ENCODERS
from eventdesk.services.results import Result, Success


def error_body(exc: EventDeskError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": exc.message}
    if exc.status_code >= 500 and not settings.is_production and exc.detail:
        body["error"] = exc.detail
    return body


def error_response(exc: EventDeskError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


def envelope_response(result: Result) -> JSONResponse:
    """Render a service result with its status code."""
    if not isinstance(result, Success):
        return error_response(result.error)

    body: Dict[str, Any] = {"success": True}
    if result.message is not None:
        body["message"] = result.message
    if result.data is not None:
        body["data"] = result.data
    if result.pagination is not None:
        body["pagination"] = result.pagination.model_dump()

    return JSONResponse(
        status_code=result.status_code,
        content=jsonable_encoder(body, custom_encoder=DOCUMENT_ENCODERS),
    )
