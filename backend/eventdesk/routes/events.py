"""
EventDesk Backend — Events Route Handlers
===========================================

What:  HTTP surface of the Events resource, mounted under the configured base
       path (default /api/v3/app).
Why:   Handlers stay thin: every rule that decides a status code lives in
       EventService, so the same rules apply to the HTTP surface and to
       direct service calls in tests.
How:   Extracts query/path/body values, delegates to EventService and renders
       the returned result as a JSON envelope.

Routing:
    GET    /events?id=<id>                 → get one event
    GET    /events[?type=latest&limit&page] → list latest events (default)
    POST   /events                          → create
    PUT    /events/{id}                     → update
    DELETE /events/{id}                     → delete
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from eventdesk.database import get_event_store
from eventdesk.responses import envelope_response
from eventdesk.schemas.event import ErrorResponse, SuccessResponse
from eventdesk.services.event_service import EventService
from eventdesk.services.store_base import EventStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Events"])

_ERRORS = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    404: {"description": "Event not found", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


def get_event_service(store: EventStore = Depends(get_event_store)) -> EventService:
    return EventService(store)


@router.get(
    "/events",
    response_model=SuccessResponse,
    responses=_ERRORS,
    summary="Get one event by ID, or list the latest events",
    description=(
        "With a non-empty `id` query parameter, returns that event. Otherwise "
        "returns a page of events sorted by schedule, most recent first, "
        "with pagination metadata."
    ),
)
async def read_events(
    id: Optional[str] = Query(default=None, description="Event ID (24-character hex)"),
    type: Optional[str] = Query(default=None, description="Listing selector, e.g. 'latest'"),
    limit: Optional[str] = Query(default=None, description="Page size (default 5)"),
    page: Optional[str] = Query(default=None, description="1-based page number (default 1)"),
    service: EventService = Depends(get_event_service),
) -> JSONResponse:
    if id:
        return envelope_response(await service.get_event(id))
    # type=latest and the bare listing resolve to the same operation
    return envelope_response(await service.list_latest(limit=limit, page=page))


@router.post(
    "/events",
    status_code=201,
    response_model=SuccessResponse,
    responses=_ERRORS,
    summary="Create an event",
)
async def create_event(
    payload: Dict[str, Any] = Body(default_factory=dict),
    service: EventService = Depends(get_event_service),
) -> JSONResponse:
    return envelope_response(await service.create_event(payload))


@router.put(
    "/events/{event_id}",
    response_model=SuccessResponse,
    responses=_ERRORS,
    summary="Update an event",
    description="Merges the sent fields into the event. `_id` and `type` are ignored.",
)
async def update_event(
    event_id: str,
    payload: Dict[str, Any] = Body(default_factory=dict),
    service: EventService = Depends(get_event_service),
) -> JSONResponse:
    return envelope_response(await service.update_event(event_id, payload))


@router.delete(
    "/events/{event_id}",
    response_model=SuccessResponse,
    responses=_ERRORS,
    summary="Delete an event",
)
async def delete_event(
    event_id: str,
    service: EventService = Depends(get_event_service),
) -> JSONResponse:
    return envelope_response(await service.delete_event(event_id))
