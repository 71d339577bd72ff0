"""
EventDesk Backend — Event Service (Business Logic)
====================================================

What:  The five operations of the Events resource: get by ID, list latest,
       create, update and delete.
How:   Validates input, builds documents through the model layer, calls the
       injected EventStore and returns a `Success` or `Failure` result.
Why:   The store is injected rather than imported, so the suite runs the
       real business rules against an in-memory store with a fake clock and
       never needs a MongoDB server.
Who:   Called by the route handlers in routes/events.py; tests drive it
       directly with an in-memory store.

Error Handling Strategy:
    ValidationError / NotFoundError are raised by the validation helpers and
    converted to `Failure` at each operation boundary. Store failures arrive
    as StoreError. Anything else is logged with its stack trace and wrapped in
    StoreError, so a service call always returns a result.
"""

import functools
import logging
import math
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError

from eventdesk.exceptions import EventDeskError, NotFoundError, StoreError, ValidationError
from eventdesk.models.event import (
    INT64_MAX,
    PROTECTED_FIELDS,
    new_event_document,
    parse_int,
    update_fields,
    utcnow,
)
from eventdesk.schemas.event import CreatedEvent, EventCreate, EventUpdate, PaginationMeta, UpdateSummary
from eventdesk.services.results import Failure, Result, Success
from eventdesk.services.store_base import EventStore

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
DEFAULT_PAGE = 1


def _returns_result(operation: str):
    """Convert exceptions raised inside an operation into `Failure` results."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Result:
            try:
                return await func(*args, **kwargs)
            except (ValidationError, NotFoundError) as e:
                return Failure(e)
            except EventDeskError as e:
                logger.error(
                    "Error %s: %s | Context: %s", operation, e.message, e.context
                )
                return Failure(e)
            except Exception as e:
                logger.error("Error %s: %s", operation, str(e), exc_info=True)
                return Failure(
                    StoreError(detail=str(e), context={"error_type": type(e).__name__})
                )

        return wrapper

    return decorator


def validate_event_id(event_id: Optional[str]) -> ObjectId:
    """Parse a textual event ID, raising ValidationError when absent or malformed."""
    if not event_id:
        raise ValidationError(message="Event ID is required", field="id")
    if not ObjectId.is_valid(event_id):
        raise ValidationError(
            message="Invalid Event ID format", field="id", context={"value": event_id}
        )
    return ObjectId(event_id)


def _positive_int(raw: Any, default: int, field: str) -> int:
    """Parse a paging parameter. Values outside the int64 range are rejected."""
    value = default if raw is None else parse_int(raw)
    if value is None or value < 1:
        raise ValidationError(
            message=f"{field.capitalize()} must be a positive integer", field=field
        )
    return value


def _payload_error(exc: PydanticValidationError) -> ValidationError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    message = f"Invalid value for '{field}': {first.get('msg')}" if field else "Invalid request body"
    return ValidationError(message=message, field=field)


class EventService:
    """
    Business logic for event documents.

    Stateless apart from its collaborators: the store and a clock returning
    aware UTC datetimes (tests pass a fake clock to control timestamps).
    """

    def __init__(self, store: EventStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    @_returns_result("fetching event by ID")
    async def get_event(self, event_id: Optional[str]) -> Result:
        """
        Fetch one event by its ID.

        Failures:
            400 "Event ID is required" / "Invalid Event ID format"
            404 "Event not found"
        """
        oid = validate_event_id(event_id)
        event = await self.store.find_by_id(oid)
        if event is None:
            raise NotFoundError(resource="Event", resource_id=event_id)
        return Success(data=event)

    @_returns_result("fetching latest events")
    async def list_latest(self, limit: Any = None, page: Any = None) -> Result:
        """
        One page of events, most recent `schedule` first.

        `limit` and `page` are the raw query values; absent values fall back
        to 5 and 1. The count and the page are read separately, so a write
        landing between them can make the metadata off by one.
        """
        limit_num = _positive_int(limit, DEFAULT_LIMIT, "limit")
        page_num = _positive_int(page, DEFAULT_PAGE, "page")
        skip = (page_num - 1) * limit_num
        if skip > INT64_MAX:
            raise ValidationError(message="Page is out of range", field="page")

        total = await self.store.count()
        events = await self.store.find_page(skip=skip, limit=limit_num)

        return Success(
            data=events,
            pagination=PaginationMeta(
                currentPage=page_num,
                limit=limit_num,
                totalEvents=total,
                totalPages=math.ceil(total / limit_num),
            ),
        )

    @_returns_result("creating event")
    async def create_event(self, payload: Optional[Mapping[str, Any]]) -> Result:
        """
        Insert a new event with defaults applied.

        Returns 201 with the new `_id`. Nothing is written when validation fails.
        """
        try:
            body = EventCreate.model_validate(payload or {})
        except PydanticValidationError as e:
            raise _payload_error(e)

        if not body.name:
            raise ValidationError(message="Event name is required", field="name")

        document = new_event_document(body.model_dump(), now=self.clock())
        inserted_id = await self.store.insert_one(document)
        logger.info("Event created: %s", inserted_id)

        return Success(
            data=CreatedEvent(id=str(inserted_id)).model_dump(by_alias=True),
            message="Event created successfully",
            status_code=201,
        )

    @_returns_result("updating event")
    async def update_event(
        self, event_id: Optional[str], payload: Optional[Mapping[str, Any]]
    ) -> Result:
        """
        Merge the sent fields into an existing event.

        `_id` and `type` are dropped silently; `updatedAt` is always refreshed.
        Sent values are stored as given apart from the coercions in
        `update_fields` (schedule, rigor_rank, attendees).
        Returns the store's modified count (0 or 1).
        """
        oid = validate_event_id(event_id)
        if not payload:
            raise ValidationError(message="No update fields provided")

        sent: Dict[str, Any] = {k: v for k, v in payload.items() if k not in PROTECTED_FIELDS}
        changes = EventUpdate.model_validate(sent).changes()

        outcome = await self.store.update_by_id(oid, update_fields(changes, now=self.clock()))
        if outcome.matched_count == 0:
            raise NotFoundError(resource="Event", resource_id=event_id)
        logger.info("Event updated: %s (modified=%d)", event_id, outcome.modified_count)

        return Success(
            data=UpdateSummary(modifiedCount=outcome.modified_count).model_dump(),
            message="Event updated successfully",
        )

    @_returns_result("deleting event")
    async def delete_event(self, event_id: Optional[str]) -> Result:
        oid = validate_event_id(event_id)
        deleted = await self.store.delete_by_id(oid)
        if deleted == 0:
            raise NotFoundError(resource="Event", resource_id=event_id)
        logger.info("Event deleted: %s", event_id)
        return Success(message="Event deleted successfully")
