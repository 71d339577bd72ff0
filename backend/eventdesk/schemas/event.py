"""
EventDesk Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract of the Events resource.
How:   Request payloads are validated by EventService (so failures come back
       as 400 envelopes, not FastAPI's 422). Response models document the
       envelope shapes in the OpenAPI schema.

Envelope shapes:
    success: {"success": true, "data": ..., "message"?: str, "pagination"?: {...}}
    failure: {"success": false, "message": str, "error"?: str}
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models: what the client sends
# ══════════════════════════════════════════════════════════════════════════


class EventCreate(BaseModel):
    """
    Body of POST /events.

    Every field is optional at the schema level; the service enforces the
    non-empty name rule so the failure message matches the API contract.
    Unknown keys, including `type`, `_id`, `createdAt` and `updatedAt`, are
    ignored.
    """

    uid: Optional[str] = None
    name: Optional[str] = None
    tagline: Optional[str] = None
    # Accepts ISO-8601 strings or epoch milliseconds; coerced by the model layer
    schedule: Optional[Any] = None
    description: Optional[str] = None
    files: Optional[Dict[str, Any]] = None
    moderator: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    rigor_rank: Optional[Any] = None
    # Anything that is not a list is discarded
    attendees: Optional[Any] = None

    model_config = {"extra": "ignore"}


class EventUpdate(BaseModel):
    """
    Body of PUT /events/{id}.

    Every value is accepted as sent and merged into the stored document; the
    model layer coerces schedule, rigor_rank and attendees. Unknown keys are
    kept too (the API has always accepted arbitrary fields on update).
    `_id` and `type` are dropped by the service before validation.
    """

    uid: Optional[Any] = None
    name: Optional[Any] = None
    tagline: Optional[Any] = None
    schedule: Optional[Any] = None
    description: Optional[Any] = None
    files: Optional[Any] = None
    moderator: Optional[Any] = None
    category: Optional[Any] = None
    sub_category: Optional[Any] = None
    rigor_rank: Optional[Any] = None
    attendees: Optional[Any] = None

    model_config = {"extra": "allow"}

    def changes(self) -> Dict[str, Any]:
        """Only the keys the client actually sent, including extras."""
        sent = set(self.model_fields_set) & set(type(self).model_fields)
        data = self.model_dump(include=sent)
        data.update(self.model_extra or {})
        return data


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns
# ══════════════════════════════════════════════════════════════════════════


class PaginationMeta(BaseModel):
    """Pagination block attached to list responses."""

    currentPage: int = Field(description="Page number that was returned (1-based)")
    limit: int = Field(description="Page size that was applied")
    totalEvents: int = Field(description="Total number of event documents")
    totalPages: int = Field(description="ceil(totalEvents / limit)")


class CreatedEvent(BaseModel):
    id: str = Field(alias="_id", description="Identifier assigned by the store")

    model_config = {"populate_by_name": True}


class UpdateSummary(BaseModel):
    modifiedCount: int


class SuccessResponse(BaseModel):
    success: bool = True
    data: Optional[Any] = None
    message: Optional[str] = None
    pagination: Optional[PaginationMeta] = None


class ErrorResponse(BaseModel):
    """
    Failure envelope.

    `error` carries the raw error detail and is only present on 500s when the
    server is not running in production.
    """

    success: bool = False
    message: str
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = Field(description="Always 'OK' while the process can answer")
    message: str
    timestamp: str = Field(description="Current server time, ISO-8601 with milliseconds")
