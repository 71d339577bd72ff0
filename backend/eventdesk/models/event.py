"""
EventDesk Backend — Event Document Model
==========================================

What:  Shape of an event document in the `events` collection, the defaulting
       and coercion rules applied before anything is written, and the JSON
       encoding used when documents go back out.
Why:   Clients have always been able to send loosely typed values (numbers as
       strings, dates as epoch milliseconds). The rules here decide what is
       actually stored, in one place shared by create and update.
Who:   Used by EventService when building create/update documents and by the
       response layer when serializing documents.

Document layout:
    _id           ObjectId, assigned by the store, immutable
    type          always "event", never client-settable
    uid           creator's external user id, or null
    name          required, non-empty
    tagline       ""   by default
    schedule      date, creation time by default
    description   ""   by default
    files         {"image": null} by default
    moderator     null by default
    category      ""   by default
    sub_category  ""   by default
    rigor_rank    integer, 0 by default
    attendees     list of strings, [] by default
    createdAt     set once at creation
    updatedAt     set at creation and on every update

Coercion rules:
    Integers use a leading-integer parse ("12abc" → 12, "3.9" → 3); values
    with no leading integer, or outside the int64 range, are unparseable.
    Dates accept datetimes, epoch milliseconds and ISO-8601 strings. An
    unparseable rigor_rank or schedule is stored as null. On update,
    attendees that is not a list becomes [].
"""

import re
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId

EVENT_TYPE = "event"

# Keys an update request may never touch
PROTECTED_FIELDS = ("_id", "type")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# BSON integers are signed 64-bit
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_int(value: Any) -> Optional[int]:
    """
    Leading-integer parse of `value`.

    Returns None when no integer can be read, or when the integer does not
    fit in a BSON int64. Booleans, containers and None are unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        parsed = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match:
            return None
        parsed = int(match.group(1))
    else:
        return None
    return parsed if INT64_MIN <= parsed <= INT64_MAX else None


def coerce_date(value: Any) -> Optional[datetime]:
    """
    Convert `value` to an aware UTC datetime, or None when unparseable.

    Numbers are epoch milliseconds. Strings are ISO-8601; a trailing "Z" is
    accepted and naive values are taken as UTC.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def new_event_document(fields: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    """
    Build the document stored for a create request.

    `fields` holds the client-settable keys (missing keys are treated like
    falsy ones). `type`, `createdAt` and `updatedAt` are always server-set.
    """
    schedule = fields.get("schedule")
    rigor_rank = fields.get("rigor_rank")
    attendees = fields.get("attendees")
    files = fields.get("files")

    return {
        "type": EVENT_TYPE,
        "uid": fields.get("uid") or None,
        "name": fields["name"],
        "tagline": fields.get("tagline") or "",
        "schedule": coerce_date(schedule) if schedule else now,
        "description": fields.get("description") or "",
        "files": files if files is not None else {"image": None},
        "moderator": fields.get("moderator") or None,
        "category": fields.get("category") or "",
        "sub_category": fields.get("sub_category") or "",
        "rigor_rank": parse_int(rigor_rank) if rigor_rank else 0,
        "attendees": list(attendees) if isinstance(attendees, list) else [],
        "createdAt": now,
        "updatedAt": now,
    }


def update_fields(changes: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    """
    Build the `$set` document for an update request.

    Protected keys are dropped silently; every other key is carried through.
    `attendees` that is not a list is replaced by an empty list.
    """
    fields = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}

    if fields.get("schedule"):
        fields["schedule"] = coerce_date(fields["schedule"])
    if "rigor_rank" in fields:
        fields["rigor_rank"] = parse_int(fields["rigor_rank"])
    if "attendees" in fields and not isinstance(fields["attendees"], list):
        fields["attendees"] = []

    fields["updatedAt"] = now
    return fields


# ── JSON Encoding ─────────────────────────────────────────────────────────

def isoformat_ms(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2024-01-15T12:00:00.000Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


# Passed to fastapi.encoders.jsonable_encoder as custom_encoder
DOCUMENT_ENCODERS = {
    ObjectId: str,
    datetime: isoformat_ms,
}
