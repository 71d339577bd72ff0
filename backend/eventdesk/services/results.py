"""
EventDesk Backend — Service Results
=====================================

What:  Explicit success/failure values returned by every EventService operation.
How:   Operations never let expected failures escape as exceptions; they return
       `Failure(error)` carrying one of the exceptions from eventdesk.exceptions,
       whose `status_code` decides the HTTP status. Routes turn results into
       envelopes with `eventdesk.responses.envelope_response`.
Why:   Four of the five operations have a 400 and a 404 path. As values,
       failures show up in the operation signature and tests can assert on
       them without pytest.raises or an HTTP round trip.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

from eventdesk.exceptions import EventDeskError
from eventdesk.schemas.event import PaginationMeta

T = TypeVar("T")


@dataclass
class Success(Generic[T]):
    data: Optional[T] = None
    message: Optional[str] = None
    pagination: Optional[PaginationMeta] = None
    status_code: int = 200

    ok = True


@dataclass
class Failure:
    error: EventDeskError

    ok = False

    @property
    def status_code(self) -> int:
        return self.error.status_code

    @property
    def message(self) -> str:
        return self.error.message


Result = Union[Success[Any], Failure]
