"""
Operation results shared by the booking core.

Every core operation returns an OperationResult instead of raising for
business-rule failures. The HTTP layer only needs the triple
(success, status_code, message) plus the optional data payload.

Usage:
    from utils.results import ErrorKind, ok, fail

    return ok(data={'reservation_id': 7}, message='Reservation created', status_code=201)
    return fail(ErrorKind.NOT_FOUND, 'Reservation not found')
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Business failure categories."""

    VALIDATION = 'validation'
    NOT_FOUND = 'not_found'
    INSUFFICIENT_AVAILABILITY = 'insufficient_availability'
    INVALID_STATE = 'invalid_state'
    CONFLICT = 'conflict'

    @property
    def status_code(self) -> int:
        """HTTP status code reported for this failure."""
        return _STATUS_CODES[self.value]


_STATUS_CODES = {
    'validation': 400,
    'not_found': 404,
    'insufficient_availability': 409,
    'invalid_state': 409,
    'conflict': 409,
}


@dataclass
class OperationResult:
    """Outcome of a core operation."""

    success: bool
    status_code: int
    message: str
    data: Any = None
    kind: Optional[ErrorKind] = None
    detail: dict = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.success


def ok(data: Any = None, message: str = 'OK', status_code: int = 200) -> OperationResult:
    """Build a successful result."""
    return OperationResult(True, status_code, message, data=data)


def fail(kind: ErrorKind, message: str, **detail: Any) -> OperationResult:
    """Build a failed result of the given kind with optional detail fields."""
    return OperationResult(False, kind.status_code, message, kind=kind, detail=detail)
