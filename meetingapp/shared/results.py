"""Outcome of a mutating service operation"""

from enum import Enum
from typing import Optional

from fastapi import HTTPException


class Outcome(str, Enum):
    """
    Result of a service mutation.

    Services return one of these instead of a bare boolean so that callers can
    tell a missing entity from one they are not allowed to touch.
    """

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"  # Entity exists but its state does not allow the change
    FAILED = "failed"  # Storage error, already logged

    @property
    def ok(self) -> bool:
        return self is Outcome.SUCCESS


HTTP_STATUS_BY_OUTCOME = {
    Outcome.SUCCESS: 200,
    Outcome.NOT_FOUND: 404,
    Outcome.FORBIDDEN: 403,
    Outcome.CONFLICT: 409,
    Outcome.FAILED: 503,
}


def raise_for_outcome(outcome: Outcome, entity: str, conflict_detail: Optional[str] = None) -> None:
    """Translate a failed outcome into the matching HTTP error"""
    if outcome.ok:
        return

    details = {
        Outcome.NOT_FOUND: f"{entity} not found",
        Outcome.FORBIDDEN: f"You are not allowed to modify this {entity.lower()}",
        Outcome.CONFLICT: conflict_detail or f"{entity} cannot be changed in its current state",
        Outcome.FAILED: "Storage unavailable, please retry",
    }
    raise HTTPException(status_code=HTTP_STATUS_BY_OUTCOME[outcome], detail=details[outcome])
