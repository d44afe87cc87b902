"""Domain errors raised by the governance core.

Services raise these instead of returning partial results; the API layer maps
each class to an HTTP status through the handlers registered in ``main``.
"""

from __future__ import annotations

from fastapi import status


class KratiaError(Exception):
    """Base class for every error surfaced by the core."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(KratiaError):
    """Malformed input; nothing was written."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class Forbidden(KratiaError):
    """The acting member is not eligible for the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class InvalidTarget(KratiaError):
    """The member a proposal targets cannot be the subject of it."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFound(KratiaError):
    """A referenced document does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidState(KratiaError):
    """The votation is not in a state that accepts the operation."""

    status_code = status.HTTP_409_CONFLICT


class DuplicateVote(InvalidState):
    """The member already has a ballot on this votation."""


class SelfVoteForbidden(InvalidState):
    """The target of a sanction votation tried to vote on it."""


class InfrastructureError(KratiaError):
    """A transaction or batch could not be committed; state is unchanged."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


__all__ = [
    "KratiaError",
    "ValidationError",
    "Forbidden",
    "InvalidTarget",
    "NotFound",
    "InvalidState",
    "DuplicateVote",
    "SelfVoteForbidden",
    "InfrastructureError",
]
