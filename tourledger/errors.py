"""Exception hierarchy shared by the ledger, registry and escrow engines.

Every failure surfaced by the package is a :class:`TourLedgerError` carrying a
stable ``code`` string and the HTTP status the transport layer reports it as.
"""

from __future__ import annotations

from typing import Any, Optional


class TourLedgerError(Exception):
    """Base class for all ledger and tournament failures."""

    code = "internal_error"
    http_status = 500

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> dict[str, Any]:
        """Return the JSON error envelope used by the HTTP layer."""

        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return {"error": body}


class NotFoundError(TourLedgerError, LookupError):
    """Unknown player or tournament."""

    code = "not_found"
    http_status = 404


class ConflictError(TourLedgerError):
    """Duplicate tournament id, duplicate leader join, or finished tournament."""

    code = "conflict"
    http_status = 409


class InvalidArgumentError(TourLedgerError, ValueError):
    """Negative amounts, empty identifiers or malformed numeric input."""

    code = "invalid_argument"
    http_status = 400


class InsufficientFundsError(TourLedgerError):
    """A player's balance cannot cover the requested debit."""

    code = "insufficient_funds"
    http_status = 400

    def __init__(
        self,
        player_id: str,
        required: int,
        available: Optional[int] = None,
    ) -> None:
        super().__init__(
            f"player {player_id} has insufficient balance",
            player_id=player_id,
            required=required,
            available=available,
        )
        self.player_id = player_id
        self.required = required
        self.available = available


class EmptyCandidateSetError(TourLedgerError):
    """Random selection was asked to choose from nothing."""

    code = "empty_candidate_set"
    http_status = 404


class StoreUnavailableError(TourLedgerError):
    """The persistent store failed while reading or writing."""

    code = "store_unavailable"
    http_status = 503


__all__ = [
    "TourLedgerError",
    "NotFoundError",
    "ConflictError",
    "InvalidArgumentError",
    "InsufficientFundsError",
    "EmptyCandidateSetError",
    "StoreUnavailableError",
]
