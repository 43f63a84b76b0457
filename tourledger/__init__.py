"""Points ledger and tournament escrow/settlement engine."""

from .errors import (
    ConflictError,
    EmptyCandidateSetError,
    InsufficientFundsError,
    InvalidArgumentError,
    NotFoundError,
    StoreUnavailableError,
    TourLedgerError,
)
from .workflows import LedgerSnapshot, TourLedger

__version__ = "0.1.0"

__all__ = [
    "ConflictError",
    "EmptyCandidateSetError",
    "InsufficientFundsError",
    "InvalidArgumentError",
    "LedgerSnapshot",
    "NotFoundError",
    "StoreUnavailableError",
    "TourLedger",
    "TourLedgerError",
]
