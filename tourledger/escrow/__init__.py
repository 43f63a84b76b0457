"""Tournament escrow: group admission, settlement and random selection."""

from .join import JoinCoordinator, JoinOutcome, resolve_partners
from .selector import RandomSelector
from .settlement import SettlementEngine, SettlementResult

__all__ = [
    "JoinCoordinator",
    "JoinOutcome",
    "RandomSelector",
    "SettlementEngine",
    "SettlementResult",
    "resolve_partners",
]
