from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .player import MAX_POINTS, Player  # noqa: F401
from .tournament import Tournament, TournamentStatus  # noqa: F401
from .join import BackerEntry, Entry, JoinRecord, LeaderEntry  # noqa: F401

__all__ = [
    "Base",
    "MAX_POINTS",
    "Player",
    "Tournament",
    "TournamentStatus",
    "JoinRecord",
    "Entry",
    "LeaderEntry",
    "BackerEntry",
]
