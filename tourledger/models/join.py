"""Escrow rows recording who paid into which tournament, and for whom."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    delete,
    func,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base


@dataclass(frozen=True)
class LeaderEntry:
    """The fee-paying member that anchors a join group."""

    player_id: str

    @property
    def leader_id(self) -> str:
        return self.player_id


@dataclass(frozen=True)
class BackerEntry:
    """A member sharing ``leader_id``'s entry fee and prize."""

    player_id: str
    leader_id: str


Entry = Union[LeaderEntry, BackerEntry]


class JoinRecord(Base):
    """One player's contribution to a join group in an open tournament.

    The row is a leader entry when ``player_id == leader_id`` and a backer
    entry otherwise. Use :attr:`entry` rather than comparing ids directly.
    """

    def __init__(
        self,
        tournament_id: str,
        player_id: str,
        contributed_amount: int,
        leader_id: str,
        joined_at: Optional[datetime] = None,
    ):
        """Create a new join row.

        Parameters
        ----------
        tournament_id : str
            Tournament the contribution is escrowed against.
        player_id : str
            Contributing player.
        contributed_amount : int
            Points debited from ``player_id`` at admission.
        leader_id : str
            Leader of the group. Equal to ``player_id`` for the leader's own row.
        joined_at : datetime, optional
            Explicit admission timestamp.
        """

        self.tournament_id = tournament_id
        self.player_id = player_id
        self.contributed_amount = contributed_amount
        self.leader_id = leader_id
        if joined_at is not None:
            self.joined_at = joined_at

    __tablename__ = "joinings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tournament_id: Mapped[str] = mapped_column(
        ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
    )
    player_id: Mapped[str] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    contributed_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    leader_id: Mapped[str] = mapped_column(String(64), nullable=False)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_joinings_tournament_player", "tournament_id", "player_id"),
        Index("ix_joinings_tournament_leader", "tournament_id", "leader_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<JoinRecord(tournament_id='{self.tournament_id}', "
            f"player_id='{self.player_id}', leader_id='{self.leader_id}', "
            f"contributed_amount={self.contributed_amount})>"
        )

    @classmethod
    def for_entry(
        cls, tournament_id: str, entry: Entry, contributed_amount: int
    ) -> "JoinRecord":
        """Build the row representing ``entry``."""

        return cls(
            tournament_id=tournament_id,
            player_id=entry.player_id,
            contributed_amount=contributed_amount,
            leader_id=entry.leader_id,
        )

    @property
    def entry(self) -> Entry:
        if self.player_id == self.leader_id:
            return LeaderEntry(self.player_id)
        return BackerEntry(self.player_id, self.leader_id)

    @property
    def is_leader(self) -> bool:
        return isinstance(self.entry, LeaderEntry)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @classmethod
    def _leader_clause(cls):
        return cls.player_id == cls.leader_id

    @classmethod
    def find_leader_entry(
        cls, session: Session, tournament_id: str, leader_id: str
    ) -> Optional["JoinRecord"]:
        """Return ``leader_id``'s own leader row in ``tournament_id``, if any."""

        stmt = select(cls).where(
            cls.tournament_id == tournament_id,
            cls.player_id == leader_id,
            cls._leader_clause(),
        )
        return session.scalars(stmt).first()

    @classmethod
    def leader_entries(cls, session: Session, tournament_id: str) -> list["JoinRecord"]:
        """Every leader row in ``tournament_id``, in admission order."""

        stmt = (
            select(cls)
            .where(cls.tournament_id == tournament_id, cls._leader_clause())
            .order_by(cls.id.asc())
        )
        return list(session.scalars(stmt).all())

    @classmethod
    def count_leader_entries(cls, session: Session, tournament_id: str) -> int:
        stmt = select(func.count(cls.id)).where(
            cls.tournament_id == tournament_id, cls._leader_clause()
        )
        return int(session.scalar(stmt) or 0)

    @classmethod
    def group(
        cls, session: Session, tournament_id: str, leader_id: str
    ) -> list["JoinRecord"]:
        """The leader row plus every backer row pointing at ``leader_id``."""

        stmt = (
            select(cls)
            .where(cls.tournament_id == tournament_id, cls.leader_id == leader_id)
            .order_by(cls.id.asc())
        )
        return list(session.scalars(stmt).all())

    @classmethod
    def for_tournament(cls, session: Session, tournament_id: str) -> list["JoinRecord"]:
        stmt = (
            select(cls)
            .where(cls.tournament_id == tournament_id)
            .order_by(cls.id.asc())
        )
        return list(session.scalars(stmt).all())

    @classmethod
    def tournaments_with_leaders(
        cls, session: Session, leader_id: Optional[str] = None
    ) -> list[str]:
        """Distinct tournament ids holding a leader row.

        When ``leader_id`` is given, only tournaments where that player leads
        a group are returned.
        """

        stmt = select(cls.tournament_id).where(cls._leader_clause())
        if leader_id is not None:
            stmt = stmt.where(cls.player_id == leader_id)
        stmt = stmt.distinct().order_by(cls.tournament_id.asc())
        return list(session.scalars(stmt).all())

    @classmethod
    def escrow_total(cls, session: Session, tournament_id: Optional[str] = None) -> int:
        """Sum of outstanding contributions, optionally for one tournament."""

        stmt = select(func.coalesce(func.sum(cls.contributed_amount), 0))
        if tournament_id is not None:
            stmt = stmt.where(cls.tournament_id == tournament_id)
        return int(session.scalar(stmt) or 0)

    @classmethod
    def remove(cls, session: Session, tournament_id: str, player_id: str) -> int:
        """Delete ``player_id``'s rows in ``tournament_id``. Returns rows removed."""

        result = session.execute(
            delete(cls).where(
                cls.tournament_id == tournament_id, cls.player_id == player_id
            )
        )
        return result.rowcount or 0

    def to_json(self) -> dict:
        return {
            "tournamentId": self.tournament_id,
            "playerId": self.player_id,
            "leaderId": self.leader_id,
            "contributedAmount": self.contributed_amount,
        }
