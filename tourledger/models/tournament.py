from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base


class TournamentStatus(str, enum.Enum):
    OPEN = "open"
    FINISHED = "finished"


class Tournament(Base):
    """An announced tournament and its entry deposit.

    A tournament is open until ``winner_id`` is recorded, after which it is
    finished for good.
    """

    def __init__(
        self,
        id: str,
        deposit: int,
        winner_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ):
        """Create a new :class:`Tournament` record.

        Parameters
        ----------
        id : str
            Caller-supplied tournament identifier.
        deposit : int
            Entry deposit owed by each joining group.
        winner_id : str, optional
            Leader of the winning group. ``None`` while the tournament is open.
        created_at : datetime, optional
            Explicit creation timestamp.
        """

        self.id = id
        self.deposit = deposit
        self.winner_id = winner_id
        if created_at is not None:
            self.created_at = created_at

    __tablename__ = "tournaments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    deposit: Mapped[int] = mapped_column(BigInteger, nullable=False)
    winner_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    finished_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (CheckConstraint("deposit >= 0", name="deposit_non_negative"),)

    def __repr__(self) -> str:
        return (
            f"<Tournament(id='{self.id}', deposit={self.deposit}, "
            f"winner_id={self.winner_id!r})>"
        )

    @property
    def status(self) -> TournamentStatus:
        if self.winner_id is None:
            return TournamentStatus.OPEN
        return TournamentStatus.FINISHED

    @property
    def is_open(self) -> bool:
        return self.winner_id is None

    def mark_finished(self, winner_id: str) -> None:
        """Record ``winner_id`` and close the tournament.

        Raises
        ------
        ValueError
            If the tournament already has a winner.
        """

        if self.winner_id is not None:
            raise ValueError(f"tournament {self.id} already finished")
        self.winner_id = winner_id
        self.finished_at = datetime.now(timezone.utc)

    @classmethod
    def get(cls, session: Session, tournament_id: str) -> Optional["Tournament"]:
        """Retrieve a tournament by id."""

        return session.get(cls, tournament_id)

    def to_json(self) -> dict:
        return {
            "tournamentId": self.id,
            "deposit": self.deposit,
            "status": self.status.value,
            "winnerId": self.winner_id,
        }
