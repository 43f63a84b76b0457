from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, String, func, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base

# Largest value a BIGINT column can hold.
MAX_POINTS = 2**63 - 1


class Player(Base):
    """A points account. Created implicitly the first time it is funded."""

    def __init__(
        self,
        id: str,
        balance: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        """Create a new :class:`Player` record.

        Parameters
        ----------
        id : str
            Caller-supplied player identifier.
        balance : int, default: 0
            Opening balance in points. Must not be negative.
        created_at : datetime, optional
            Explicit creation timestamp.
        updated_at : datetime, optional
            Explicit last update timestamp.
        """

        self.id = id
        self.balance = balance
        if created_at is not None:
            self.created_at = created_at
        if updated_at is not None:
            self.updated_at = updated_at

    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (CheckConstraint("balance >= 0", name="balance_non_negative"),)

    def __repr__(self) -> str:
        return f"<Player(id='{self.id}', balance={self.balance})>"

    @classmethod
    def get(cls, session: Session, player_id: str) -> Optional["Player"]:
        """Retrieve a player by id."""

        return session.get(cls, player_id)

    @classmethod
    def total_balance(cls, session: Session) -> int:
        """Sum of every player's balance."""

        return int(session.scalar(select(func.coalesce(func.sum(cls.balance), 0))) or 0)

    def to_json(self) -> dict:
        return {"playerId": self.id, "balance": self.balance}
