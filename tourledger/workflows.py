"""Facade wiring the ledger, registry and escrow engines to one store and lock set."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import delete
from sqlalchemy.orm import Session, sessionmaker

from .db.engine import get_sessionmaker, make_engine
from .db.session import unit_of_work
from .escrow import (
    JoinCoordinator,
    JoinOutcome,
    RandomSelector,
    SettlementEngine,
    SettlementResult,
)
from .ledger import PlayerLedger
from .locks import DomainLocks
from .models import Base, JoinRecord, Player, Tournament, TournamentStatus
from .registry import TournamentRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerSnapshot:
    """Point-in-time totals used to audit conservation of points.

    Attributes
    ----------
    total_balance : int
        Sum of every player's balance.
    escrow : int
        Sum of contributions held against open tournaments.
    """

    total_balance: int
    escrow: int

    @property
    def total(self) -> int:
        return self.total_balance + self.escrow


def clear_store(session: Session) -> None:
    """Delete every join row, tournament and player.

    Join rows go first so the foreign keys never dangle mid-statement.
    """

    session.execute(delete(JoinRecord))
    session.execute(delete(Tournament))
    session.execute(delete(Player))
    session.flush()


class TourLedger:
    """Entry point wiring the ledger, registry and escrow engines together.

    All engines share one :class:`DomainLocks` instance and one session
    factory, which is what makes their lock ordering meaningful. One
    instance should live for the lifetime of the process.

    Parameters
    ----------
    session_factory : sessionmaker
        Factory producing sessions bound to the store.
    selector : Optional[RandomSelector], default: None
        Random source for settlements that omit the tournament or winner.
        Defaults to :meth:`RandomSelector.from_env`.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        selector: Optional[RandomSelector] = None,
    ) -> None:
        self.sessions = session_factory
        self.locks = DomainLocks()
        self.ledger = PlayerLedger(session_factory, self.locks)
        self.registry = TournamentRegistry(session_factory, self.locks)
        self.joins = JoinCoordinator(
            session_factory, self.locks, ledger=self.ledger, registry=self.registry
        )
        self.settlement = SettlementEngine(
            session_factory,
            self.locks,
            selector=selector or RandomSelector.from_env(),
            ledger=self.ledger,
            registry=self.registry,
        )

    @classmethod
    def from_url(
        cls,
        database_url: Optional[str] = None,
        *,
        create_schema: bool = True,
        selector: Optional[RandomSelector] = None,
    ) -> "TourLedger":
        """Build a ledger bound to ``database_url`` (``DB_URL`` by default).

        ``create_schema`` issues ``CREATE TABLE IF NOT EXISTS`` for every
        model; turn it off when the schema is managed by Alembic.
        """

        engine = make_engine(database_url)
        if create_schema:
            Base.metadata.create_all(engine)
        return cls(get_sessionmaker(engine), selector=selector)

    # -- players -------------------------------------------------------

    def fund(self, player_id: str, points: int) -> Player:
        """Credit ``points`` to ``player_id``, creating the player if new."""

        return self.ledger.credit(player_id, points)

    def take(self, player_id: str, points: int) -> Player:
        """Withdraw ``points`` from an existing player."""

        return self.ledger.debit(player_id, points)

    def balance(self, player_id: str) -> int:
        """Committed balance of ``player_id``."""

        return self.ledger.get_balance(player_id)

    # -- tournaments ---------------------------------------------------

    def announce(self, tournament_id: str, deposit: int) -> Tournament:
        return self.registry.announce(tournament_id, deposit)

    def status(self, tournament_id: str) -> TournamentStatus:
        """Whether ``tournament_id`` is open or finished."""

        return self.registry.get_status(tournament_id)

    def join(
        self,
        tournament_id: str,
        leader_id: str,
        backer_ids: Sequence[str] = (),
    ) -> JoinOutcome:
        return self.joins.join(tournament_id, leader_id, backer_ids)

    def result(
        self,
        tournament_id: Optional[str] = None,
        winner_id: Optional[str] = None,
    ) -> SettlementResult:
        return self.settlement.result(tournament_id, winner_id)

    # -- administration ------------------------------------------------

    def reset(self) -> None:
        """Clear players, joins and tournaments."""

        with self.locks.hold_all():
            with unit_of_work(self.sessions, "reset") as session:
                clear_store(session)
        logger.info("reset: all domains cleared")

    def snapshot(self) -> LedgerSnapshot:
        """Return balance and escrow totals read under every domain lock."""

        with self.locks.hold_all():
            with unit_of_work(self.sessions, "snapshot") as session:
                return LedgerSnapshot(
                    total_balance=Player.total_balance(session),
                    escrow=JoinRecord.escrow_total(session),
                )


__all__ = ["LedgerSnapshot", "TourLedger", "clear_store"]
