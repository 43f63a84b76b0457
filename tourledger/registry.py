"""Tournament identity, entry deposit and open/finished status."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from .db.session import unit_of_work
from .errors import ConflictError, InvalidArgumentError, NotFoundError
from .locks import Domain, DomainLocks
from .models import MAX_POINTS, Tournament, TournamentStatus

logger = logging.getLogger(__name__)


class TournamentRegistry:
    """Announces tournaments and records their winner exactly once.

    As with :class:`~tourledger.ledger.PlayerLedger`, the ``*_in`` helpers
    work inside a caller's session and expect the tournaments lock to be held.
    """

    def __init__(
        self, session_factory: sessionmaker, locks: Optional[DomainLocks] = None
    ) -> None:
        self._sessions = session_factory
        self._locks = locks or DomainLocks()

    def announce(self, tournament_id: str, deposit: int) -> Tournament:
        """Create an open tournament with entry ``deposit``.

        Raises
        ------
        InvalidArgumentError
            If ``tournament_id`` is empty or ``deposit`` is negative or too
            large for the store.
        ConflictError
            If ``tournament_id`` was already announced.
        """

        if not tournament_id:
            raise InvalidArgumentError("tournamentId must not be empty")
        if isinstance(deposit, bool) or not isinstance(deposit, int):
            raise InvalidArgumentError(f"deposit must be an integer, got {deposit!r}")

        # The joins lock is taken too so an announce never interleaves with a
        # join or settlement reading the same tournament id.
        with self._locks.hold(Domain.JOINS, Domain.TOURNAMENTS):
            with unit_of_work(self._sessions, "announce") as session:
                if Tournament.get(session, tournament_id) is not None:
                    logger.warning(f"announce: {tournament_id} already exists")
                    raise ConflictError(
                        f"tournament {tournament_id} already exists",
                        tournament_id=tournament_id,
                    )
                if deposit < 0:
                    raise InvalidArgumentError(
                        "deposit must be non-negative", deposit=deposit
                    )
                if deposit > MAX_POINTS:
                    raise InvalidArgumentError("deposit is too large", deposit=deposit)
                tournament = Tournament(id=tournament_id, deposit=deposit)
                session.add(tournament)
                session.flush()

        logger.info(f"announce: {tournament_id} deposit={deposit}")
        return tournament

    def get_status(self, tournament_id: str) -> TournamentStatus:
        with self._locks.hold(Domain.TOURNAMENTS):
            with unit_of_work(self._sessions, "status") as session:
                return self.require_in(session, tournament_id).status

    def set_winner(self, tournament_id: str, player_id: str) -> Tournament:
        """Record ``player_id`` as winner, finishing the tournament."""

        with self._locks.hold(Domain.TOURNAMENTS):
            with unit_of_work(self._sessions, "set_winner") as session:
                return self.set_winner_in(session, tournament_id, player_id)

    # ------------------------------------------------------------------
    # Session-bound helpers (caller holds Domain.TOURNAMENTS)
    # ------------------------------------------------------------------

    @staticmethod
    def require_in(session: Session, tournament_id: str) -> Tournament:
        tournament = Tournament.get(session, tournament_id)
        if tournament is None:
            raise NotFoundError(
                f"tournament {tournament_id} not found", tournament_id=tournament_id
            )
        return tournament

    @classmethod
    def require_open_in(cls, session: Session, tournament_id: str) -> Tournament:
        tournament = cls.require_in(session, tournament_id)
        if not tournament.is_open:
            raise ConflictError(
                f"tournament {tournament_id} already finished",
                tournament_id=tournament_id,
            )
        return tournament

    @staticmethod
    def set_winner_in(session: Session, tournament_id: str, player_id: str) -> Tournament:
        tournament = Tournament.get(session, tournament_id)
        if tournament is None or not tournament.is_open:
            raise ConflictError(
                f"tournament {tournament_id} is unknown or already finished",
                tournament_id=tournament_id,
            )
        tournament.mark_finished(player_id)
        session.flush()
        return tournament


__all__ = ["TournamentRegistry"]
