"""Settlement engine: picks a winner, pays the winning group and clears escrow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from ..db.session import unit_of_work
from ..errors import EmptyCandidateSetError
from ..ledger import PlayerLedger
from ..locks import DomainLocks
from ..models import JoinRecord, Tournament
from ..registry import TournamentRegistry
from .selector import RandomSelector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of settling one tournament.

    Attributes
    ----------
    tournament_id : str
        The settled tournament.
    winner_id : str
        Leader of the winning group.
    prize : int
        ``deposit * number_of_groups``; split evenly across the acquirers.
    profit : int
        Points credited to each acquirer (``prize // len(acquirers)``).
    acquirers : tuple[str, ...]
        The winning group: the leader followed by its backers.
    forfeited : tuple[str, ...]
        Members of losing groups whose escrow was consumed.
    """

    tournament_id: str
    winner_id: str
    prize: int
    profit: int
    acquirers: tuple[str, ...]
    forfeited: tuple[str, ...] = ()

    def to_json(self) -> dict:
        return {
            "tournamentId": self.tournament_id,
            "winners": [{"playerId": self.winner_id, "prize": self.prize}],
        }


class SettlementEngine:
    """Settles tournaments exactly once under the three domain locks.

    Parameters
    ----------
    session_factory : sessionmaker
        Factory producing sessions bound to the store.
    locks : DomainLocks
        Lock set shared with :class:`~tourledger.escrow.join.JoinCoordinator`.
    selector : Optional[RandomSelector], default: None
        Source of random picks when the tournament or winner is omitted.
        Inject a seeded selector for reproducible results.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        locks: DomainLocks,
        *,
        selector: Optional[RandomSelector] = None,
        ledger: Optional[PlayerLedger] = None,
        registry: Optional[TournamentRegistry] = None,
    ) -> None:
        self._sessions = session_factory
        self._locks = locks
        self._selector = selector or RandomSelector()
        self._ledger = ledger or PlayerLedger(session_factory, locks)
        self._registry = registry or TournamentRegistry(session_factory, locks)

    def result(
        self,
        tournament_id: Optional[str] = None,
        winner_id: Optional[str] = None,
    ) -> SettlementResult:
        """Settle a tournament and distribute its prize.

        Parameters
        ----------
        tournament_id : Optional[str], default: None
            Tournament to settle. When omitted, one is chosen at random among
            tournaments where ``winner_id`` leads a group, or among all
            tournaments with at least one group if ``winner_id`` is omitted too.
        winner_id : Optional[str], default: None
            Leader of the winning group. When omitted, one of the tournament's
            leaders is chosen at random.

        Returns
        -------
        SettlementResult
            The settled tournament, its winner and the prize.

        Raises
        ------
        EmptyCandidateSetError
            If no tournament or leader qualifies for random selection, or the
            named winner has no group in the tournament.
        NotFoundError
            If ``tournament_id`` is unknown.
        ConflictError
            If the tournament is already finished.
        StoreUnavailableError
            If the store fails.

        Notes
        -----
        The prize is ``deposit`` times the number of groups rather than the
        sum of fees actually collected, so floor-division remainders left
        behind at admission are not reconciled.
        """

        if tournament_id == "":
            tournament_id = None
        if winner_id == "":
            winner_id = None

        with self._locks.hold_all():
            with unit_of_work(self._sessions, "result") as session:
                result = self._settle(session, tournament_id, winner_id)

        logger.info(
            f"result: {result.tournament_id} won by {result.winner_id}, "
            f"prize={result.prize} split {len(result.acquirers)} way(s)"
        )
        return result

    def _settle(
        self,
        session: Session,
        tournament_id: Optional[str],
        winner_id: Optional[str],
    ) -> SettlementResult:
        if tournament_id is None:
            tournament_id = self._pick_tournament(session, winner_id)

        if winner_id is None:
            winner_id = self._pick_winner(session, tournament_id)

        tournament = self._registry.require_open_in(session, tournament_id)

        acquirers = JoinRecord.group(session, tournament_id, winner_id)
        if not any(record.is_leader for record in acquirers):
            raise EmptyCandidateSetError(
                f"player {winner_id} has no group in tournament {tournament_id}",
                tournament_id=tournament_id,
                player_id=winner_id,
            )

        prize = self.prize_value(session, tournament)
        self._registry.set_winner_in(session, tournament_id, winner_id)

        profit = prize // len(acquirers)
        acquirer_ids = []
        for record in acquirers:
            player_id = record.player_id
            self._ledger.credit_in(session, player_id, profit)
            JoinRecord.remove(session, tournament_id, player_id)
            acquirer_ids.append(player_id)

        forfeited = []
        for record in JoinRecord.for_tournament(session, tournament_id):
            player_id = record.player_id
            if JoinRecord.remove(session, tournament_id, player_id):
                forfeited.append(player_id)
        session.flush()

        return SettlementResult(
            tournament_id=tournament_id,
            winner_id=winner_id,
            prize=prize,
            profit=profit,
            acquirers=tuple(acquirer_ids),
            forfeited=tuple(forfeited),
        )

    def _pick_tournament(self, session: Session, winner_id: Optional[str]) -> str:
        candidates = JoinRecord.tournaments_with_leaders(session, winner_id)
        if winner_id is not None:
            what = f"tournaments joined by {winner_id}"
        else:
            what = "joined tournaments"
        return self._selector.choose(candidates, what=what)

    def _pick_winner(self, session: Session, tournament_id: str) -> str:
        self._registry.require_open_in(session, tournament_id)
        leaders = [
            record.player_id
            for record in JoinRecord.leader_entries(session, tournament_id)
        ]
        return self._selector.choose(
            leaders, what=f"joined players in tournament {tournament_id}"
        )

    @staticmethod
    def prize_value(session: Session, tournament: Tournament) -> int:
        """``deposit`` multiplied by the number of groups in ``tournament``."""

        groups = JoinRecord.count_leader_entries(session, tournament.id)
        return tournament.deposit * groups


__all__ = ["SettlementEngine", "SettlementResult"]
