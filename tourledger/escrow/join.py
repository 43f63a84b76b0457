"""Admission of a fee-paying group (leader plus optional backers) into a tournament."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy.orm import Session, sessionmaker

from ..db.session import unit_of_work
from ..errors import (
    ConflictError,
    InsufficientFundsError,
    InvalidArgumentError,
)
from ..ledger import PlayerLedger
from ..locks import DomainLocks
from ..models import BackerEntry, Entry, JoinRecord, LeaderEntry
from ..registry import TournamentRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinOutcome:
    """Value object describing an admitted group.

    Attributes
    ----------
    tournament_id : str
        Tournament the group joined.
    fee : int
        Points debited from every member (``deposit // len(entries)``).
    entries : tuple[Entry, ...]
        The leader entry first, then one backer entry per backer, in the
        order supplied by the caller.
    """

    tournament_id: str
    fee: int
    entries: tuple[Entry, ...]

    @property
    def leader_id(self) -> str:
        return self.entries[0].player_id

    @property
    def partners(self) -> list[str]:
        return [entry.player_id for entry in self.entries]

    def to_json(self) -> dict:
        return {
            "tournamentId": self.tournament_id,
            "leaderId": self.leader_id,
            "fee": self.fee,
            "partners": self.partners,
        }


def resolve_partners(leader_id: str, backer_ids: Sequence[str]) -> list[Entry]:
    """Return the group's entries: the leader first, then each backer in order.

    Raises
    ------
    InvalidArgumentError
        If an id is empty or a player appears twice in the group.
    """

    if not leader_id:
        raise InvalidArgumentError("playerId must not be empty")

    entries: list[Entry] = [LeaderEntry(leader_id)]
    seen = {leader_id}
    for backer_id in backer_ids:
        if not backer_id:
            raise InvalidArgumentError("backerId must not be empty")
        if backer_id in seen:
            raise InvalidArgumentError(
                f"player {backer_id} listed twice in the same group",
                player_id=backer_id,
            )
        seen.add(backer_id)
        entries.append(BackerEntry(backer_id, leader_id))
    return entries


class JoinCoordinator:
    """Debits every member of a join group atomically, or nobody.

    Atomicity comes from a two-phase protocol run entirely under the
    players, joins and tournaments locks:

    1. *Check* every member's balance against the fee without mutating.
    2. *Commit* the debit and the :class:`JoinRecord` for each member.

    Because nothing else can touch balances between the two phases, the
    commit phase cannot fail on funds; only the store can interrupt it.
    Persistence failures are all-or-nothing because both phases share one
    store transaction, not because of the check phase.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        locks: DomainLocks,
        *,
        ledger: Optional[PlayerLedger] = None,
        registry: Optional[TournamentRegistry] = None,
    ) -> None:
        self._sessions = session_factory
        self._locks = locks
        self._ledger = ledger or PlayerLedger(session_factory, locks)
        self._registry = registry or TournamentRegistry(session_factory, locks)

    def join(
        self,
        tournament_id: str,
        leader_id: str,
        backer_ids: Sequence[str] = (),
    ) -> JoinOutcome:
        """Admit ``leader_id`` (and ``backer_ids``) into ``tournament_id``.

        Parameters
        ----------
        tournament_id : str
            Open tournament to join.
        leader_id : str
            Fee-paying leader of the group.
        backer_ids : Sequence[str], default: ()
            Players sharing the fee and any prize, in order.

        Returns
        -------
        JoinOutcome
            The admitted group and the per-member fee.

        Raises
        ------
        InvalidArgumentError
            On empty ids or a member listed twice.
        NotFoundError
            If the tournament or any member does not exist.
        ConflictError
            If the tournament is finished or ``leader_id`` already leads a
            group in it.
        InsufficientFundsError
            If any member cannot cover the fee. No balance changes.
        StoreUnavailableError
            If the store fails.
        """

        if not tournament_id:
            raise InvalidArgumentError("tournamentId must not be empty")
        entries = resolve_partners(leader_id, backer_ids)

        with self._locks.hold_all():
            with unit_of_work(self._sessions, "join") as session:
                tournament = self._registry.require_open_in(session, tournament_id)

                if JoinRecord.find_leader_entry(session, tournament_id, leader_id):
                    logger.warning(f"join: {leader_id} already joined {tournament_id}")
                    raise ConflictError(
                        f"player {leader_id} already joined tournament {tournament_id}",
                        tournament_id=tournament_id,
                        player_id=leader_id,
                    )

                fee = tournament.deposit // len(entries)
                self._check_funds(session, entries, fee)
                self._commit(session, tournament_id, entries, fee)

        outcome = JoinOutcome(tournament_id=tournament_id, fee=fee, entries=tuple(entries))
        logger.info(
            f"join: {leader_id} joined {tournament_id} with "
            f"{len(entries) - 1} backer(s), fee={fee}"
        )
        return outcome

    def _check_funds(self, session: Session, entries: Sequence[Entry], fee: int) -> None:
        for entry in entries:
            balance = self._ledger.balance_in(session, entry.player_id)
            if balance < fee:
                logger.warning(
                    f"join: {entry.player_id} has {balance}, fee is {fee}"
                )
                raise InsufficientFundsError(entry.player_id, fee, balance)

    def _commit(
        self,
        session: Session,
        tournament_id: str,
        entries: Sequence[Entry],
        fee: int,
    ) -> None:
        for entry in entries:
            self._ledger.debit_in(session, entry.player_id, fee)
            session.add(JoinRecord.for_entry(tournament_id, entry, fee))
        session.flush()


__all__ = ["JoinCoordinator", "JoinOutcome", "resolve_partners"]
