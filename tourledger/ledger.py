"""Player balances: atomic credit, debit and lookup."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from .db.session import unit_of_work
from .errors import InsufficientFundsError, InvalidArgumentError, NotFoundError
from .locks import Domain, DomainLocks
from .models import MAX_POINTS, Player

logger = logging.getLogger(__name__)


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidArgumentError(f"amount must be an integer, got {amount!r}")
    if amount < 0:
        raise InvalidArgumentError("amount must be non-negative", amount=amount)
    if amount > MAX_POINTS:
        raise InvalidArgumentError("amount is too large", amount=amount)


def _check_player_id(player_id: str) -> None:
    if not player_id:
        raise InvalidArgumentError("playerId must not be empty")


class PlayerLedger:
    """Owner of every player balance.

    Public methods serialise on the players domain lock and run in their own
    unit of work. The ``*_in`` variants operate on a caller's session and
    assume the caller already holds the players lock; compound operations
    (joins and settlements) use them.

    Parameters
    ----------
    session_factory : sessionmaker
        Factory producing sessions bound to the store.
    locks : Optional[DomainLocks], default: None
        Lock set shared with the other engines. A private set is created when
        omitted, which is only correct if no other engine touches players.
    """

    def __init__(
        self, session_factory: sessionmaker, locks: Optional[DomainLocks] = None
    ) -> None:
        self._sessions = session_factory
        self._locks = locks or DomainLocks()

    # ------------------------------------------------------------------
    # Locked operations
    # ------------------------------------------------------------------

    def credit(self, player_id: str, amount: int) -> Player:
        """Add ``amount`` to ``player_id``, creating the player if needed."""

        _check_player_id(player_id)
        _check_amount(amount)
        with self._locks.hold(Domain.PLAYERS):
            with unit_of_work(self._sessions, "credit") as session:
                player = self.credit_in(session, player_id, amount)
        logger.info(f"credit: {player_id} +{amount} -> {player.balance}")
        return player

    def debit(self, player_id: str, amount: int) -> Player:
        """Subtract ``amount`` from ``player_id``.

        Raises
        ------
        NotFoundError
            If the player does not exist.
        InsufficientFundsError
            If the balance is lower than ``amount``.
        """

        _check_player_id(player_id)
        _check_amount(amount)
        with self._locks.hold(Domain.PLAYERS):
            with unit_of_work(self._sessions, "debit") as session:
                player = self.debit_in(session, player_id, amount)
        logger.info(f"debit: {player_id} -{amount} -> {player.balance}")
        return player

    def get_balance(self, player_id: str) -> int:
        """Return the committed balance of ``player_id``."""

        with self._locks.hold(Domain.PLAYERS):
            with unit_of_work(self._sessions, "balance") as session:
                return self.balance_in(session, player_id)

    # ------------------------------------------------------------------
    # Session-bound helpers (caller holds Domain.PLAYERS)
    # ------------------------------------------------------------------

    @staticmethod
    def credit_in(session: Session, player_id: str, amount: int) -> Player:
        player = Player.get(session, player_id)
        current = player.balance if player is not None else 0
        if current + amount > MAX_POINTS:
            raise InvalidArgumentError(
                f"balance of {player_id} would exceed {MAX_POINTS}",
                player_id=player_id,
                amount=amount,
            )
        if player is None:
            player = Player(id=player_id, balance=amount)
            session.add(player)
        else:
            player.balance = current + amount
        session.flush()
        return player

    @staticmethod
    def debit_in(session: Session, player_id: str, amount: int) -> Player:
        player = Player.get(session, player_id)
        if player is None:
            raise NotFoundError(f"player {player_id} not found", player_id=player_id)
        if player.balance < amount:
            logger.warning(
                f"debit: {player_id} has {player.balance}, {amount} requested"
            )
            raise InsufficientFundsError(player_id, amount, player.balance)
        player.balance = player.balance - amount
        session.flush()
        return player

    @staticmethod
    def balance_in(session: Session, player_id: str) -> int:
        player = Player.get(session, player_id)
        if player is None:
            raise NotFoundError(f"player {player_id} not found", player_id=player_id)
        return player.balance


__all__ = ["PlayerLedger"]
