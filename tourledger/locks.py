"""Domain locks serialising read-modify-write cycles on shared ledger state.

State lives in three logical domains (players, joins, tournaments), each
guarded by its own :class:`threading.Lock`. Any code path that reads a value,
decides on it, and writes back MUST hold the lock of every domain it touches
until the store transaction has committed.

Compound operations always acquire in the fixed order
``players -> joins -> tournaments`` regardless of the order the caller names
them, so two compound operations can never deadlock each other.

Usage::

    with locks.hold(Domain.PLAYERS, Domain.JOINS, Domain.TOURNAMENTS):
        ...  # check, then commit
"""

from __future__ import annotations

import enum
import threading
from contextlib import ExitStack, contextmanager
from typing import Iterator


class Domain(enum.IntEnum):
    # Values define the global acquisition order.
    PLAYERS = 1
    JOINS = 2
    TOURNAMENTS = 3


ALL_DOMAINS = (Domain.PLAYERS, Domain.JOINS, Domain.TOURNAMENTS)


class DomainLocks:
    """One mutex per domain, acquired in global order."""

    def __init__(self) -> None:
        self._locks = {domain: threading.Lock() for domain in Domain}

    def lock_for(self, domain: Domain) -> threading.Lock:
        return self._locks[domain]

    @contextmanager
    def hold(self, *domains: Domain) -> Iterator[None]:
        """Hold the locks for ``domains`` for the duration of the block."""

        ordered = sorted(set(domains))
        with ExitStack() as stack:
            for domain in ordered:
                stack.enter_context(self._locks[domain])
            yield

    def hold_all(self):
        return self.hold(*ALL_DOMAINS)


__all__ = ["ALL_DOMAINS", "Domain", "DomainLocks"]
