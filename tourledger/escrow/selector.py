"""Uniform random choice used when a winner or tournament is left unspecified."""

from __future__ import annotations

import os
import random
from typing import Optional, Sequence, TypeVar

from dotenv import load_dotenv

from tourledger.errors import EmptyCandidateSetError

T = TypeVar("T")


class RandomSelector:
    """Pick one candidate uniformly at random.

    Parameters
    ----------
    rng : Optional[random.Random], default: None
        Source of randomness. Inject a seeded :class:`random.Random` for
        reproducible picks; a fresh unseeded generator is used otherwise.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    @classmethod
    def seeded(cls, seed: int) -> "RandomSelector":
        return cls(random.Random(seed))

    @classmethod
    def from_env(cls) -> "RandomSelector":
        """Build a selector honouring ``TOURLEDGER_RANDOM_SEED`` when set."""

        load_dotenv()
        raw = os.getenv("TOURLEDGER_RANDOM_SEED")
        if raw is None or not raw.strip():
            return cls()
        try:
            seed = int(raw)
        except ValueError:
            raise ValueError(
                f"TOURLEDGER_RANDOM_SEED must be an integer, got {raw!r}"
            ) from None
        return cls.seeded(seed)

    def choose(self, candidates: Sequence[T], *, what: str = "candidates") -> T:
        """Return one element of ``candidates``.

        Raises
        ------
        EmptyCandidateSetError
            If ``candidates`` is empty.
        """

        if len(candidates) == 0:
            raise EmptyCandidateSetError(f"there are no {what} to choose from")
        return candidates[self._rng.randrange(len(candidates))]


__all__ = ["RandomSelector"]
