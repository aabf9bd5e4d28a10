from __future__ import annotations

import random
from typing import Sequence, TypeVar

T = TypeVar("T")

_system_random = random.SystemRandom()


def sample_ids(candidates: Sequence[T], count: int, rng: random.Random | None = None) -> list[T]:
    """Draw ``min(count, len(candidates))`` distinct items uniformly at random.

    The result keeps draw order, which becomes the question order of a test.
    """

    if count < 1:
        raise ValueError("count must be a positive integer")
    pool = list(dict.fromkeys(candidates))
    return (rng or _system_random).sample(pool, min(count, len(pool)))
