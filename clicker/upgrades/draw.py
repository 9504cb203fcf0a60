"""Weighted random selection without replacement."""
from __future__ import annotations

import random
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")


def weighted_pick(
    items: Sequence[T],
    weight_of: Callable[[T], float],
    rng: Optional[random.Random] = None,
) -> T:
    """Pick one item with probability proportional to its weight.

    Draws ``r`` in ``[0, total)`` and returns the first item whose cumulative
    weight reaches ``r``. Zero-weight items are skipped while the draw walks
    the list. If float rounding leaves nothing matched the last item wins.
    """

    if not items:
        raise ValueError("cannot pick from an empty pool")
    rng = rng or random
    weights = [max(0.0, float(weight_of(item))) for item in items]
    total = sum(weights)
    if total <= 0.0:
        return items[0]
    roll = rng.random() * total
    cumulative = 0.0
    for item, weight in zip(items, weights):
        if weight <= 0.0:
            continue
        cumulative += weight
        if roll <= cumulative:
            return item
    return items[-1]


def sample_without_replacement(
    items: Sequence[T],
    count: int,
    weight_of: Callable[[T], float],
    rng: Optional[random.Random] = None,
) -> List[T]:
    """Repeat :func:`weighted_pick`, removing each winner from the pool."""

    pool = list(items)
    picked: List[T] = []
    while pool and len(picked) < count:
        choice = weighted_pick(pool, weight_of, rng)
        picked.append(choice)
        pool = [item for item in pool if item is not choice]
    return picked


__all__ = ["weighted_pick", "sample_without_replacement"]
