"""Keyed deterministic random source.

Every draw is a pure function of ``(seed, label)``: the same pair always
yields the same value, and distinct labels behave as independent streams.
Nothing here holds state, so callers can run generators in parallel and
cache their output freely.
"""

from __future__ import annotations

import math
from hashlib import md5
from typing import Iterable, List, Sequence, Tuple, TypeVar

T = TypeVar("T")

MAX_SEED = 2_147_483_647


def stable_hash(text: str) -> str:
    """Fixed-length hex digest used for seed derivation only."""
    return md5(text.encode("utf-8")).hexdigest()


def rng01(seed: int, label: str) -> float:
    """Float in [0, 1)."""
    head = stable_hash(f"{seed}:{label or ''}")[:16]
    return (int(head, 16) % 1_000_000_000) / 1_000_000_000


def rng_int(seed: int, label: str, lo: int, hi: int) -> int:
    """Integer in [lo, hi], bounds inclusive."""
    a, b = min(lo, hi), max(lo, hi)
    span = (b - a) + 1
    if span <= 1:
        return a
    return a + math.floor(rng01(seed, label) * span)


def rng_pick(seed: int, label: str, pool: Sequence[T]) -> T:
    if not pool:
        raise ValueError("rng_pick: empty pool")
    return pool[rng_int(seed, label, 0, len(pool) - 1)]


def weighted_pick(seed: int, label: str, items: Sequence[Tuple[T, float]]) -> T:
    """Pick one item from ``(item, weight)`` pairs.

    Items with zero or negative weight are never chosen, unless every
    weight is zero, in which case the first item wins.
    """
    if not items:
        raise ValueError("weighted_pick: empty pool")
    total = sum(max(0.0, weight) for _, weight in items)
    if total <= 0:
        return items[0][0]
    roll = rng01(seed, label) * total
    acc = 0.0
    last = items[0][0]
    for item, weight in items:
        if weight <= 0:
            continue
        acc += weight
        last = item
        if roll < acc:
            return item
    return last


def pick_unique(seed: int, label: str, pool: Sequence[str], count: int) -> List[str]:
    """Pick ``count`` distinct entries from ``pool``.

    Draws are retried up to six times the pool size; any slots still empty
    after that are filled from the pool in order. The count is clamped to
    the pool size, so asking for more than exists never raises.
    """
    wanted = max(0, min(count, len(pool)))
    picked: List[str] = []
    seen = set()
    cursor = 0
    while len(picked) < wanted and cursor < len(pool) * 6:
        value = rng_pick(seed, f"{label}:{cursor}", pool)
        key = value.lower()
        if key not in seen:
            seen.add(key)
            picked.append(value)
        cursor += 1

    if len(picked) < wanted:
        for value in pool:
            if len(picked) >= wanted:
                break
            key = value.lower()
            if key in seen:
                continue
            seen.add(key)
            picked.append(value)
    return picked


def clamp01(value: float) -> float:
    # NaN fails both comparisons and lands on 0.
    if value >= 1.0:
        return 1.0
    if value > 0.0:
        return float(value)
    return 0.0


def clamp_int(value: float, lo: int, hi: int) -> int:
    floored = math.floor(value) if math.isfinite(value) else lo
    return max(lo, min(hi, int(floored)))


def clamp_signed(value: float) -> float:
    return max(-1.0, min(1.0, value))


def round_half_up(value: float) -> int:
    # Halves round toward +inf, so -0.5 becomes 0.
    return math.floor(value + 0.5)


def mean(values: Iterable[float], default: float = 0.0) -> float:
    items = list(values)
    if not items:
        return default
    return sum(items) / len(items)
