"""
Round-1 seeding preview: serpentine distribution of seeds across heats.

Seeds run 1 -> N heats, then back N -> 1, so each heat gets a balanced mix
of strong and weak seeds:
  12 seeds, 3 heats of 4 -> [1, 6, 7, 12], [2, 5, 8, 11], [3, 4, 9, 10]
Unfilled capacity is padded with None (byes).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

AUTO = "auto"
MIN_PREFERRED_HEAT_SIZE = 2
MAX_PREFERRED_HEAT_SIZE = 4


@dataclass
class HeatSeedMap:
    heat_number: int
    seeds: List[Optional[int]] = field(default_factory=list)


def determine_heat_size(participant_count: int, preferred: Union[int, str] = AUTO) -> int:
    """
    Heat size for a round-1 preview.

    An explicit preference is clamped into [2, 4]. Auto: the whole field up
    to 4 entrants, 3 up to 6, otherwise 4.
    """
    if preferred != AUTO:
        return max(MIN_PREFERRED_HEAT_SIZE, min(MAX_PREFERRED_HEAT_SIZE, int(preferred)))

    if participant_count <= 4:
        return participant_count
    if participant_count <= 6:
        return 3
    return 4


def determine_heat_count(participant_count: int, heat_size: int) -> int:
    return max(1, math.ceil(participant_count / max(1, heat_size)))


def distribute_seeds_snake(
    seeds: Sequence[int],
    heat_size: int,
    heat_count: int,
    heat_sizes: Optional[Sequence[int]] = None,
) -> List[HeatSeedMap]:
    """
    Distribute *seeds* over *heat_count* heats in serpentine order.

    heat_sizes, when given for every heat, overrides heat_size per heat.
    A full heat is skipped by stepping on in the current direction.
    """
    if heat_count <= 0:
        raise ValueError("heat_count must be > 0")

    if heat_sizes is not None and len(heat_sizes) == heat_count:
        capacities = [max(0, size or 0) for size in heat_sizes]
    else:
        capacities = [heat_size] * heat_count

    heats: List[List[Optional[int]]] = [[] for _ in range(heat_count)]
    index = 0
    direction = 1

    def advance(force_step: bool = False) -> None:
        nonlocal index, direction
        if heat_count == 1:
            return
        if direction == 1:
            if index == heat_count - 1:
                direction = -1
                if force_step:
                    index = max(0, index - 1)
            else:
                index += 1
        elif index == 0:
            direction = 1
            if force_step:
                index = min(heat_count - 1, index + 1)
        else:
            index -= 1

    def ensure_capacity() -> None:
        if capacities[index] == 0:
            return
        attempts = 0
        while len(heats[index]) >= capacities[index] and attempts < heat_count:
            advance(force_step=True)
            attempts += 1

    for seed in sorted(seeds):
        ensure_capacity()
        heats[index].append(seed)
        advance()

    byes = max(0, sum(capacities) - len(seeds))
    added = 0
    for heat, capacity in zip(heats, capacities):
        while len(heat) < capacity and added < byes:
            heat.append(None)
            added += 1
    fallback = 0
    while added < byes:
        heats[fallback % heat_count].append(None)
        fallback += 1
        added += 1

    return [HeatSeedMap(heat_number=idx + 1, seeds=heat) for idx, heat in enumerate(heats)]
