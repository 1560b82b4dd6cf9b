"""
Structure Estimator: bracket shape without slots.

Advisory sizing for previews before a draw is run: round count and heats per
round under a simplified model where every heat sends exactly two qualifiers
onwards. Never raises; unusable input returns FALLBACK_STRUCTURE.
"""

import math
from dataclasses import dataclass, field
from typing import List, Literal, Optional

TournamentMode = Literal["elimination", "repechage"]

QUALIFIERS_PER_HEAT = 2
FALLBACK_HEAT_SIZE = 4


@dataclass
class TournamentStructure:
    total_rounds: int
    total_heats: int
    heats_per_round: List[int] = field(default_factory=list)
    heat_size: int = FALLBACK_HEAT_SIZE


@dataclass
class HeatInfo:
    round_name: str
    heat_name: str
    is_last_heat: bool
    is_last_round: bool
    next_round: Optional[int] = None
    next_heat: Optional[int] = None


def _fallback() -> TournamentStructure:
    return TournamentStructure(total_rounds=1, total_heats=1, heats_per_round=[1], heat_size=FALLBACK_HEAT_SIZE)


def _structure(rounds: List[int], heat_size: int) -> TournamentStructure:
    return TournamentStructure(
        total_rounds=len(rounds),
        total_heats=sum(rounds),
        heats_per_round=rounds,
        heat_size=heat_size,
    )


def estimate(total_competitors: int, heat_size: int, mode: TournamentMode = "elimination") -> TournamentStructure:
    """Estimate rounds and heats per round for *total_competitors* in heats of *heat_size*."""
    if total_competitors <= 0 or heat_size <= 0:
        return _fallback()

    if mode == "repechage":
        return _estimate_repechage(total_competitors, heat_size)
    return _estimate_elimination(total_competitors, heat_size)


def _estimate_elimination(total_competitors: int, heat_size: int) -> TournamentStructure:
    rounds: List[int] = []

    round_one = math.ceil(total_competitors / heat_size)
    rounds.append(round_one)
    qualifiers = round_one * QUALIFIERS_PER_HEAT

    while qualifiers > heat_size:
        heats = math.ceil(qualifiers / heat_size)
        rounds.append(heats)
        next_qualifiers = heats * QUALIFIERS_PER_HEAT
        if next_qualifiers >= qualifiers:
            # heat_size <= 2 never shrinks the pool
            qualifiers = heats
            break
        qualifiers = next_qualifiers

    if qualifiers > 1:
        rounds.append(1)

    return _structure(rounds, heat_size)


def _estimate_repechage(total_competitors: int, heat_size: int) -> TournamentStructure:
    rounds: List[int] = []

    round_one = math.ceil(total_competitors / heat_size)
    rounds.append(round_one)

    # everyone but the top two of each main heat gets a second chance
    repechage_entrants = round_one * max(0, heat_size - QUALIFIERS_PER_HEAT)
    round_two = 0
    if repechage_entrants > 0:
        round_two = math.ceil(repechage_entrants / heat_size)
        rounds.append(round_two)

    total_qualified = round_one * QUALIFIERS_PER_HEAT + round_two * QUALIFIERS_PER_HEAT
    if total_qualified > heat_size:
        rounds.append(math.ceil(total_qualified / heat_size))

    rounds.append(1)

    return _structure(rounds, heat_size)


def describe_heat(round_number: int, heat_number: int, structure: TournamentStructure) -> HeatInfo:
    """
    Human-facing name and navigation for one heat of an estimated structure.

    Round names (only when there is more than one round): FINALE for the last
    round, DEMI-FINALE for the one before, REPÊCHAGE for round 2 when there
    are more than two rounds. Otherwise "Round {n}".
    """
    total_rounds = structure.total_rounds
    is_last_round = round_number == total_rounds
    if 1 <= round_number <= len(structure.heats_per_round):
        heats_in_round = structure.heats_per_round[round_number - 1] or 1
    else:
        heats_in_round = 1
    is_last_heat = heat_number >= heats_in_round

    round_name = f"Round {round_number}"
    if total_rounds > 1:
        if round_number == total_rounds:
            round_name = "FINALE"
        elif round_number == total_rounds - 1:
            round_name = "DEMI-FINALE"
        elif round_number == 2 and len(structure.heats_per_round) > 2:
            round_name = "REPÊCHAGE"

    if is_last_round and is_last_heat:
        next_round, next_heat = None, None
    elif is_last_heat:
        next_round, next_heat = round_number + 1, 1
    else:
        next_round, next_heat = round_number, heat_number + 1

    return HeatInfo(
        round_name=round_name,
        heat_name=f"Heat {heat_number}",
        is_last_heat=is_last_heat,
        is_last_round=is_last_round,
        next_round=next_round,
        next_heat=next_heat,
    )
