"""
Bracket Rules: fixed vocabulary for heat draws (Single Source of Truth)

Lane colors, placeholder label prefixes, heat id slugs and the chunking /
advancement helpers shared by the bracket generator and the structure
estimator. Do NOT duplicate these rules elsewhere: the label text and color
names are read verbatim by existing consumers.
"""

import re
from typing import List, Sequence, Tuple, TypeVar

T = TypeVar("T")

# =============================================================================
# Lane Colors
# =============================================================================

# Physical lane markers, in lane order. Heats wider than this leave the
# trailing lanes without a color.
BASE_COLORS: Tuple[str, ...] = ("RED", "WHITE", "YELLOW", "BLUE", "GREEN", "BLACK")

MAX_COLORED_LANES = len(BASE_COLORS)


def color_set(heat_size: int) -> Tuple[str, ...]:
    """
    Return the lane colors for a heat with *heat_size* slots.

    Always at least one color, at most six:
      color_set(2) -> ("RED", "WHITE")
      color_set(8) -> all six base colors
    """
    return BASE_COLORS[: max(1, min(heat_size, MAX_COLORED_LANES))]


# =============================================================================
# Placeholder Labels
# =============================================================================

WINNER_PREFIX = "Vainqueur"
QUALIFIER_PREFIX = "Qualifié"
REPECHAGE_PREFIX = "Repêchage"


def placeholder_label(prefix: str, round_number: int, heat_number: int, position: int) -> str:
    """Label for a slot filled later by a result, e.g. ``Qualifié R1-H2 P1``."""
    return f"{prefix} R{round_number}-H{heat_number} P{position}"


# =============================================================================
# Heat Ids
# =============================================================================

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^a-z0-9_]")


def normalize_slug(value: str) -> str:
    """Lowercase, collapse whitespace to underscores, drop anything else."""
    value = _WHITESPACE.sub("_", (value or "").lower().strip())
    return _NON_SLUG.sub("", value)


def make_heat_id(event_name: str, division: str, round_number: int, heat_number: int) -> str:
    """Deterministic heat id: ``{event}_{division}_R{round}_H{heat}``."""
    return f"{normalize_slug(event_name)}_{normalize_slug(division)}_R{round_number}_H{heat_number}"


# =============================================================================
# Chunking / Advancement
# =============================================================================

def chunk_slots(items: Sequence[T], heat_size: int) -> List[List[T]]:
    """
    Split *items* into consecutive heats of *heat_size*.

    The last heat keeps whatever is left over; heats are never padded.
    """
    if heat_size < 1:
        raise ValueError(f"heat_size must be >= 1, got {heat_size}")
    return [list(items[i:i + heat_size]) for i in range(0, len(items), heat_size)]


def advancing_count(slots_in_heat: int) -> int:
    """Top positions that qualify from an elimination heat: max(1, n // 2)."""
    return max(1, slots_in_heat // 2)
