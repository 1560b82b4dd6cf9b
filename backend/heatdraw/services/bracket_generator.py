"""
Bracket Generator: single source of truth for heat draws.

Turns a seeded competitor list and a heat-size / repechage configuration into
every heat of every round, as flat rows ready for storage:

1. Admission: event/division/heat size checks and seed continuity (1..N)
2. Strategy selection from a priority-ordered rule table
3. Planning: one builder per strategy produces PlannedHeats
4. Row conversion: HeatRow / HeatEntryRow / HeatSlotMappingRow with lane colors

Pure and deterministic: no I/O, no shared state. Same input, same rows.
Label and color vocabulary is imported from bracket_rules.py.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Literal, Optional, Sequence, Tuple, Union
import logging

from heatdraw.services.bracket_rules import (
    QUALIFIER_PREFIX,
    REPECHAGE_PREFIX,
    WINNER_PREFIX,
    advancing_count,
    chunk_slots,
    color_set,
    make_heat_id,
    placeholder_label,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

HEAT_STATUS_WAITING = "waiting"

# Strategy families, in the order they are tried (see STRATEGY_RULES)
BracketStrategy = Literal[
    "REPECHAGE",
    "MAN_ON_MAN",
    "SIX_PERSON",
    "EIGHT_PERSON",
    "GENERIC_ELIMINATION",
]


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------

class BracketGenerationError(Exception):
    """Raised when a heat draw cannot be generated"""

    pass


class ConfigurationError(BracketGenerationError):
    """Raised when event, division, competitors or heat size are unusable"""

    pass


class SeedContinuityError(BracketGenerationError):
    """Raised when seeds do not form the contiguous range 1..N"""

    def __init__(self, missing_seed: int):
        self.missing_seed = missing_seed
        super().__init__(f"Missing participant for seed {missing_seed}")


# -----------------------------------------------------------------------------
# Data Models
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Competitor:
    """One seeded entrant. competitor_id is the external participant id, if any."""
    seed: int
    name: str
    competitor_id: Optional[int] = None


@dataclass
class RepechageConfig:
    enabled: bool = False
    adv_main_per_heat: int = 2   # main heat positions going straight to the final
    to_rep_per_heat: int = 2     # next positions dropping into the repechage pool
    adv_rep_per_heat: int = 2    # repechage heat positions reaching the final


@dataclass
class GenerationConfig:
    """Canonical input for a heat draw."""
    event_name: str
    division: str
    heat_size: int
    event_id: int = 0
    repechage: Optional[RepechageConfig] = None


@dataclass(frozen=True)
class Resolved:
    """Slot held by a known competitor."""
    competitor: Competitor


@dataclass(frozen=True)
class Pending:
    """Slot filled later by the finisher at (source_round, source_heat, source_position)."""
    source_round: int
    source_heat: int
    source_position: int
    label: str


# A slot is exactly one of the two; position is its 1-based index in the heat.
SlotDescriptor = Union[Resolved, Pending]


@dataclass
class PlannedHeat:
    round: int
    heat_number: int
    slots: List[SlotDescriptor] = field(default_factory=list)


@dataclass(frozen=True)
class HeatRow:
    id: str
    event_id: int
    competition: str
    division: str
    round: int
    heat_number: int
    heat_size: int
    status: str
    color_order: Tuple[str, ...]

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "competition": self.competition,
            "division": self.division,
            "round": self.round,
            "heat_number": self.heat_number,
            "heat_size": self.heat_size,
            "status": self.status,
            "color_order": list(self.color_order),
        }


@dataclass(frozen=True)
class HeatEntryRow:
    heat_id: str
    competitor_id: Optional[int]
    position: int
    seed: Optional[int]
    color: Optional[str]

    def as_dict(self) -> dict:
        return {
            "heat_id": self.heat_id,
            "competitor_id": self.competitor_id,
            "position": self.position,
            "seed": self.seed,
            "color": self.color,
        }


@dataclass(frozen=True)
class HeatSlotMappingRow:
    heat_id: str
    position: int
    placeholder: Optional[str]
    source_round: Optional[int]
    source_heat: Optional[int]
    source_position: Optional[int]

    def as_dict(self) -> dict:
        return {
            "heat_id": self.heat_id,
            "position": self.position,
            "placeholder": self.placeholder,
            "source_round": self.source_round,
            "source_heat": self.source_heat,
            "source_position": self.source_position,
        }


@dataclass
class GeneratedDraw:
    """Output of generate(). heats/entries/slot_mappings are the storage rows."""
    strategy: BracketStrategy
    event_id: int
    division: str
    planned_heats: List[PlannedHeat]
    heats: List[HeatRow]
    entries: List[HeatEntryRow]
    slot_mappings: List[HeatSlotMappingRow]

    @property
    def total_rounds(self) -> int:
        return max((h.round for h in self.heats), default=0)

    def as_dict(self) -> dict:
        return {
            "strategy": self.strategy,
            "heats": [h.as_dict() for h in self.heats],
            "entries": [e.as_dict() for e in self.entries],
            "slot_mappings": [m.as_dict() for m in self.slot_mappings],
        }


# -----------------------------------------------------------------------------
# Admission
# -----------------------------------------------------------------------------

def validate_config(competitors: Sequence[Competitor], config: GenerationConfig) -> None:
    """Raise ConfigurationError for the first unusable input."""
    if not (config.event_name or "").strip() or not (config.division or "").strip():
        raise ConfigurationError("event_name and division are required")
    if not competitors:
        raise ConfigurationError("At least one competitor is required to generate heats")
    if config.heat_size is None or config.heat_size < 1:
        raise ConfigurationError(f"heat_size must be >= 1, got {config.heat_size}")

    rep = config.repechage
    if rep is not None and rep.enabled:
        for name in ("adv_main_per_heat", "to_rep_per_heat", "adv_rep_per_heat"):
            if getattr(rep, name) < 0:
                raise ConfigurationError(f"repechage.{name} cannot be negative")


def ensure_seed_continuity(competitors: Sequence[Competitor]) -> List[Competitor]:
    """
    Return competitors ordered by seed.

    Seeds must be exactly 1..N. The smallest absent seed is reported, which
    also catches duplicates and out-of-range seeds.
    """
    seeds = {c.seed for c in competitors}
    for expected in range(1, len(competitors) + 1):
        if expected not in seeds:
            raise SeedContinuityError(expected)
    return sorted(competitors, key=lambda c: c.seed)


# -----------------------------------------------------------------------------
# Planning helpers
# -----------------------------------------------------------------------------

def _resolved_heat(round_number: int, heat_number: int, competitors: Sequence[Competitor]) -> PlannedHeat:
    return PlannedHeat(round_number, heat_number, [Resolved(c) for c in competitors])


def _advance(heat: PlannedHeat, first: int, last: int, prefix: str) -> List[Pending]:
    """Pending slots for positions first..last of *heat* (clipped to its size)."""
    return [
        Pending(
            source_round=heat.round,
            source_heat=heat.heat_number,
            source_position=pos,
            label=placeholder_label(prefix, heat.round, heat.heat_number, pos),
        )
        for pos in range(first, min(last, len(heat.slots)) + 1)
    ]


def _elimination_qualifiers(heats: Sequence[PlannedHeat]) -> List[Pending]:
    qualifiers: List[Pending] = []
    for heat in heats:
        qualifiers.extend(_advance(heat, 1, advancing_count(len(heat.slots)), QUALIFIER_PREFIX))
    return qualifiers


# -----------------------------------------------------------------------------
# Strategy builders
# -----------------------------------------------------------------------------

def build_man_on_man(competitors: Sequence[Competitor], config: GenerationConfig) -> List[PlannedHeat]:
    """
    Head-to-head draw: adjacent seeds paired in round 1.

    - 8+ competitors: semifinals pair adjacent round-1 winners, then a final
      of all semifinal winners
    - 6 competitors: final of the three round-1 winners
    - 4, 5 or 7 competitors: final of the winners of heats 1 and 2

    An odd competitor count leaves the last seed alone in a round-1 heat, and
    winners of heats outside the wiring above do not advance. Both are logged.
    """
    total = len(competitors)
    round_one = [
        _resolved_heat(1, idx + 1, pair)
        for idx, pair in enumerate(chunk_slots(competitors, 2))
    ]
    if not round_one:
        return []

    plan: List[PlannedHeat] = list(round_one)

    if total >= 8:
        semifinals: List[PlannedHeat] = []
        for i in range(0, len(round_one) - 1, 2):
            slots = _advance(round_one[i], 1, 1, WINNER_PREFIX) + _advance(round_one[i + 1], 1, 1, WINNER_PREFIX)
            semifinals.append(PlannedHeat(2, len(semifinals) + 1, slots))
        plan.extend(semifinals)

        final_slots: List[SlotDescriptor] = []
        for semi in semifinals:
            final_slots.extend(_advance(semi, 1, 1, WINNER_PREFIX))
        if final_slots:
            plan.append(PlannedHeat(3, 1, final_slots))
    elif total == 6:
        final_slots = []
        for heat in round_one[:3]:
            final_slots.extend(_advance(heat, 1, 1, WINNER_PREFIX))
        plan.append(PlannedHeat(2, 1, final_slots))
    elif total >= 4:
        plan.append(PlannedHeat(
            2, 1, _advance(round_one[0], 1, 1, WINNER_PREFIX) + _advance(round_one[1], 1, 1, WINNER_PREFIX)
        ))

    if total % 2 == 1:
        logger.warning(f"Man-on-man draw: seed {competitors[-1].seed} has no opponent in round 1")
    if len(plan) > len(round_one):
        fed = {
            slot.source_heat
            for heat in plan[len(round_one):]
            for slot in heat.slots
            if isinstance(slot, Pending) and slot.source_round == 1
        }
        stranded = [h.heat_number for h in round_one if h.heat_number not in fed]
        if stranded:
            logger.warning(f"Man-on-man draw: winners of round 1 heats {stranded} do not advance")

    return plan


def build_six_person(competitors: Sequence[Competitor], config: GenerationConfig) -> List[PlannedHeat]:
    """Six entrants: one heat of six, or two heats of three into a final of four."""
    if config.heat_size == 6:
        return [_resolved_heat(1, 1, competitors)]

    heats = [
        _resolved_heat(1, idx + 1, trio)
        for idx, trio in enumerate(chunk_slots(competitors[:6], 3))
    ]
    final_slots: List[SlotDescriptor] = []
    for heat in heats:
        final_slots.extend(_advance(heat, 1, 2, QUALIFIER_PREFIX))
    return heats + [PlannedHeat(2, 1, final_slots)]


def build_eight_person(competitors: Sequence[Competitor], config: GenerationConfig) -> List[PlannedHeat]:
    """Eight entrants: two heats of four, top two of each into a final of four."""
    heats = [
        _resolved_heat(1, idx + 1, quartet)
        for idx, quartet in enumerate(chunk_slots(competitors[:8], 4))
    ]
    final_slots: List[SlotDescriptor] = []
    for heat in heats:
        final_slots.extend(_advance(heat, 1, 2, QUALIFIER_PREFIX))
    return heats + [PlannedHeat(2, 1, final_slots)]


def build_generic_elimination(competitors: Sequence[Competitor], config: GenerationConfig) -> List[PlannedHeat]:
    """
    Chunk into heats of heat_size, advance max(1, n // 2) per heat, repeat
    until the qualifiers fit one heat, which becomes the final.

    If a round fails to shrink the qualifier pool (heat_size == 1), the
    current qualifiers go straight into a final instead of looping.
    """
    heat_size = config.heat_size
    round_one = [
        _resolved_heat(1, idx + 1, chunk)
        for idx, chunk in enumerate(chunk_slots(competitors, heat_size))
    ]
    plan: List[PlannedHeat] = list(round_one)

    qualifiers: List[SlotDescriptor] = list(_elimination_qualifiers(round_one))
    current_round = 2
    while qualifiers:
        if len(qualifiers) <= heat_size:
            plan.append(PlannedHeat(current_round, 1, qualifiers))
            break

        round_heats = [
            PlannedHeat(current_round, idx + 1, chunk)
            for idx, chunk in enumerate(chunk_slots(qualifiers, heat_size))
        ]
        plan.extend(round_heats)

        next_qualifiers = _elimination_qualifiers(round_heats)
        if len(next_qualifiers) == len(qualifiers):
            logger.warning(
                f"Elimination draw stopped shrinking at round {current_round} "
                f"({len(qualifiers)} qualifiers, heat_size={heat_size}); closing with a final"
            )
            plan.append(PlannedHeat(current_round + 1, 1, qualifiers))
            break

        qualifiers = list(next_qualifiers)
        current_round += 1

    return plan


def build_repechage(competitors: Sequence[Competitor], config: GenerationConfig) -> List[PlannedHeat]:
    """
    Main heats, then a repechage round for the next-best finishers, then a
    final of direct qualifiers followed by repechage qualifiers.
    """
    cfg = config.repechage or RepechageConfig(enabled=True)
    heat_size = config.heat_size

    main_heats = [
        _resolved_heat(1, idx + 1, chunk)
        for idx, chunk in enumerate(chunk_slots(competitors, heat_size))
    ]
    plan: List[PlannedHeat] = list(main_heats)

    direct: List[SlotDescriptor] = []
    pool: List[SlotDescriptor] = []
    for heat in main_heats:
        direct.extend(_advance(heat, 1, cfg.adv_main_per_heat, QUALIFIER_PREFIX))
        pool.extend(_advance(
            heat,
            cfg.adv_main_per_heat + 1,
            cfg.adv_main_per_heat + cfg.to_rep_per_heat,
            REPECHAGE_PREFIX,
        ))

    current_round = 2
    rep_qualifiers: List[SlotDescriptor] = []
    if pool:
        rep_heats = [
            PlannedHeat(current_round, idx + 1, chunk)
            for idx, chunk in enumerate(chunk_slots(pool, heat_size))
        ]
        plan.extend(rep_heats)
        for heat in rep_heats:
            rep_qualifiers.extend(_advance(heat, 1, cfg.adv_rep_per_heat, QUALIFIER_PREFIX))
        current_round += 1

    final_slots = direct + rep_qualifiers
    if not final_slots:
        final_slots = direct + pool

    if final_slots:
        plan.append(PlannedHeat(current_round, 1, final_slots))
    else:
        logger.warning("Repechage draw has no qualifiers; no final heat planned")

    return plan


# -----------------------------------------------------------------------------
# Strategy selection
# -----------------------------------------------------------------------------

StrategyRule = Callable[[int, GenerationConfig], bool]
StrategyBuilder = Callable[[Sequence[Competitor], GenerationConfig], List[PlannedHeat]]

# First match wins. Repechage is an orthogonal modifier; fixed-size shapes
# (2 / 6 / 8) must be tried before the generic halving rule.
STRATEGY_RULES: List[Tuple[BracketStrategy, StrategyRule]] = [
    ("REPECHAGE", lambda count, cfg: bool(cfg.repechage and cfg.repechage.enabled)),
    ("MAN_ON_MAN", lambda count, cfg: cfg.heat_size == 2),
    ("SIX_PERSON", lambda count, cfg: count == 6),
    ("EIGHT_PERSON", lambda count, cfg: count == 8 and cfg.heat_size >= 4),
    ("GENERIC_ELIMINATION", lambda count, cfg: True),
]

STRATEGY_BUILDERS: Dict[BracketStrategy, StrategyBuilder] = {
    "REPECHAGE": build_repechage,
    "MAN_ON_MAN": build_man_on_man,
    "SIX_PERSON": build_six_person,
    "EIGHT_PERSON": build_eight_person,
    "GENERIC_ELIMINATION": build_generic_elimination,
}


def resolve_strategy(competitor_count: int, config: GenerationConfig) -> BracketStrategy:
    """Return the first strategy whose rule matches."""
    for strategy, rule in STRATEGY_RULES:
        if rule(competitor_count, config):
            return strategy
    return "GENERIC_ELIMINATION"


# -----------------------------------------------------------------------------
# Plan validation / row conversion
# -----------------------------------------------------------------------------

def validate_plan(planned_heats: Sequence[PlannedHeat]) -> None:
    """
    Check bracket-wide invariants of a plan.

    - heat numbers are unique within a round
    - every Pending slot points at a heat planned earlier, in an earlier
      round, at a position that heat actually has
    """
    sizes: Dict[Tuple[int, int], int] = {}
    for heat in planned_heats:
        key = (heat.round, heat.heat_number)
        if key in sizes:
            raise BracketGenerationError(f"Duplicate heat R{heat.round}-H{heat.heat_number}")
        for position, slot in enumerate(heat.slots, start=1):
            if isinstance(slot, Pending):
                source = (slot.source_round, slot.source_heat)
                if slot.source_round >= heat.round or source not in sizes:
                    raise BracketGenerationError(
                        f"R{heat.round}-H{heat.heat_number} P{position} references "
                        f"R{slot.source_round}-H{slot.source_heat}, which is not an earlier heat"
                    )
                if not 1 <= slot.source_position <= sizes[source]:
                    raise BracketGenerationError(
                        f"R{heat.round}-H{heat.heat_number} P{position} references missing "
                        f"position {slot.source_position} of R{slot.source_round}-H{slot.source_heat}"
                    )
            elif not isinstance(slot, Resolved):
                raise TypeError(f"Unknown slot type: {type(slot).__name__}")
        sizes[key] = len(heat.slots)


def convert_to_rows(
    planned_heats: Sequence[PlannedHeat],
    config: GenerationConfig,
) -> Tuple[List[HeatRow], List[HeatEntryRow], List[HeatSlotMappingRow]]:
    """Flatten planned heats into heat, entry and slot-mapping rows."""
    heats: List[HeatRow] = []
    entries: List[HeatEntryRow] = []
    slot_mappings: List[HeatSlotMappingRow] = []
    event_id = config.event_id or 0

    for plan in planned_heats:
        heat_id = make_heat_id(config.event_name, config.division, plan.round, plan.heat_number)
        colors = color_set(len(plan.slots))

        heats.append(HeatRow(
            id=heat_id,
            event_id=event_id,
            competition=config.event_name,
            division=config.division,
            round=plan.round,
            heat_number=plan.heat_number,
            heat_size=len(plan.slots),
            status=HEAT_STATUS_WAITING,
            color_order=colors,
        ))

        for idx, slot in enumerate(plan.slots):
            position = idx + 1
            color = colors[idx] if idx < len(colors) else None

            if isinstance(slot, Resolved):
                competitor = slot.competitor
                competitor_id = competitor.competitor_id if competitor.competitor_id is not None else competitor.seed
                entries.append(HeatEntryRow(heat_id, competitor_id, position, competitor.seed, color))
                slot_mappings.append(HeatSlotMappingRow(heat_id, position, None, None, None, position))
            elif isinstance(slot, Pending):
                entries.append(HeatEntryRow(heat_id, None, position, None, color))
                slot_mappings.append(HeatSlotMappingRow(
                    heat_id,
                    position,
                    slot.label,
                    slot.source_round,
                    slot.source_heat,
                    slot.source_position,
                ))
            else:
                raise TypeError(f"Unknown slot type: {type(slot).__name__}")

    return heats, entries, slot_mappings


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------

def generate(competitors: Sequence[Competitor], config: GenerationConfig) -> GeneratedDraw:
    """
    Generate the full heat draw for one event division.

    Raises:
        ConfigurationError: missing event name / division, no competitors,
            heat_size < 1, negative repechage counts
        SeedContinuityError: seeds are not exactly 1..N

    Never returns a partial bracket.
    """
    validate_config(competitors, config)
    ordered = ensure_seed_continuity(competitors)

    strategy = resolve_strategy(len(ordered), config)
    planned = STRATEGY_BUILDERS[strategy](ordered, config)
    validate_plan(planned)

    heats, entries, slot_mappings = convert_to_rows(planned, config)
    logger.info(
        f"Generated {len(heats)} heats ({strategy}) for '{config.event_name}' / '{config.division}' "
        f"with {len(ordered)} competitors"
    )

    return GeneratedDraw(
        strategy=strategy,
        event_id=config.event_id or 0,
        division=config.division,
        planned_heats=planned,
        heats=heats,
        entries=entries,
        slot_mappings=slot_mappings,
    )
