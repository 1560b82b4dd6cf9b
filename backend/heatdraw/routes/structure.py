from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Query

from heatdraw.services.structure_estimator import describe_heat, estimate
from heatdraw.utils.seeding import (
    AUTO,
    determine_heat_count,
    determine_heat_size,
    distribute_seeds_snake,
)

router = APIRouter()


@router.get("/structure/estimate")
def estimate_structure(
    total_competitors: int = Query(...),
    heat_size: int = Query(...),
    mode: Literal["elimination", "repechage"] = Query(default="elimination"),
):
    """Estimated bracket shape (rounds, heats per round) for UI sizing"""
    return asdict(estimate(total_competitors, heat_size, mode))


@router.get("/structure/describe")
def describe_structure_heat(
    round: int = Query(..., ge=1),
    heat: int = Query(..., ge=1),
    total_competitors: int = Query(...),
    heat_size: int = Query(...),
    mode: Literal["elimination", "repechage"] = Query(default="elimination"),
):
    """Round name and next-heat pointer for one heat of the estimated structure"""
    structure = estimate(total_competitors, heat_size, mode)
    return {"structure": asdict(structure), "heat": asdict(describe_heat(round, heat, structure))}


@router.get("/structure/seeding")
def seeding_preview(
    total_competitors: int = Query(..., ge=1),
    heat_size: Optional[int] = Query(default=None, ge=1),
):
    """Serpentine round-1 seeding preview"""
    size = determine_heat_size(total_competitors, heat_size if heat_size is not None else AUTO)
    count = determine_heat_count(total_competitors, size)
    heats = distribute_seeds_snake(list(range(1, total_competitors + 1)), size, count)
    return {
        "heat_size": size,
        "heat_count": count,
        "heats": [asdict(h) for h in heats],
    }
