"""
Order Block x Fair Value Gap confluence.

Scoring (capped at 100):
- overlap:     min(overlap%, 40), overlap% relative to the mean zone size
- order block: ob.strength / 100 * 25
- fvg status:  15 unfilled, 7 partially filled, 0 otherwise
- fibonacci:   20 if the overlap midpoint sits in the optimal entry band
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .fibonacci import is_price_in_optimal_zone
from .models import (
    ConfluenceZone,
    EntryDirection,
    FairValueGap,
    FibonacciZone,
    FVGStatus,
    OrderBlock,
    ZoneType,
)

MAX_OVERLAP_POINTS = 40.0
OB_STRENGTH_POINTS = 25.0
OPTIMAL_ZONE_POINTS = 20.0
FVG_STATUS_POINTS = {
    FVGStatus.UNFILLED: 15.0,
    FVGStatus.PARTIALLY_FILLED: 7.0,
}


@dataclass
class Overlap:
    """Geometric intersection of two price zones."""
    has_overlap: bool
    overlap_top: float
    overlap_bottom: float
    overlap_percentage: float


def calculate_overlap(
    top1: float,
    bottom1: float,
    top2: float,
    bottom2: float,
) -> Overlap:
    """
    Intersect [bottom1, top1] with [bottom2, top2].

    Touching zones (shared boundary only) do not overlap.
    """
    overlap_top = min(top1, top2)
    overlap_bottom = max(bottom1, bottom2)

    if overlap_bottom >= overlap_top:
        return Overlap(False, 0.0, 0.0, 0.0)

    overlap_size = overlap_top - overlap_bottom
    avg_size = ((top1 - bottom1) + (top2 - bottom2)) / 2

    return Overlap(
        has_overlap=True,
        overlap_top=overlap_top,
        overlap_bottom=overlap_bottom,
        overlap_percentage=overlap_size / avg_size * 100,
    )


def confluence_strength(
    ob: OrderBlock,
    fvg: FairValueGap,
    overlap_percentage: float,
    in_optimal_zone: bool,
) -> float:
    strength = min(overlap_percentage, MAX_OVERLAP_POINTS)
    strength += ob.strength / 100 * OB_STRENGTH_POINTS
    strength += FVG_STATUS_POINTS.get(fvg.status, 0.0)
    if in_optimal_zone:
        strength += OPTIMAL_ZONE_POINTS
    return min(strength, 100.0)


def find_confluence_zones(
    order_blocks: Sequence[OrderBlock],
    fvgs: Sequence[FairValueGap],
    fibonacci: Optional[FibonacciZone] = None,
) -> List[ConfluenceZone]:
    """
    Pair every order block with every same-direction FVG and keep overlaps.

    Returns:
        ConfluenceZones sorted by strength, strongest first
    """
    zones: List[ConfluenceZone] = []

    for ob in order_blocks:
        for fvg in fvgs:
            if ob.type != fvg.type:
                continue

            overlap = calculate_overlap(ob.top, ob.bottom, fvg.top, fvg.bottom)
            if not overlap.has_overlap:
                continue

            in_optimal_zone = False
            if fibonacci is not None:
                midpoint = (overlap.overlap_top + overlap.overlap_bottom) / 2
                direction = EntryDirection.LONG if ob.type == ZoneType.BULLISH else EntryDirection.SHORT
                in_optimal_zone = is_price_in_optimal_zone(midpoint, fibonacci, direction)

            zones.append(ConfluenceZone(
                id=f"confluence-{ob.id}-{fvg.id}",
                order_block=ob,
                fair_value_gap=fvg,
                type=ob.type,
                overlap_top=overlap.overlap_top,
                overlap_bottom=overlap.overlap_bottom,
                in_optimal_zone=in_optimal_zone,
                strength=confluence_strength(ob, fvg, overlap.overlap_percentage, in_optimal_zone),
            ))

    # Stable sort keeps OB x FVG scan order among equal strengths
    zones.sort(key=lambda z: -z.strength)
    return zones
