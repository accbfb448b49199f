"""
Pie/donut geometry for a category distribution.

Angles are degrees, 0 at 12 o'clock, clockwise. Points are in screen
coordinates (y grows downwards).
"""

import math
from decimal import Decimal
from typing import List, Optional, Sequence

from spend_analytics_mcp.models.analytics import DistributionEntry
from spend_analytics_mcp.models.chart import ArcPath, ArcSegment, Point

DEFAULT_MAX_SEGMENTS = 8
DEFAULT_PALETTE_SIZE = 8


def build_arcs(
    entries: Sequence[DistributionEntry],
    max_segments: int = DEFAULT_MAX_SEGMENTS,
    palette_size: int = DEFAULT_PALETTE_SIZE,
) -> List[ArcSegment]:
    """
    Lay out slices for the largest ``max_segments`` entries.

    Slice sizes are proportional to each entry's share of the total of all
    ``entries``. Entries past the cap are dropped, not merged into an
    "other" slice, so a truncated chart leaves the tail of the circle
    uncovered.

    Args:
        entries: Distribution entries in distribution order (largest first)
        max_segments: Maximum number of slices
        palette_size: Number of colors available; color indexes wrap

    Returns:
        Contiguous slices starting at 0 degrees, or an empty list when the
        total is zero
    """
    if max_segments < 0:
        raise ValueError(f"max_segments must be >= 0, got {max_segments}")
    if palette_size <= 0:
        raise ValueError(f"palette_size must be positive, got {palette_size}")

    total_sum = sum((e.total for e in entries), Decimal("0"))
    if total_sum == 0:
        return []

    arcs: List[ArcSegment] = []
    cumulative = Decimal("0")
    for rank, entry in enumerate(entries[:max_segments]):
        start = float(cumulative * 360 / total_sum)
        cumulative += entry.total
        end = float(cumulative * 360 / total_sum)
        arcs.append(
            ArcSegment(
                category_id=entry.category_id,
                category_name=entry.category_name,
                start_angle_deg=start,
                end_angle_deg=end,
                color_index=rank % palette_size,
                percentage=entry.percentage,
            )
        )
    return arcs


def normalize_angle(angle_deg: float) -> float:
    """Wrap an angle into [0, 360)."""
    normalized = angle_deg % 360.0
    # tiny negative inputs round up to exactly 360.0
    if normalized >= 360.0:
        normalized = 0.0
    return normalized


def hit_test(arcs: Sequence[ArcSegment], angle_deg: float) -> Optional[int]:
    """
    Find the category whose slice covers ``angle_deg``.

    An angle exactly on a boundary belongs to the slice starting there.
    """
    angle = normalize_angle(angle_deg)
    for arc in arcs:
        if arc.covers(angle):
            return arc.category_id
    return None


def angle_at_point(x: float, y: float, center_x: float, center_y: float) -> float:
    """Chart angle of a pointer position relative to the chart center."""
    return normalize_angle(math.degrees(math.atan2(x - center_x, center_y - y)))


def point_at_angle(center_x: float, center_y: float, radius: float, angle_deg: float) -> Point:
    rad = math.radians(angle_deg)
    return Point(
        x=center_x + radius * math.sin(rad),
        y=center_y - radius * math.cos(rad),
    )


def arc_path(
    segment: ArcSegment,
    center_x: float,
    center_y: float,
    radius: float,
    inner_radius: float = 0.0,
) -> ArcPath:
    """
    Describe a slice outline for drawing.

    ``inner_radius`` > 0 produces a donut ring segment.
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")
    if not 0 <= inner_radius < radius:
        raise ValueError(f"inner_radius must be in [0, {radius}), got {inner_radius}")

    start = segment.start_angle_deg
    end = segment.end_angle_deg
    return ArcPath(
        category_id=segment.category_id,
        center=Point(x=center_x, y=center_y),
        radius=radius,
        inner_radius=inner_radius,
        outer_start=point_at_angle(center_x, center_y, radius, start),
        outer_end=point_at_angle(center_x, center_y, radius, end),
        inner_start=point_at_angle(center_x, center_y, inner_radius, start),
        inner_end=point_at_angle(center_x, center_y, inner_radius, end),
        large_arc=segment.sweep_deg > 180,
        full_circle=segment.sweep_deg >= 360,
    )
