"""
Pie/donut chart geometry models.

Angles are in degrees with 0 at 12 o'clock, increasing clockwise.
"""

from typing import List

from pydantic import BaseModel


class ArcSegment(BaseModel):
    """One category's slice of the chart."""

    model_config = {"frozen": True}

    category_id: int
    category_name: str
    start_angle_deg: float
    end_angle_deg: float
    color_index: int
    percentage: float = 0.0

    @property
    def sweep_deg(self) -> float:
        return self.end_angle_deg - self.start_angle_deg

    def covers(self, angle_deg: float) -> bool:
        """Half-open containment: a slice owns its start boundary."""
        return self.start_angle_deg <= angle_deg < self.end_angle_deg


class Point(BaseModel):
    model_config = {"frozen": True}

    x: float
    y: float


class ArcPath(BaseModel):
    """
    Drawing-agnostic description of a slice outline.

    For a pie slice ``inner_radius`` is 0 and the inner points collapse onto
    the center. ``full_circle`` is set when the slice spans the whole chart,
    in which case start and end points coincide.
    """

    model_config = {"frozen": True}

    category_id: int
    center: Point
    radius: float
    inner_radius: float
    outer_start: Point
    outer_end: Point
    inner_start: Point
    inner_end: Point
    large_arc: bool
    full_circle: bool = False

    def to_svg(self) -> str:
        """Render as an SVG path ``d`` attribute."""
        r = self.radius
        ri = self.inner_radius
        large = 1 if self.large_arc else 0

        if self.full_circle:
            # A single arc command cannot draw a closed circle; use two halves.
            top = self.outer_start
            bottom = Point(x=self.center.x, y=2 * self.center.y - top.y)
            parts: List[str] = [
                f"M {_fmt(top.x)} {_fmt(top.y)}",
                f"A {_fmt(r)} {_fmt(r)} 0 1 1 {_fmt(bottom.x)} {_fmt(bottom.y)}",
                f"A {_fmt(r)} {_fmt(r)} 0 1 1 {_fmt(top.x)} {_fmt(top.y)}",
                "Z",
            ]
            if ri > 0:
                itop = self.inner_start
                ibottom = Point(x=self.center.x, y=2 * self.center.y - itop.y)
                parts += [
                    f"M {_fmt(itop.x)} {_fmt(itop.y)}",
                    f"A {_fmt(ri)} {_fmt(ri)} 0 1 0 {_fmt(ibottom.x)} {_fmt(ibottom.y)}",
                    f"A {_fmt(ri)} {_fmt(ri)} 0 1 0 {_fmt(itop.x)} {_fmt(itop.y)}",
                    "Z",
                ]
            return " ".join(parts)

        parts = [
            f"M {_fmt(self.outer_start.x)} {_fmt(self.outer_start.y)}",
            f"A {_fmt(r)} {_fmt(r)} 0 {large} 1 {_fmt(self.outer_end.x)} {_fmt(self.outer_end.y)}",
        ]
        if ri > 0:
            parts += [
                f"L {_fmt(self.inner_end.x)} {_fmt(self.inner_end.y)}",
                f"A {_fmt(ri)} {_fmt(ri)} 0 {large} 0 {_fmt(self.inner_start.x)} {_fmt(self.inner_start.y)}",
            ]
        else:
            parts.append(f"L {_fmt(self.center.x)} {_fmt(self.center.y)}")
        parts.append("Z")
        return " ".join(parts)


def _fmt(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text
