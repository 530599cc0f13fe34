"""
Geometry utilities for the lidar sandbox.

Provides segment intersection, squared distances and the polar helpers
used by the scanner and the occupancy grid builder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
import math


# Determinants below this magnitude are treated as parallel/coincident segments.
PARALLEL_EPS = 1e-10

# Slack on the [0, 1] segment parameters so rays through a corner still register.
PARAM_EPS = 1e-9


# ---------------------------------------------------------------------------
# Angle and point helpers
# ---------------------------------------------------------------------------


def polar_point(
    ox: float,
    oy: float,
    angle_deg: float,
    length: float,
) -> Tuple[float, float]:
    """Point at `length` from (ox, oy) along `angle_deg` degrees (CCW from +x)."""
    theta = math.radians(angle_deg)
    return ox + length * math.cos(theta), oy + length * math.sin(theta)


def distance_sq(x1: float, y1: float, x2: float, y2: float) -> float:
    """Squared Euclidean distance between two points."""
    dx = x2 - x1
    dy = y2 - y1
    return dx * dx + dy * dy


# ---------------------------------------------------------------------------
# Segment intersection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SegmentIntersection:
    """Result of segment-segment intersection test."""

    x: float
    y: float
    t_a: float  # parameter on segment A [0,1]
    t_b: float  # parameter on segment B [0,1]


def segment_intersect(
    a_x1: float,
    a_y1: float,
    a_x2: float,
    a_y2: float,
    b_x1: float,
    b_y1: float,
    b_x2: float,
    b_y2: float,
) -> Optional[SegmentIntersection]:
    """
    Find intersection of line segment A (a_x1,a_y1)-(a_x2,a_y2)
    and segment B (b_x1,b_y1)-(b_x2,b_y2).

    Returns SegmentIntersection, or None if the segments do not cross.
    Parallel and coincident segments (zero determinant) never intersect.
    """
    dx_a = a_x2 - a_x1
    dy_a = a_y2 - a_y1
    dx_b = b_x2 - b_x1
    dy_b = b_y2 - b_y1

    denom = dx_a * dy_b - dy_a * dx_b
    if abs(denom) < PARALLEL_EPS:
        return None

    t_num = (b_x1 - a_x1) * dy_b - (b_y1 - a_y1) * dx_b
    s_num = (b_x1 - a_x1) * dy_a - (b_y1 - a_y1) * dx_a
    t = t_num / denom
    s = s_num / denom

    lo = -PARAM_EPS
    hi = 1.0 + PARAM_EPS
    if lo <= t <= hi and lo <= s <= hi:
        x = a_x1 + t * dx_a
        y = a_y1 + t * dy_a
        return SegmentIntersection(x=x, y=y, t_a=t, t_b=s)
    return None
