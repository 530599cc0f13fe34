from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple
import math

import numpy as np

from .geometry_utils import distance_sq, polar_point, segment_intersect
from .world import Obstacle

# A ray can cross a convex rectangle at most twice.
MAX_HITS_PER_OBSTACLE = 2

# Hits closer than this along the ray are the same point (a corner shared by two edges).
SAME_HIT_EPS = 1e-9


@dataclass(frozen=True)
class ScanAngles:
    """Inclusive sweep of ray offsets in degrees, relative to the rover heading.

    The default -45..225 sweep covers 270 degrees centered on the rover's
    forward direction (heading + 90).
    """

    start: float = -45.0
    end: float = 225.0
    step: float = 1.0

    def __post_init__(self) -> None:
        if self.step <= 0.0:
            raise ValueError(f"angle step must be positive, got {self.step}")
        if self.end < self.start:
            raise ValueError(f"angle end {self.end} is before start {self.start}")

    @property
    def count(self) -> int:
        # Never step past `end`; the epsilon absorbs float error on exact multiples.
        return int(math.floor((self.end - self.start) / self.step + 1e-9)) + 1

    def offsets(self) -> List[float]:
        return [self.start + i * self.step for i in range(self.count)]


@dataclass
class LidarConfig:
    """Configuration for the 2D LiDAR sensor."""

    max_range: float
    angles: ScanAngles = field(default_factory=ScanAngles)

    def __post_init__(self) -> None:
        if self.max_range <= 0.0:
            raise ValueError(f"max_range must be positive, got {self.max_range}")


@dataclass
class LidarScan:
    """One full sweep: `ranges[i]` belongs to the ray at `heading + offsets[i]`."""

    offsets: List[float]
    ranges: List[float]
    max_range: float
    pose: Tuple[float, float, float]

    def __len__(self) -> int:
        return len(self.ranges)

    def range_at(self, offset: float) -> float:
        """Range of the ray whose offset is closest to `offset`."""
        i = min(range(len(self.offsets)), key=lambda k: abs(self.offsets[k] - offset))
        return self.ranges[i]

    def hit_mask(self) -> np.ndarray:
        """Boolean array, True where the ray struck an obstacle."""
        return self.as_array() < self.max_range

    def nearest(self) -> float:
        return min(self.ranges) if self.ranges else self.max_range

    def as_array(self) -> np.ndarray:
        return np.asarray(self.ranges, dtype=np.float64)


class LidarSensor:
    """2D LiDAR ray caster against axis-aligned rectangular obstacles."""

    def __init__(self, config: LidarConfig) -> None:
        self.config = config

    def scan(
        self,
        obstacles: Iterable[Obstacle],
        pose: Tuple[float, float, float],
    ) -> LidarScan:
        """Perform a LiDAR scan from the given pose.

        Parameters
        ----------
        obstacles : iterable of Obstacle
            Obstacles to cast against.
        pose : tuple
            (x, y, heading) of the scanner, heading in degrees.

        Returns
        -------
        LidarScan
            One range per configured offset; rays that hit nothing report
            exactly `max_range`.
        """
        x, y, heading = pose
        max_range = self.config.max_range
        solid = [obs for obs in obstacles if not obs.is_degenerate]
        offsets = self.config.angles.offsets()

        ranges: List[float] = []
        for offset in offsets:
            ranges.append(self._cast_single_ray(solid, x, y, heading + offset, max_range))
        return LidarScan(offsets=offsets, ranges=ranges, max_range=max_range, pose=(x, y, heading))

    # ------------------------------------------------------------------
    # Ray casting
    # ------------------------------------------------------------------
    def _cast_single_ray(
        self,
        obstacles: List[Obstacle],
        x: float,
        y: float,
        angle_deg: float,
        max_range: float,
    ) -> float:
        """Compute distance to the nearest obstacle edge along the ray, or max_range."""
        ex, ey = polar_point(x, y, angle_deg, max_range)

        best_sq: Optional[float] = None
        for obs in obstacles:
            d_sq = self._nearest_hit_sq(obs, x, y, ex, ey)
            if d_sq is not None and (best_sq is None or d_sq < best_sq):
                best_sq = d_sq

        if best_sq is None:
            return max_range
        return min(math.sqrt(best_sq), max_range)

    @staticmethod
    def _nearest_hit_sq(
        obstacle: Obstacle,
        x: float,
        y: float,
        ex: float,
        ey: float,
    ) -> Optional[float]:
        """Squared distance from (x, y) to the entry point of the ray into `obstacle`.

        Returns None when the ray segment misses every edge.
        """
        hits = []
        for bx1, by1, bx2, by2 in obstacle.edges():
            isect = segment_intersect(x, y, ex, ey, bx1, by1, bx2, by2)
            if isect is None:
                continue
            if any(abs(isect.t_a - h.t_a) <= SAME_HIT_EPS for h in hits):
                continue
            hits.append(isect)
            if len(hits) == MAX_HITS_PER_OBSTACLE:
                break

        if not hits:
            return None
        return min(distance_sq(x, y, h.x, h.y) for h in hits)
