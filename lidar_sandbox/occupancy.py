"""
Rover-centered occupancy grid.

The grid is rebuilt from scratch on every tick: it counts how many rays of
the current scan ended in each cell and carries no memory of earlier scans.
Cells are laid out in the rover's local frame, with the rover at the center
of the grid, so the scan offsets are projected without re-applying the
absolute heading.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .sensors import LidarScan


@dataclass
class OccupancyConfig:
    """Grid geometry and the distance beyond which hits are ignored."""

    cell_size: float
    grid_size: int
    cutoff: float
    # When set, rays that hit nothing are left out even if max_range <= cutoff.
    skip_misses: bool = False

    def __post_init__(self) -> None:
        if self.cell_size <= 0.0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        if self.grid_size < 1:
            raise ValueError(f"grid_size must be at least 1, got {self.grid_size}")
        if self.cutoff < 0.0:
            raise ValueError(f"cutoff must be non-negative, got {self.cutoff}")

    @property
    def extent(self) -> float:
        """Physical side length of the grid."""
        return self.grid_size * self.cell_size


class OccupancyGrid:
    """N x N hit counters indexed as `counts[ix, iy]`."""

    def __init__(self, config: OccupancyConfig) -> None:
        self.config = config
        self.counts = np.zeros((config.grid_size, config.grid_size), dtype=np.int32)
        # Pose (x, y, heading) the grid is placed at when drawn.
        self.anchor: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def cell_size(self) -> float:
        return self.config.cell_size

    @property
    def size(self) -> int:
        return self.config.grid_size

    def clear(self) -> None:
        self.counts.fill(0)

    def rebuild(self, scan: LidarScan) -> None:
        """Clear the grid and accumulate every in-range hit of `scan`."""
        self.clear()
        self.anchor = scan.pose
        ranges = scan.as_array()
        if ranges.size == 0:
            return
        offsets = np.radians(np.asarray(scan.offsets, dtype=np.float64))

        keep = ranges <= self.config.cutoff
        if self.config.skip_misses:
            keep &= scan.hit_mask()
        ranges = ranges[keep]
        offsets = offsets[keep]

        half = self.config.extent / 2.0
        local_x = ranges * np.cos(offsets) + half
        local_y = ranges * np.sin(offsets) + half

        ix = np.floor(local_x / self.config.cell_size).astype(np.int64)
        iy = np.floor(local_y / self.config.cell_size).astype(np.int64)

        n = self.config.grid_size
        inside = (ix >= 0) & (ix < n) & (iy >= 0) & (iy < n)
        np.add.at(self.counts, (ix[inside], iy[inside]), 1)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def total_hits(self) -> int:
        return int(self.counts.sum())

    def occupied_cells(self) -> int:
        return int(np.count_nonzero(self.counts))

    def cell_center_local(self, ix: int, iy: int) -> Tuple[float, float]:
        """Center of cell (ix, iy) in the rover-local frame."""
        half = self.config.extent / 2.0
        cs = self.config.cell_size
        return (ix + 0.5) * cs - half, (iy + 0.5) * cs - half

    def copy(self) -> "OccupancyGrid":
        grid = OccupancyGrid(self.config)
        grid.counts = self.counts.copy()
        grid.anchor = self.anchor
        return grid
