from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from telemetry.logger import TelemetryLogger

from .occupancy import OccupancyConfig, OccupancyGrid
from .rover import Rover, RoverState
from .sensors import LidarConfig, LidarScan, LidarSensor, ScanAngles
from .world import Obstacle, ObstacleWorld


@dataclass
class SimConfig:
    rover_x: float
    rover_y: float
    rover_heading: float
    lidar_max_range: float
    lidar_angles: ScanAngles
    cell_size: float
    grid_size: int
    coverage_cutoff: float
    skip_misses: bool = False

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "SimConfig":
        """Build from the `rover`, `lidar` and `occupancy` sections of a YAML config."""
        rover_cfg = cfg["rover"]
        lidar_cfg = cfg["lidar"]
        occ_cfg = cfg["occupancy"]
        return cls(
            rover_x=float(rover_cfg["x"]),
            rover_y=float(rover_cfg["y"]),
            rover_heading=float(rover_cfg.get("heading", 0.0)),
            lidar_max_range=float(lidar_cfg["max_range"]),
            lidar_angles=ScanAngles(
                start=float(lidar_cfg.get("angle_start", -45.0)),
                end=float(lidar_cfg.get("angle_end", 225.0)),
                step=float(lidar_cfg.get("angle_step", 1.0)),
            ),
            cell_size=float(occ_cfg["cell_size"]),
            grid_size=int(occ_cfg["grid_size"]),
            coverage_cutoff=float(occ_cfg["cutoff"]),
            skip_misses=bool(occ_cfg.get("skip_misses", False)),
        )


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


@dataclass(frozen=True)
class SimSnapshot:
    """Read-only view of a completed tick."""

    tick: int
    obstacles: Tuple[Obstacle, ...]
    rover: RoverState
    scan: LidarScan
    grid: OccupancyGrid


class Simulation:
    """Tick loop owning the obstacle world, rover, scanner and occupancy grid.

    Obstacle edits are queued and applied at the start of the next tick;
    velocity commands are held until changed.
    """

    def __init__(
        self,
        config: SimConfig,
        world: Optional[ObstacleWorld] = None,
        telemetry: Optional[TelemetryLogger] = None,
    ) -> None:
        self.cfg = config
        self.world = world if world is not None else ObstacleWorld()
        self.telemetry = telemetry

        self.rover = Rover(x=config.rover_x, y=config.rover_y, heading=config.rover_heading)
        self.lidar = LidarSensor(
            LidarConfig(max_range=config.lidar_max_range, angles=config.lidar_angles)
        )
        self.grid = OccupancyGrid(
            OccupancyConfig(
                cell_size=config.cell_size,
                grid_size=config.grid_size,
                cutoff=config.coverage_cutoff,
                skip_misses=config.skip_misses,
            )
        )

        self.tick_count = 0
        self.last_snapshot: Optional[SimSnapshot] = None
        # Queued edits: (obstacle to add) or None for an undo.
        self._pending: List[Optional[Obstacle]] = []

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def add_obstacle(self, x: float, y: float, w: float, h: float) -> None:
        self._pending.append(Obstacle(x=float(x), y=float(y), w=float(w), h=float(h)))

    def undo_obstacle(self) -> None:
        self._pending.append(None)

    def set_angular_velocity(self, w: float) -> None:
        self.rover.set_angular_velocity(w)

    def set_linear_velocity(self, v: float) -> None:
        self.rover.set_linear_velocity(v)

    def save_level(self, path: str) -> None:
        self._apply_pending()
        self.world.save_file(path)

    def load_level(self, path: str, replace: bool = True) -> int:
        """Load a level file immediately, discarding queued edits."""
        loaded = self.world.load_file(path, replace=replace)
        self._pending.clear()
        return loaded

    # ------------------------------------------------------------------
    # Tick pipeline
    # ------------------------------------------------------------------
    def tick(self) -> SimSnapshot:
        """Apply edits, move the rover, rescan and rebuild the grid."""
        self._apply_pending()
        self.rover.step()

        state = self.rover.get_state()
        scan = self.lidar.scan(self.world, pose=(state.x, state.y, state.heading))
        self.grid.rebuild(scan)

        self.tick_count += 1
        snapshot = SimSnapshot(
            tick=self.tick_count,
            obstacles=tuple(self.world.obstacles),
            rover=state,
            scan=scan,
            grid=self.grid.copy(),
        )
        self.last_snapshot = snapshot
        if self.telemetry is not None:
            self.telemetry.log_snapshot(snapshot)
        return snapshot

    def run(self, ticks: int) -> Optional[SimSnapshot]:
        for _ in range(ticks):
            self.tick()
        return self.last_snapshot

    def _apply_pending(self) -> None:
        for edit in self._pending:
            if edit is None:
                self.world.undo()
            else:
                self.world.add(edit)
        self._pending.clear()
