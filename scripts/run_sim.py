from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

# Ensure project root is on path when running this script directly
_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from lidar_sandbox.sim import SimConfig, Simulation, load_yaml
from telemetry.logger import TelemetryLogger


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Headless rover lidar sandbox run.")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/sim.yaml",
        help="Path to sim YAML config.",
    )
    parser.add_argument("--level", type=str, default=None, help="Level file to load.")
    parser.add_argument("--ticks", type=int, default=None, help="Number of ticks to run.")
    parser.add_argument("--linear", type=float, default=None, help="Linear velocity (units/tick).")
    parser.add_argument("--angular", type=float, default=None, help="Angular velocity (deg/tick).")
    parser.add_argument("--save-level", type=str, default=None, help="Write obstacles here after the run.")
    parser.add_argument(
        "--telemetry",
        type=str,
        default=None,
        help="JSONL telemetry output (defaults to sim.telemetry_path; 'none' disables).",
    )
    args = parser.parse_args(argv)

    cfg = load_yaml(args.config)
    sim_cfg = cfg["sim"]
    rover_cfg = cfg["rover"]

    ticks = args.ticks if args.ticks is not None else int(sim_cfg["ticks"])
    linear = args.linear if args.linear is not None else float(rover_cfg.get("linear_velocity", 0.0))
    angular = args.angular if args.angular is not None else float(rover_cfg.get("angular_velocity", 0.0))
    telemetry_path = args.telemetry if args.telemetry is not None else sim_cfg.get("telemetry_path")

    telemetry = None
    if telemetry_path and telemetry_path.lower() != "none":
        telemetry = TelemetryLogger(telemetry_path)

    sim = Simulation(SimConfig.from_dict(cfg), telemetry=telemetry)
    try:
        if args.level:
            loaded = sim.load_level(args.level)
            print(f"Loaded {loaded} obstacles from {args.level}")

        sim.set_linear_velocity(linear)
        sim.set_angular_velocity(angular)
        snapshot = sim.run(ticks)

        if args.save_level:
            sim.save_level(args.save_level)
            print(f"Saved {len(sim.world)} obstacles to {args.save_level}")
    finally:
        if telemetry is not None:
            telemetry.close()

    if snapshot is None:
        print("No ticks run.")
        return

    r = snapshot.rover
    print(f"Ticks:          {snapshot.tick}")
    print(f"Rover pose:     x={r.x:.2f} y={r.y:.2f} heading={r.heading:.1f} deg")
    print(f"Rays:           {len(snapshot.scan)}")
    print(f"Nearest range:  {snapshot.scan.nearest():.2f}")
    print(f"Occupied cells: {snapshot.grid.occupied_cells()} ({snapshot.grid.total_hits()} hits)")


if __name__ == "__main__":
    main()
