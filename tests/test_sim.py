from __future__ import annotations

import math
from pathlib import Path

import pytest

from lidar_sandbox.sensors import ScanAngles
from lidar_sandbox.sim import SimConfig, Simulation, load_yaml
from telemetry.logger import TelemetryLogger, read_records

ROOT = Path(__file__).resolve().parents[1]


def make_config(**overrides) -> SimConfig:
    params = dict(
        rover_x=0.0,
        rover_y=0.0,
        rover_heading=0.0,
        lidar_max_range=300.0,
        lidar_angles=ScanAngles(),
        cell_size=10.0,
        grid_size=21,
        coverage_cutoff=100.0,
    )
    params.update(overrides)
    return SimConfig(**params)


def test_config_from_yaml() -> None:
    cfg = SimConfig.from_dict(load_yaml(str(ROOT / "configs" / "sim.yaml")))
    assert cfg.lidar_angles.count == 271
    assert cfg.grid_size == 21
    assert cfg.coverage_cutoff < cfg.lidar_max_range


def test_edits_are_applied_at_the_next_tick() -> None:
    sim = Simulation(make_config())
    sim.add_obstacle(50.0, 0.0, 10.0, 200.0)
    assert len(sim.world) == 0

    snap = sim.tick()
    assert len(snap.obstacles) == 1
    assert math.isclose(snap.scan.range_at(0.0), 45.0, rel_tol=1e-9)
    assert snap.grid.total_hits() > 0


def test_queued_undo_follows_queued_adds() -> None:
    sim = Simulation(make_config())
    sim.undo_obstacle()
    sim.add_obstacle(1.0, 1.0, 1.0, 1.0)
    sim.add_obstacle(2.0, 2.0, 1.0, 1.0)
    sim.undo_obstacle()
    snap = sim.tick()
    assert [(o.x, o.y) for o in snap.obstacles] == [(1.0, 1.0)]

    sim.undo_obstacle()
    sim.undo_obstacle()
    assert sim.tick().obstacles == ()


def test_zero_motion_ticks_keep_pose() -> None:
    sim = Simulation(make_config(rover_x=12.0, rover_y=-4.0, rover_heading=30.0))
    first = sim.tick()
    last = sim.run(20)
    assert last is not None
    assert last.tick == 21
    assert last.rover == first.rover


def test_rover_moves_and_scans_from_new_pose() -> None:
    sim = Simulation(make_config())
    sim.set_linear_velocity(5.0)
    snap = sim.run(4)
    assert snap is not None
    assert math.isclose(snap.rover.y, 20.0, rel_tol=1e-9)
    assert snap.scan.pose == (snap.rover.x, snap.rover.y, snap.rover.heading)
    assert snap.grid.anchor == snap.scan.pose


def test_snapshot_is_not_mutated_by_later_ticks() -> None:
    sim = Simulation(make_config())
    sim.add_obstacle(50.0, 0.0, 10.0, 200.0)
    snap = sim.tick()
    hits = snap.grid.total_hits()
    sim.undo_obstacle()
    sim.tick()
    assert snap.grid.total_hits() == hits
    assert len(snap.obstacles) == 1
    assert sim.last_snapshot is not None
    assert sim.last_snapshot.grid.total_hits() == 0


def test_level_save_and_load(tmp_path) -> None:
    path = str(tmp_path / "level.txt")
    sim = Simulation(make_config())
    sim.add_obstacle(50.0, 0.0, 10.0, 200.0)
    sim.add_obstacle(-80.0, 30.0, 5.0, 5.0)
    sim.save_level(path)

    other = Simulation(make_config())
    other.add_obstacle(0.0, 500.0, 1.0, 1.0)
    assert other.load_level(path) == 2
    snap = other.tick()
    assert list(snap.obstacles) == sim.world.obstacles


def test_failed_level_load_keeps_queued_edits(tmp_path) -> None:
    sim = Simulation(make_config())
    sim.add_obstacle(50.0, 0.0, 10.0, 200.0)
    with pytest.raises(OSError):
        sim.load_level(str(tmp_path / "missing.txt"))
    snap = sim.tick()
    assert len(snap.obstacles) == 1
    assert math.isclose(snap.scan.range_at(0.0), 45.0, rel_tol=1e-9)


def test_skip_misses_from_yaml() -> None:
    cfg = load_yaml(str(ROOT / "configs" / "sim.yaml"))
    assert SimConfig.from_dict(cfg).skip_misses is False
    cfg["occupancy"]["skip_misses"] = True
    sim = Simulation(SimConfig.from_dict(cfg))
    assert sim.grid.config.skip_misses is True


def test_corridor_level_respects_count_bound() -> None:
    cfg = SimConfig.from_dict(load_yaml(str(ROOT / "configs" / "sim.yaml")))
    sim = Simulation(cfg)
    sim.load_level(str(ROOT / "levels" / "corridor.txt"))
    sim.set_angular_velocity(3.0)
    for _ in range(10):
        snap = sim.tick()
        assert len(snap.scan) == 271
        in_cutoff = sum(1 for r in snap.scan.ranges if r <= cfg.coverage_cutoff)
        assert snap.grid.total_hits() <= in_cutoff


def test_telemetry_logs_one_record_per_tick(tmp_path) -> None:
    path = tmp_path / "runs" / "telemetry.jsonl"
    with TelemetryLogger(str(path)) as logger:
        sim = Simulation(make_config(), telemetry=logger)
        sim.add_obstacle(50.0, 0.0, 10.0, 200.0)
        sim.run(3)
        assert logger.records_written == 3

    records = read_records(str(path))
    assert [r["tick"] for r in records] == [1, 2, 3]
    assert records[0]["num_obstacles"] == 1
    assert records[0]["rays"] == 271
    assert math.isclose(records[0]["nearest_range"], 45.0, rel_tol=1e-9)
