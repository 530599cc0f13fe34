"""
Top-level package for the rover lidar sandbox.

Components:
- world: rectangular obstacles and level files
- rover: heading/velocity kinematics
- sensors: ray-cast LiDAR scanner
- occupancy: rover-centered occupancy grid
- sim: tick loop tying the above together
- geometry_utils: segment intersection and point helpers
"""

from .world import ObstacleWorld, Obstacle
from .rover import RoverState, Rover
from .sensors import LidarConfig, LidarScan, LidarSensor, ScanAngles
from .occupancy import OccupancyConfig, OccupancyGrid
from .sim import SimConfig, SimSnapshot, Simulation

__all__ = [
    "ObstacleWorld",
    "Obstacle",
    "RoverState",
    "Rover",
    "LidarConfig",
    "LidarScan",
    "LidarSensor",
    "ScanAngles",
    "OccupancyConfig",
    "OccupancyGrid",
    "SimConfig",
    "SimSnapshot",
    "Simulation",
]
