from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict
import math

# Forward is drawn 90 degrees from the heading's zero direction.
FORWARD_OFFSET_DEG = 90.0


@dataclass
class RoverState:
    """State of the rover in world coordinates.

    Attributes
    ----------
    x : float
        X position.
    y : float
        Y position.
    heading : float
        Heading (degrees), CCW from +x.
    v : float
        Commanded linear velocity (units/tick).
    w : float
        Commanded angular velocity (degrees/tick).
    """

    x: float
    y: float
    heading: float
    v: float = 0.0
    w: float = 0.0


class Rover:
    """Rover driven by held angular/linear velocity commands.

    One `step` is one tick: the heading is advanced first, then the position
    moves along the new forward direction. Obstacles never affect motion.
    """

    def __init__(self, x: float = 0.0, y: float = 0.0, heading: float = 0.0) -> None:
        self.state = RoverState(x=x, y=y, heading=heading)

    # ------------------------------------------------------------------
    # State manipulation
    # ------------------------------------------------------------------
    def reset(self, x: float, y: float, heading: float = 0.0) -> None:
        """Reset pose and clear velocity commands."""
        self.state = RoverState(x=x, y=y, heading=heading)

    def get_state(self) -> RoverState:
        """Return a copy of current state."""
        s = self.state
        return RoverState(x=s.x, y=s.y, heading=s.heading, v=s.v, w=s.w)

    def set_angular_velocity(self, w: float) -> None:
        self.state.w = float(w)

    def set_linear_velocity(self, v: float) -> None:
        self.state.v = float(v)

    def stop(self) -> None:
        self.state.v = 0.0
        self.state.w = 0.0

    # ------------------------------------------------------------------
    # Kinematics
    # ------------------------------------------------------------------
    def step(self) -> None:
        """Advance the pose by one tick using the held velocity commands."""
        s = self.state
        heading = s.heading + s.w
        theta = math.radians(heading + FORWARD_OFFSET_DEG)
        x = s.x + s.v * math.cos(theta)
        y = s.y + s.v * math.sin(theta)
        self.state = RoverState(x=x, y=y, heading=heading, v=s.v, w=s.w)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize current rover state to a dict for logging/telemetry."""
        s = self.state
        return {
            "x": s.x,
            "y": s.y,
            "heading": s.heading,
            "v": s.v,
            "w": s.w,
        }
