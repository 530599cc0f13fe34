from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, TextIO, Tuple
import math

Segment = Tuple[float, float, float, float]

LEVEL_TOKEN = "obstacle"


@dataclass(frozen=True)
class Obstacle:
    """Axis-aligned rectangular obstacle in world coordinates.

    Attributes
    ----------
    x : float
        X coordinate of the rectangle center.
    y : float
        Y coordinate of the rectangle center.
    w : float
        Full width of the rectangle.
    h : float
        Full height of the rectangle.
    """

    x: float
    y: float
    w: float
    h: float

    def __post_init__(self) -> None:
        if self.w < 0.0 or self.h < 0.0:
            raise ValueError(f"obstacle size must be non-negative, got w={self.w}, h={self.h}")

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Return (xmin, ymin, xmax, ymax)."""
        half_w = self.w / 2.0
        half_h = self.h / 2.0
        return (self.x - half_w, self.y - half_h, self.x + half_w, self.y + half_h)

    @property
    def is_degenerate(self) -> bool:
        """True for zero-area rectangles, which the scanner treats as transparent."""
        return self.w <= 0.0 or self.h <= 0.0

    def edges(self) -> List[Segment]:
        """Return the top, right, bottom and left edges as (x1, y1, x2, y2)."""
        xmin, ymin, xmax, ymax = self.bounds
        return [
            (xmin, ymin, xmax, ymin),
            (xmax, ymin, xmax, ymax),
            (xmax, ymax, xmin, ymax),
            (xmin, ymax, xmin, ymin),
        ]

    def to_level_line(self) -> str:
        return f"{LEVEL_TOKEN} {float(self.x)!r} {float(self.y)!r} {float(self.w)!r} {float(self.h)!r}\n"

    @classmethod
    def from_level_line(cls, line: str) -> Optional["Obstacle"]:
        """Parse one level-file line, returning None when it is not a valid obstacle."""
        parts = line.split()
        if len(parts) < 5 or parts[0] != LEVEL_TOKEN:
            return None
        try:
            x, y, w, h = (float(p) for p in parts[1:5])
        except ValueError:
            return None
        if not all(math.isfinite(v) for v in (x, y, w, h)):
            return None
        if w < 0.0 or h < 0.0:
            return None
        return cls(x=x, y=y, w=w, h=h)


class ObstacleWorld:
    """Ordered collection of rectangular obstacles.

    Insertion order doubles as undo order: `undo` always removes the most
    recently added obstacle.
    """

    def __init__(self, obstacles: Optional[List[Obstacle]] = None) -> None:
        self.obstacles: List[Obstacle] = list(obstacles) if obstacles is not None else []

    def __len__(self) -> int:
        return len(self.obstacles)

    def __iter__(self) -> Iterator[Obstacle]:
        return iter(self.obstacles)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def add(self, obstacle: Obstacle) -> None:
        """Add a single obstacle."""
        self.obstacles.append(obstacle)

    def undo(self) -> Optional[Obstacle]:
        """Remove and return the last obstacle; no-op on an empty world."""
        if not self.obstacles:
            return None
        return self.obstacles.pop()

    def clear(self) -> None:
        """Remove all obstacles."""
        self.obstacles.clear()

    # ------------------------------------------------------------------
    # Level files
    # ------------------------------------------------------------------
    def save(self, stream: TextIO) -> None:
        """Write one `obstacle x y w h` line per obstacle, in creation order."""
        for obs in self.obstacles:
            stream.write(obs.to_level_line())

    def load(self, stream: TextIO) -> int:
        """Append every valid obstacle line from `stream`.

        Lines that do not start with the `obstacle` token, or that carry
        malformed fields, are skipped. Returns the number of obstacles added.
        """
        added = 0
        for line in stream:
            obs = Obstacle.from_level_line(line)
            if obs is None:
                continue
            self.add(obs)
            added += 1
        return added

    def save_file(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            self.save(f)

    def load_file(self, path: str, replace: bool = True) -> int:
        """Load a level file, clearing the current obstacles first unless `replace` is False."""
        with open(path, "r", encoding="utf-8") as f:
            if replace:
                self.clear()
            return self.load(f)

    @classmethod
    def from_level_file(cls, path: str) -> "ObstacleWorld":
        """Create a world from a level file."""
        world = cls()
        world.load_file(path)
        return world

    def to_dict(self) -> Dict[str, Any]:
        """Serialize obstacles to a Python dict."""
        return {
            "obstacles": [
                {"x": o.x, "y": o.y, "w": o.w, "h": o.h} for o in self.obstacles
            ],
        }
