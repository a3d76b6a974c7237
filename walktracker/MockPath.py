from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from walktracker.RouteBase import RouteStep
from walktracker.errors import EmptyRoute
from walktracker.geo import LatLon, validate

# San Francisco, a few metres apart
DEFAULT_MOCK_PATH: Tuple[LatLon, ...] = (
    (37.7749, -122.4194),
    (37.7755, -122.4188),
    (37.7760, -122.4180),
    (37.7766, -122.4172),
    (37.7772, -122.4165),
    (37.7778, -122.4158),
)


@dataclass
class MockPath:
    points: Tuple[LatLon, ...]
    loop: bool = True
    idx: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.points = tuple(validate(p) for p in self.points)
        if not self.points:
            raise EmptyRoute("mock path has no points")

    @classmethod
    def default(cls, loop: bool = True) -> "MockPath":
        return cls(points=DEFAULT_MOCK_PATH, loop=loop)

    @classmethod
    def from_points(cls, points: Iterable[LatLon], loop: bool = True) -> "MockPath":
        return cls(points=tuple(points), loop=loop)

    @property
    def index(self) -> int:
        return self.idx

    @property
    def total_points(self) -> int:
        return len(self.points)

    def reset(self) -> None:
        self.idx = 0

    def is_finished(self) -> bool:
        return not self.loop and self.idx >= len(self.points)

    def current_position(self) -> LatLon:
        return self.points[min(self.idx, len(self.points) - 1)]

    def advance(self) -> LatLon:
        if self.loop:
            pos = self.points[self.idx]
            self.idx = (self.idx + 1) % len(self.points)
            return pos
        if self.is_finished():
            return self.points[-1]
        pos = self.points[self.idx]
        self.idx += 1
        return pos

    def current_instruction(self) -> Optional[RouteStep]:
        return None

    def remaining_steps(self) -> Optional[int]:
        if self.loop:
            return None
        return max(0, len(self.points) - self.idx)
