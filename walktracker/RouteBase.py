from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from walktracker.errors import EmptyRoute, InvalidCoordinate
from walktracker.geo import LatLon, is_valid


class Maneuver(Enum):
    TURN_RIGHT = "turn-right"
    TURN_LEFT = "turn-left"
    TURN_SHARP_RIGHT = "turn-sharp-right"
    TURN_SHARP_LEFT = "turn-sharp-left"
    TURN_SLIGHT_RIGHT = "turn-slight-right"
    TURN_SLIGHT_LEFT = "turn-slight-left"
    UTURN_RIGHT = "uturn-right"
    UTURN_LEFT = "uturn-left"
    ROUNDABOUT_RIGHT = "roundabout-right"
    ROUNDABOUT_LEFT = "roundabout-left"
    STRAIGHT = "straight"
    RAMP_RIGHT = "ramp-right"
    RAMP_LEFT = "ramp-left"
    MERGE = "merge"
    FORK_RIGHT = "fork-right"
    FORK_LEFT = "fork-left"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Any) -> "Maneuver":
        if not raw or not isinstance(raw, str):
            return cls.UNKNOWN
        try:
            m = cls(raw.strip().lower())
        except ValueError:
            return cls.UNKNOWN
        return m

    @property
    def icon(self) -> str:
        return MANEUVER_ICONS.get(self, MANEUVER_ICONS[Maneuver.STRAIGHT])


MANEUVER_ICONS = {
    Maneuver.TURN_RIGHT: "➡",
    Maneuver.TURN_LEFT: "⬅",
    Maneuver.TURN_SHARP_RIGHT: "↪",
    Maneuver.TURN_SHARP_LEFT: "↩",
    Maneuver.TURN_SLIGHT_RIGHT: "↗",
    Maneuver.TURN_SLIGHT_LEFT: "↖",
    Maneuver.UTURN_RIGHT: "\U0001f504",
    Maneuver.UTURN_LEFT: "\U0001f504",
    Maneuver.ROUNDABOUT_RIGHT: "\U0001f503",
    Maneuver.ROUNDABOUT_LEFT: "\U0001f503",
    Maneuver.STRAIGHT: "⬆",
    Maneuver.RAMP_RIGHT: "↗",
    Maneuver.RAMP_LEFT: "↖",
    Maneuver.MERGE: "⬆",
    Maneuver.FORK_RIGHT: "↗",
    Maneuver.FORK_LEFT: "↖",
}


@dataclass(frozen=True)
class RouteStep:
    """
    Instruction that becomes current once the walker reaches
    points[start_point_index]. instruction_text is plain text (markup stripped).
    """
    start_point_index: int
    instruction_text: str
    maneuver: Maneuver = Maneuver.UNKNOWN

    @property
    def icon(self) -> str:
        return self.maneuver.icon


@dataclass(frozen=True)
class RouteInfo:
    start_address: str = ""
    end_address: str = ""
    distance_text: str = ""
    duration_text: str = ""
    overview_polyline: str = ""


@dataclass(frozen=True)
class FlattenedRoute:
    points: Tuple[LatLon, ...]
    steps: Tuple[RouteStep, ...] = ()
    _anchors: Tuple[int, ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # accept lists from callers, store tuples
        object.__setattr__(self, "points", tuple((float(lat), float(lng)) for lat, lng in self.points))
        object.__setattr__(self, "steps", tuple(self.steps))

        if not self.points:
            raise EmptyRoute("route has no points")
        for i, p in enumerate(self.points):
            if not is_valid(p):
                raise InvalidCoordinate(f"point {i} out of range: {p!r}")

        prev = 0
        for s in self.steps:
            if s.start_point_index < 0:
                raise ValueError(f"step index {s.start_point_index} is negative")
            if s.start_point_index < prev:
                raise ValueError("step indices must be non-decreasing")
            if s.start_point_index >= len(self.points):
                raise ValueError(
                    f"step index {s.start_point_index} past end of route ({len(self.points)} points)")
            prev = s.start_point_index
        object.__setattr__(self, "_anchors", tuple(s.start_point_index for s in self.steps))

    def __len__(self) -> int:
        return len(self.points)

    @property
    def start(self) -> LatLon:
        return self.points[0]

    @property
    def dest(self) -> LatLon:
        return self.points[-1]

    def instruction_at(self, index: int) -> Optional[RouteStep]:
        i = bisect_right(self._anchors, index) - 1
        if i < 0:
            return None
        return self.steps[i]

    def as_list(self) -> List[LatLon]:
        return list(self.points)
