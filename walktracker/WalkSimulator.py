from __future__ import annotations

import logging
import math
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import List, Optional

from walktracker.RouteBase import FlattenedRoute, RouteStep
from walktracker.config import TrackerConfig, check_positive
from walktracker.errors import EmptyRoute
from walktracker.geo import LatLon, haversine_m, interpolate

logger = logging.getLogger(__name__)

# ratio slack so an exact multiple of the step does not gain an extra sub-step
_CEIL_TOLERANCE = 1e-6


def resample(route: FlattenedRoute, step_arc_length_m: float) -> FlattenedRoute:
    """
    Rewrite route so consecutive points are at most step_arc_length_m apart.

    Every raw pair (a, b) is cut into ceil(d / step) equal parts and the points
    at t = 0, 1/steps, ... are interpolated linearly on the pair. The exact
    last raw point closes the output. Instructions move to the first resampled
    point that originates at or after their raw index.
    """
    step_m = check_positive("step_arc_length_m", step_arc_length_m)
    raw = route.points
    if not raw:
        raise EmptyRoute("cannot resample an empty route")

    out: List[LatLon] = []
    origin: List[int] = []
    for i in range(len(raw) - 1):
        a, b = raw[i], raw[i + 1]
        d = haversine_m(a, b)
        if d == 0.0:
            continue
        steps = max(1, math.ceil(d / step_m - _CEIL_TOLERANCE))
        for s in range(steps):
            out.append(interpolate(a, b, s / steps))
            origin.append(i)
    out.append(raw[-1])
    origin.append(len(raw) - 1)

    steps_out = [
        RouteStep(
            start_point_index=bisect_left(origin, st.start_point_index),
            instruction_text=st.instruction_text,
            maneuver=st.maneuver,
        )
        for st in route.steps
    ]
    logger.debug("resampled %d raw points to %d at %.3f m", len(raw), len(out), step_m)
    return FlattenedRoute(points=tuple(out), steps=tuple(steps_out))


@dataclass
class WalkSimulator:
    # idx counts the points already emitted; idx == len(points) means finished
    route: FlattenedRoute
    tick_seconds: float = 0.2
    idx: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        check_positive("tick_seconds", self.tick_seconds)
        if not self.route.points:
            raise EmptyRoute("route has no points")

    @classmethod
    def create(cls, route: FlattenedRoute, config: TrackerConfig) -> "WalkSimulator":
        walk = resample(route, config.step_arc_length_m)
        logger.info(
            "walk: %d raw pts -> %d walk pts, about %.1f min",
            len(route.points), len(walk.points), len(walk.points) * config.tick_seconds / 60,
        )
        return cls(route=walk, tick_seconds=config.tick_seconds)

    @property
    def index(self) -> int:
        return self.idx

    @property
    def total_points(self) -> int:
        return len(self.route.points)

    def is_finished(self) -> bool:
        return self.idx >= len(self.route.points)

    def current_position(self) -> LatLon:
        if self.idx < len(self.route.points):
            return self.route.points[self.idx]
        return self.route.points[-1]

    def advance(self) -> LatLon:
        if self.is_finished():
            return self.route.points[-1]
        pos = self.route.points[self.idx]
        self.idx += 1
        return pos

    def current_instruction(self) -> Optional[RouteStep]:
        return self.route.instruction_at(self.idx)

    def reset(self) -> None:
        self.idx = 0

    def remaining_steps(self) -> int:
        return max(0, len(self.route.points) - self.idx)

    def eta_seconds(self) -> float:
        return self.remaining_steps() * self.tick_seconds

    def progress(self) -> float:
        return min(1.0, self.idx / len(self.route.points))
