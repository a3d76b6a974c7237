"""
Dash/gap patterns along a polyline, measured in metres along each pair.

Only the visible dashes are returned; gaps are whatever lies between them.
Pairs with a NaN or out-of-range end are skipped so a single bad point
costs one pair, not the whole drawing.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Sequence

from walktracker.config import check_positive
from walktracker.errors import InvalidConfig
from walktracker.geo import LatLon, haversine_m, interpolate_at_distance, is_valid, path_length_m

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashSegment:
    start: LatLon
    end: LatLon

    def length_m(self) -> float:
        return haversine_m(self.start, self.end)


def _pair_dashes(a: LatLon, b: LatLon, dash_m: float, gap_m: float) -> List[DashSegment]:
    d = haversine_m(a, b)
    if d < dash_m:
        return [DashSegment(a, b)]

    out: List[DashSegment] = []
    pattern = dash_m + gap_m
    c = 0.0
    while c < d:
        end = min(c + dash_m, d)
        if end > c:
            out.append(DashSegment(interpolate_at_distance(a, b, c), interpolate_at_distance(a, b, end)))
        c += pattern
    return out


def segment(points: Sequence[LatLon],
            dash_length_m: float,
            gap_length_m: float,
            max_segments: Optional[int] = None) -> List[DashSegment]:
    dash_m = check_positive("dash_length_m", dash_length_m)
    gap_m = check_positive("gap_length_m", gap_length_m)

    segments: List[DashSegment] = []
    for i in range(len(points) - 1):
        a, b = points[i], points[i + 1]
        if not (is_valid(a) and is_valid(b)):
            logger.debug("skipping pair %d with invalid coordinate: %r -> %r", i, a, b)
            continue
        for dash in _pair_dashes(a, b, dash_m, gap_m):
            if max_segments is not None and len(segments) >= max_segments:
                return segments
            segments.append(dash)
    return segments


@dataclass
class DashedPath:
    dash_length_m: float = 20.0
    gap_length_m: float = 10.0
    max_segments: int = 1000
    min_spacing_m: float = 1.0
    max_points: int = 10000
    points: Deque[LatLon] = field(default_factory=deque, init=False)

    def __post_init__(self) -> None:
        check_positive("dash_length_m", self.dash_length_m)
        check_positive("gap_length_m", self.gap_length_m)
        check_positive("max_segments", self.max_segments)
        check_positive("min_spacing_m", self.min_spacing_m)
        check_positive("max_points", self.max_points)
        if isinstance(self.max_points, bool) or not isinstance(self.max_points, int):
            raise InvalidConfig(f"max_points must be an integer, got {self.max_points!r}")
        self.points = deque(maxlen=self.max_points)

    def add(self, point: LatLon) -> bool:
        if not is_valid(point):
            return False
        if self.points and haversine_m(self.points[-1], point) < self.min_spacing_m:
            return False
        self.points.append(point)
        return True

    def clear(self) -> None:
        self.points.clear()

    def segments(self) -> List[DashSegment]:
        return segment(list(self.points), self.dash_length_m, self.gap_length_m, self.max_segments)

    def total_distance_m(self) -> float:
        return path_length_m(list(self.points))
