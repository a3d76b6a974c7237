"""
Visit-density grid for heatmaps.

Coordinates are bucketed into cells roughly cell_m metres on a side. The
longitude step depends on the latitude of each point (1 degree of longitude is
111320 * cos(lat) metres), so it is recomputed for every point.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, NamedTuple, Optional, Tuple

from walktracker.config import check_positive
from walktracker.geo import METERS_PER_DEGREE_LAT, LatLon, is_valid, validate

logger = logging.getLogger(__name__)


class GridCell(NamedTuple):
    cell_x: int
    cell_y: int


def cell_for(coord: LatLon, cell_m: float) -> GridCell:
    cell_m = check_positive("grid_cell_m", cell_m)
    lat, lng = validate(coord)
    lat_step = cell_m / METERS_PER_DEGREE_LAT
    lng_step = cell_m / (METERS_PER_DEGREE_LAT * math.cos(math.radians(lat)))
    return GridCell(math.floor(lat / lat_step), math.floor(lng / lng_step))


@dataclass
class DensityGrid:
    cell_m: float = 10.0
    counts: Dict[GridCell, int] = field(default_factory=dict, init=False)
    anchors: Dict[GridCell, LatLon] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self.cell_m = check_positive("grid_cell_m", self.cell_m)

    def record(self, coord: LatLon) -> Optional[int]:
        """Count a visit; returns the cell's new count, or None for a skipped invalid coordinate."""
        if not is_valid(coord):
            logger.debug("skipping invalid coordinate %r", coord)
            return None
        cell = cell_for(coord, self.cell_m)
        n = self.counts.get(cell, 0) + 1
        self.counts[cell] = n
        self.anchors.setdefault(cell, (float(coord[0]), float(coord[1])))
        return n

    def count(self, coord: LatLon) -> int:
        if not is_valid(coord):
            return 0
        return self.counts.get(cell_for(coord, self.cell_m), 0)

    def clear(self) -> None:
        self.counts.clear()
        self.anchors.clear()

    def __len__(self) -> int:
        return len(self.counts)

    def items(self) -> Iterator[Tuple[GridCell, int]]:
        return iter(self.counts.items())

    def max_count(self) -> int:
        return max(self.counts.values(), default=0)

    def heat_points(self) -> Iterator[Tuple[float, float, int]]:
        for cell, n in self.counts.items():
            lat, lng = self.anchors[cell]
            yield lat, lng, n
