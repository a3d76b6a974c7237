from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import List, Optional

from walktracker.MockPath import MockPath
from walktracker.RouteBase import FlattenedRoute, RouteStep
from walktracker.RouteLike import PositionSource
from walktracker.WalkSimulator import WalkSimulator
from walktracker.config import TrackerConfig
from walktracker.dashed import DashedPath, DashSegment
from walktracker.density import DensityGrid
from walktracker.errors import EmptyRoute
from walktracker.geo import LatLon
from walktracker.storage import TickRecord

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = auto()
    TRACKING = auto()
    STOPPED = auto()
    ARRIVED = auto()


@dataclass(frozen=True)
class TickResult:
    position: LatLon
    index: int
    record: TickRecord
    instruction: Optional[RouteStep]
    instruction_changed: bool
    dot_dropped: bool
    cell_visits: Optional[int]
    eta_seconds: Optional[float]

    @property
    def icon(self) -> Optional[str]:
        return self.instruction.icon if self.instruction is not None else None


def build_source(config: TrackerConfig, route: Optional[FlattenedRoute] = None) -> PositionSource:
    if config.source == "mock":
        return MockPath.default(loop=config.mock_loop)
    if route is None:
        raise EmptyRoute("route source selected but no route given")
    return WalkSimulator.create(route, config)


@dataclass
class TrackingSession:
    source: PositionSource
    config: TrackerConfig = field(default_factory=TrackerConfig)
    phase: Phase = Phase.IDLE
    grid: DensityGrid = field(init=False)
    path: DashedPath = field(init=False)
    walked: List[LatLon] = field(default_factory=list, init=False)
    trail_dots: List[LatLon] = field(default_factory=list, init=False)
    last_instruction: str = field(default="", init=False)
    steps_since_dot: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.grid = DensityGrid(self.config.grid_cell_m)
        self.path = DashedPath(
            dash_length_m=self.config.dash_length_m,
            gap_length_m=self.config.gap_length_m,
            max_segments=self.config.max_dash_segments,
        )

    @classmethod
    def for_route(cls, route: Optional[FlattenedRoute], config: TrackerConfig) -> "TrackingSession":
        return cls(source=build_source(config, route), config=config)

    def start(self) -> None:
        self.source.reset()
        if self.source.is_finished():
            raise EmptyRoute("nothing to walk")
        self.grid.clear()
        self.path.clear()
        self.walked.clear()
        self.trail_dots.clear()
        self.last_instruction = ""
        self.steps_since_dot = 0
        self.phase = Phase.TRACKING
        logger.info("tracking started")

    def stop(self) -> None:
        if self.phase == Phase.TRACKING:
            self.phase = Phase.STOPPED
            logger.info("tracking stopped")

    @property
    def is_tracking(self) -> bool:
        return self.phase == Phase.TRACKING

    def tick(self, now_utc: datetime) -> Optional[TickResult]:
        if self.phase != Phase.TRACKING:
            return None
        if self.source.is_finished():
            self.phase = Phase.ARRIVED
            logger.info("arrived after %d points", len(self.walked))
            return None

        pos = self.source.advance()
        self.walked.append(pos)
        self.path.add(pos)

        instr = self.source.current_instruction()
        changed = False
        if instr is not None and instr.instruction_text != self.last_instruction:
            self.last_instruction = instr.instruction_text
            changed = True
            logger.debug("instruction: %s %s", instr.icon, instr.instruction_text)

        dot = False
        visits = None
        self.steps_since_dot += 1
        if self.steps_since_dot >= self.config.dot_every_n_steps:
            self.steps_since_dot = 0
            self.trail_dots.append(pos)
            visits = self.grid.record(pos)
            dot = True

        remaining = self.source.remaining_steps()
        eta = remaining * self.config.tick_seconds if remaining is not None else None

        return TickResult(
            position=pos,
            index=self.source.index,
            record=TickRecord(latitude=pos[0], longitude=pos[1], timestamp_utc=now_utc),
            instruction=instr,
            instruction_changed=changed,
            dot_dropped=dot,
            cell_visits=visits,
            eta_seconds=eta,
        )

    def dashes(self) -> List[DashSegment]:
        return self.path.segments()

    def current_position(self) -> LatLon:
        return self.source.current_position()
