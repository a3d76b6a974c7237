"""
Simulated walks along pre-fetched directions routes.

Decodes the route, resamples it to one point per tick and produces the
positions, turn instructions, trail dots, dashed walked path and visit
density a map front end needs.
"""
from walktracker.RouteBase import FlattenedRoute, Maneuver, RouteInfo, RouteStep  # noqa: F401
from walktracker.TrackingSession import Phase, TickResult, TrackingSession  # noqa: F401
from walktracker.WalkSimulator import WalkSimulator, resample  # noqa: F401
from walktracker.config import TrackerConfig  # noqa: F401
from walktracker.errors import (  # noqa: F401
    EmptyRoute,
    InvalidConfig,
    InvalidCoordinate,
    MalformedEncoding,
    MalformedRoute,
    WalkTrackerError,
)

__version__ = "0.1.0"
