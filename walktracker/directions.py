"""
Directions response -> FlattenedRoute.

The response is expected pre-fetched (no network access here): a dict shaped
like routes[0].legs[0].steps[i] with polyline.points, html_instructions and an
optional maneuver per step.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from walktracker import polyline_codec
from walktracker.RouteBase import FlattenedRoute, Maneuver, RouteInfo, RouteStep
from walktracker.errors import EmptyRoute, InvalidCoordinate, MalformedEncoding, MalformedRoute
from walktracker.geo import LatLon, is_valid, same_point

logger = logging.getLogger(__name__)

DEFAULT_DIRECTIONS = Path(__file__).resolve().parent / "data" / "sample_directions.json"

_TAG_RE = re.compile(r"<.*?>")
_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class StepSource:
    encoded_polyline: str
    instruction_html: str = ""
    maneuver: Optional[str] = None


def strip_html(markup: Optional[str]) -> str:
    if not markup:
        return ""
    return _WS_RE.sub(" ", _TAG_RE.sub(" ", markup)).strip()


# -------------------------
# response parsing
# -------------------------
def _text(node: Any, *keys: str) -> str:
    for k in keys:
        if not isinstance(node, dict):
            return ""
        node = node.get(k)
    return node if isinstance(node, str) else ""


def _object(node: Any, what: str) -> Dict[str, Any]:
    if not isinstance(node, dict):
        raise MalformedRoute(f"{what} must be an object, got {type(node).__name__}")
    return node


def _array(node: Dict[str, Any], key: str, what: str) -> List[Any]:
    items = node.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise MalformedRoute(f"{what} must be an array, got {type(items).__name__}")
    return items


def parse_directions(payload: Dict[str, Any]) -> Tuple[List[StepSource], RouteInfo]:
    payload = _object(payload, "directions response")
    routes = _array(payload, "routes", "routes")
    if not routes:
        raise EmptyRoute(f"directions response has no routes (status={payload.get('status')!r})")
    route = _object(routes[0], "routes[0]")
    legs = _array(route, "legs", "routes[0].legs")
    if not legs:
        raise EmptyRoute("directions route has no legs")
    leg = _object(legs[0], "routes[0].legs[0]")

    steps: List[StepSource] = []
    for i, step in enumerate(_array(leg, "steps", "routes[0].legs[0].steps")):
        step = _object(step, f"step {i}")
        maneuver = step.get("maneuver")
        steps.append(StepSource(
            encoded_polyline=_text(step, "polyline", "points"),
            instruction_html=_text(step, "html_instructions"),
            maneuver=maneuver if isinstance(maneuver, str) else None,
        ))
    if not steps:
        raise EmptyRoute("directions leg has no steps")

    info = RouteInfo(
        start_address=_text(leg, "start_address"),
        end_address=_text(leg, "end_address"),
        distance_text=_text(leg, "distance", "text"),
        duration_text=_text(leg, "duration", "text"),
        overview_polyline=_text(route, "overview_polyline", "points"),
    )
    return steps, info


# -------------------------
# flattening
# -------------------------
def build_route(steps: Iterable[StepSource]) -> FlattenedRoute:
    points: List[LatLon] = []
    anchors: List[Tuple[int, StepSource]] = []

    for n, step in enumerate(steps):
        decoded = polyline_codec.decode(step.encoded_polyline)
        for j, p in enumerate(decoded):
            if not is_valid(p):
                raise InvalidCoordinate(f"step {n} point {j} out of range: {p!r}")

        anchors.append((len(points), step))
        for p in decoded:
            # drops the boundary point shared with the previous step, and any repeat inside a step
            if points and same_point(points[-1], p):
                continue
            points.append(p)

    if not points:
        raise EmptyRoute("no points decoded from any step")

    last = len(points) - 1
    route_steps = [
        RouteStep(
            start_point_index=min(idx, last),
            instruction_text=strip_html(src.instruction_html),
            maneuver=Maneuver.parse(src.maneuver),
        )
        for idx, src in anchors
    ]
    logger.debug("flattened %d steps into %d points", len(route_steps), len(points))
    return FlattenedRoute(points=tuple(points), steps=tuple(route_steps))


def route_from_response(payload: Dict[str, Any]) -> Tuple[FlattenedRoute, RouteInfo]:
    steps, info = parse_directions(payload)
    return build_route(steps), info


def load_directions(path: Union[str, Path]) -> Tuple[FlattenedRoute, RouteInfo]:
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    route, info = route_from_response(payload)
    logger.info("loaded route %s: %d points, %d instructions", path.name, len(route.points), len(route.steps))
    return route, info


def load_default_directions() -> Tuple[FlattenedRoute, RouteInfo]:
    return load_directions(DEFAULT_DIRECTIONS)


def load_directions_or_default(path: Optional[Union[str, Path]]) -> Tuple[FlattenedRoute, RouteInfo]:
    """Load path; on a missing, unreadable or corrupt route use the bundled sample."""
    if path is None:
        return load_default_directions()
    try:
        return load_directions(path)
    except (OSError, json.JSONDecodeError, MalformedEncoding, MalformedRoute, EmptyRoute,
            InvalidCoordinate, UnicodeDecodeError) as e:
        logger.warning("could not load %s (%s), using bundled route", path, e)
        return load_default_directions()
