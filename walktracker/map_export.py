from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import folium
from folium.plugins import HeatMap

from walktracker import polyline_codec
from walktracker.RouteBase import RouteInfo
from walktracker.TrackingSession import TrackingSession
from walktracker.errors import MalformedEncoding
from walktracker.geo import LatLon

logger = logging.getLogger(__name__)

PLANNED_COLOR = "#3498DB"
WALKED_COLOR = "#27AE60"
DOT_STROKE = "#1A6FB5"
DOT_FILL = "#2E86DE"
DOT_RADIUS_M = 12


def planned_points(info: Optional[RouteInfo], fallback: Sequence[LatLon]) -> Sequence[LatLon]:
    """Overview polyline when the response has a usable one, else the given points."""
    if info is not None and info.overview_polyline:
        try:
            pts = polyline_codec.decode(info.overview_polyline)
        except MalformedEncoding as e:
            logger.warning("overview polyline unusable (%s), drawing flattened route", e)
        else:
            if pts:
                return pts
    return fallback


def build_map(session: TrackingSession,
              planned: Optional[Sequence[LatLon]] = None,
              info: Optional[RouteInfo] = None,
              zoom_start: int = 16) -> folium.Map:
    if planned is None:
        planned = list(session.walked) or [session.current_position()]
    planned = list(planned_points(info, planned))

    m = folium.Map(location=planned[0], zoom_start=zoom_start)

    folium.PolyLine(planned, color=PLANNED_COLOR, weight=5, opacity=0.8, tooltip="Planned route").add_to(m)

    start_label = info.start_address if info is not None and info.start_address else "Start"
    end_label = info.end_address if info is not None and info.end_address else "End"
    folium.Marker(planned[0], tooltip=start_label, icon=folium.Icon(color="green")).add_to(m)
    folium.Marker(planned[-1], tooltip=end_label, icon=folium.Icon(color="red")).add_to(m)

    for dash in session.dashes():
        folium.PolyLine([dash.start, dash.end], color=WALKED_COLOR, weight=4, opacity=0.9).add_to(m)

    for dot in session.trail_dots:
        folium.Circle(
            location=dot,
            radius=DOT_RADIUS_M,
            color=DOT_STROKE,
            weight=2,
            fill=True,
            fill_color=DOT_FILL,
            fill_opacity=0.6,
        ).add_to(m)

    heat = [[lat, lng, float(n)] for lat, lng, n in session.grid.heat_points()]
    if heat:
        HeatMap(heat, radius=15, max_zoom=18).add_to(m)

    if session.walked:
        folium.Marker(session.walked[-1], tooltip="Walker", icon=folium.Icon(color="blue", icon="info-sign")).add_to(m)

    m.fit_bounds([
        [min(p[0] for p in planned), min(p[1] for p in planned)],
        [max(p[0] for p in planned), max(p[1] for p in planned)],
    ])
    return m


def save_map(session: TrackingSession,
             path: Union[str, Path],
             planned: Optional[Sequence[LatLon]] = None,
             info: Optional[RouteInfo] = None) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    build_map(session, planned=planned, info=info).save(str(path))
    logger.info("map written to %s", path)
    return path
