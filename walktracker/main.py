import argparse
import logging
import time
import webbrowser
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from walktracker import logging_config
from walktracker.TrackingSession import TrackingSession
from walktracker.config import TrackerConfig, load_config
from walktracker.directions import load_directions_or_default
from walktracker.errors import EmptyRoute, InvalidConfig
from walktracker.map_export import save_map
from walktracker.storage import JsonlPointStore, write_json_atomic

logger = logging.getLogger("walktracker")

MOCK_TICKS = 100


def format_eta(seconds: Optional[float]) -> str:
    if seconds is None:
        return "--:--"
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


def snapshot(session: TrackingSession, t_s: float) -> Dict[str, Any]:
    lat, lng = session.current_position()
    instr = session.source.current_instruction()
    remaining = session.source.remaining_steps()
    return {
        "t_s": t_s,
        "phase": session.phase.name,
        "walker": {"lat": lat, "lng": lng},
        "instruction": instr.instruction_text if instr is not None else "",
        "icon": instr.icon if instr is not None else "",
        "eta_s": remaining * session.config.tick_seconds if remaining is not None else None,
        "trail_dots": [{"lat": p[0], "lng": p[1]} for p in session.trail_dots],
        "heat": [{"lat": la, "lng": ln, "count": n} for la, ln, n in session.grid.heat_points()],
    }


def run(session: TrackingSession,
        store: Optional[JsonlPointStore] = None,
        max_ticks: Optional[int] = None,
        realtime: bool = False,
        positions_path: Optional[Path] = None,
        started_at: Optional[datetime] = None) -> int:
    """Drive one session to arrival (or max_ticks). Returns the number of ticks emitted."""
    if started_at is None:
        started_at = datetime.now(timezone.utc)
    dt = session.config.tick_seconds

    session.start()
    ticks = 0
    t = 0.0
    while session.is_tracking and (max_ticks is None or ticks < max_ticks):
        now = datetime.now(timezone.utc) if realtime else started_at + timedelta(seconds=t)
        res = session.tick(now)
        if res is None:
            break
        ticks += 1
        if store is not None:
            store.append(res.record)
        if res.instruction_changed and res.instruction is not None:
            logger.info("%s %s  (eta %s)", res.icon, res.instruction.instruction_text, format_eta(res.eta_seconds))
        if positions_path is not None:
            write_json_atomic(snapshot(session, t), positions_path)

        t += dt
        if realtime:
            time.sleep(dt)

    if session.is_tracking and session.source.is_finished():
        # flips the phase to ARRIVED
        session.tick(started_at + timedelta(seconds=t))
    session.stop()
    logger.info("%d ticks, phase %s, %d trail dots, %d grid cells",
                ticks, session.phase.name, len(session.trail_dots), len(session.grid))
    return ticks


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Simulate a walk along a directions route.")
    p.add_argument("--directions", type=Path, default=None,
                   help="Directions response JSON (routes[0].legs[0].steps). Defaults to the bundled route.")
    p.add_argument("--config", type=Path, default=None, help="TrackerConfig JSON file.")
    p.add_argument("--source", choices=["route", "mock"], default=None, help="Override config source.")
    p.add_argument("--records", type=Path, default=None, help="Append tick records to this JSONL file.")
    p.add_argument("--positions", type=Path, default=None, help="Rewrite a JSON snapshot here every tick.")
    p.add_argument("--map", type=Path, default=None, help="Write a folium HTML map here at the end.")
    p.add_argument("--open", action="store_true", help="Open the map in a browser.")
    p.add_argument("--ticks", type=int, default=None, help="Stop after this many ticks.")
    p.add_argument("--realtime", action="store_true", help="Sleep tick_seconds between ticks.")
    p.add_argument("--log-level", default="INFO")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging_config.configure(args.log_level)

    try:
        config = load_config(args.config) if args.config else TrackerConfig()
        if args.source is not None:
            config = replace(config, source=args.source)
    except InvalidConfig as e:
        logger.error("invalid configuration: %s", e)
        return 2

    if args.ticks is None and config.source == "mock" and config.mock_loop and not args.realtime:
        logger.warning("looping mock path never arrives, stopping after %d ticks", MOCK_TICKS)
        args.ticks = MOCK_TICKS

    route, info = load_directions_or_default(args.directions)
    if info.end_address:
        logger.info("%s -> %s (%s, %s)", info.start_address, info.end_address, info.distance_text, info.duration_text)

    try:
        session = TrackingSession.for_route(route, config)
        store = JsonlPointStore(args.records) if args.records else None
        run(session, store=store, max_ticks=args.ticks, realtime=args.realtime, positions_path=args.positions)
    except EmptyRoute as e:
        logger.error("cannot start tracking: %s", e)
        return 1

    if args.map is not None:
        out = save_map(session, args.map, planned=route.points if config.source == "route" else None,
                       info=info if config.source == "route" else None)
        if args.open:
            webbrowser.open(out.resolve().as_uri())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
