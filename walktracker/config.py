from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union

from walktracker.errors import InvalidConfig

logger = logging.getLogger(__name__)

SOURCES = ("route", "mock")


@dataclass(frozen=True)
class TrackerConfig:
    pace_mps: float = 5.0
    tick_seconds: float = 0.2
    dash_length_m: float = 20.0
    gap_length_m: float = 10.0
    grid_cell_m: float = 10.0
    dot_every_n_steps: int = 20  # one trail dot every ~20 m at the default pace
    max_dash_segments: int = 1000
    source: str = "route"  # "route" | "mock"
    mock_loop: bool = True

    def __post_init__(self) -> None:
        for name in ("pace_mps", "tick_seconds", "dash_length_m", "gap_length_m", "grid_cell_m"):
            check_positive(name, getattr(self, name))
        for name in ("dot_every_n_steps", "max_dash_segments"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int) or v < 1:
                raise InvalidConfig(f"{name} must be an integer >= 1, got {v!r}")
        if self.source not in SOURCES:
            raise InvalidConfig(f"source must be one of {SOURCES}, got {self.source!r}")

    @property
    def step_arc_length_m(self) -> float:
        return self.pace_mps * self.tick_seconds

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TrackerConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("ignoring unknown config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})


def check_positive(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfig(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidConfig(f"{name} must be > 0, got {value!r}")
    return float(value)


def load_config(path: Union[str, Path]) -> TrackerConfig:
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise InvalidConfig(f"{path}: expected a JSON object")
    return TrackerConfig.from_mapping(data)
