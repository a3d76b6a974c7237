from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickRecord:
    latitude: float
    longitude: float
    timestamp_utc: datetime

    def to_json(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp_utc": self.timestamp_utc.isoformat(),
        }


class JsonlPointStore:
    """Append-only JSON-lines file, one TickRecord per line. Never read back here."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.count = 0

    def append(self, record: TickRecord) -> None:
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record.to_json()) + "\n")
        self.count += 1

    def extend(self, records: Iterable[TickRecord]) -> None:
        lines = [json.dumps(r.to_json()) + "\n" for r in records]
        if not lines:
            return
        with self.path.open("a", encoding="utf-8") as f:
            f.writelines(lines)
        self.count += len(lines)


def write_json_atomic(data: Any, path: Union[str, Path], attempts: int = 30, backoff_s: float = 0.01) -> None:
    # temp file next to the target, then os.replace; retried while a reader holds the target open
    path = Path(path)
    folder = path.resolve().parent
    folder.mkdir(parents=True, exist_ok=True)
    last_err: Optional[PermissionError] = None

    for attempt in range(1, attempts + 1):
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}_", suffix=".json", dir=str(folder))
        replaced = False
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            replaced = True
        except PermissionError as e:
            last_err = e
            logger.debug("snapshot %s busy (attempt %d/%d): %s", path.name, attempt, attempts, e)
            time.sleep(backoff_s)
        finally:
            if not replaced and os.path.exists(tmp_name):
                os.remove(tmp_name)
        if replaced:
            return

    raise last_err if last_err is not None else PermissionError(f"could not replace {path}")
