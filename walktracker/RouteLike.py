from typing import Optional, Protocol

from walktracker.RouteBase import RouteStep
from walktracker.geo import LatLon


class PositionSource(Protocol):
    @property
    def index(self) -> int: ...

    def reset(self) -> None: ...

    def advance(self) -> LatLon: ...

    def is_finished(self) -> bool: ...

    def current_position(self) -> LatLon: ...

    def current_instruction(self) -> Optional[RouteStep]: ...

    def remaining_steps(self) -> Optional[int]: ...
