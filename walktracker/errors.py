class WalkTrackerError(Exception):
    pass


class MalformedEncoding(WalkTrackerError, ValueError):
    """Encoded polyline ends mid-value or contains bytes outside the alphabet."""


class EmptyRoute(WalkTrackerError, ValueError):
    """No usable points after building or resampling a route."""


class InvalidConfig(WalkTrackerError, ValueError):
    """A pace, tick, dash, gap or cell size is not a positive number."""


class InvalidCoordinate(WalkTrackerError, ValueError):
    """Latitude or longitude is NaN or outside the WGS84 range."""


class MalformedRoute(WalkTrackerError, ValueError):
    """Directions response parses as JSON but is not shaped like routes[0].legs[0].steps."""
