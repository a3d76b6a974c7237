import math

from walktracker.geo import EARTH_RADIUS_M

DUSSELDORF = (51.202561, 6.780486)


def north_of(p, meters):
    """Point `meters` due north of p (along the meridian haversine is linear in latitude)."""
    return p[0] + math.degrees(meters / EARTH_RADIUS_M), p[1]
