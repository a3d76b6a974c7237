"""
Encoded polyline format (signed delta, zig-zag, base-32 chunks, 1e-5 precision).

Decoding is strict: a string that stops inside a value, or after a latitude
without its longitude, raises MalformedEncoding instead of returning a
shortened route.
"""
from __future__ import annotations

from typing import Iterable, List, Tuple

import polyline

from walktracker.errors import MalformedEncoding
from walktracker.geo import LatLon, validate

PRECISION = 5
_FACTOR = 10 ** PRECISION
_MIN_BYTE = 63
_MAX_BYTE = 126


def _read_value(encoded: str, i: int) -> Tuple[int, int]:
    acc = 0
    shift = 0
    while True:
        if i >= len(encoded):
            raise MalformedEncoding(f"unterminated value at offset {i} in polyline of length {len(encoded)}")
        code = ord(encoded[i])
        if code < _MIN_BYTE or code > _MAX_BYTE:
            raise MalformedEncoding(f"invalid polyline byte {encoded[i]!r} at offset {i}")
        b = code - _MIN_BYTE
        i += 1
        acc |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    delta = ~(acc >> 1) if acc & 1 else acc >> 1
    return delta, i


def decode(encoded: str) -> List[LatLon]:
    points: List[LatLon] = []
    i = 0
    lat = 0
    lng = 0
    while i < len(encoded):
        dlat, i = _read_value(encoded, i)
        if i >= len(encoded):
            raise MalformedEncoding(f"latitude at offset {i} has no longitude")
        dlng, i = _read_value(encoded, i)
        lat += dlat
        lng += dlng
        points.append((lat / _FACTOR, lng / _FACTOR))
    return points


def encode(points: Iterable[LatLon]) -> str:
    checked = [validate(p) for p in points]
    return polyline.encode(checked, precision=PRECISION)
