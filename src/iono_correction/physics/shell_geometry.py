#!/usr/bin/env python3
"""
Shell Geometry - Clip the Signal Path to the Ionosphere Shell

================================================================================
PURPOSE
================================================================================
The signal travels along the straight segment from the ground station S to
the spacecraft C. Only the part of that segment lying inside a sphere of
radius R = body_radius + 2000 km contributes electrons.

================================================================================
THEORY: LINE / SPHERE INTERSECTION
================================================================================
Points on the line are P(t) = S + t·d with d = C - S, so t = 0 is the
station and t = 1 the spacecraft. |P(t)| = R gives the quadratic

    a·t² + b·t + c = 0,   a = d·d,   b = 2 S·d,   c = S·S - R²

    ┌─────────────────────────────────────────────────────────────────┐
    │                                               ● C (t = 1)       │
    │                                              ╱                  │
    │           ═══════════ shell (R) ════════════●═══  exit: t2      │
    │                                            ╱                    │
    │                                           ╱   (in-shell path)   │
    │           ─────────── body ──────────────● S (t = 0)            │
    │                                                                 │
    │   Entry root t1 < 0 lies behind the station and clamps to 0.    │
    └─────────────────────────────────────────────────────────────────┘

- discriminant <= 0: the line misses (or grazes) the shell
- both roots < 0 or both > 1: the shell lies beyond one end of the segment
- otherwise the in-shell part is [max(t1, 0), min(t2, 1)]; the signal is a
  bounded segment, not an infinite ray.

The geodetic conversion at the bottom of the module gives the altitude of
integration points above an oblate reference body, which is what the
density model is indexed by.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ..constants import IONOSPHERE_MAX_ALTITUDE_KM, KM_TO_M

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PathSegment:
    """Portion of the station→spacecraft line inside the shell (km)."""
    start: np.ndarray       # station side
    end: np.ndarray         # spacecraft side
    t_start: float          # line parameter of start, in [0, 1]
    t_end: float            # line parameter of end, in [0, 1]

    def __eq__(self, other):
        if not isinstance(other, PathSegment):
            return NotImplemented
        return (np.array_equal(self.start, other.start)
                and np.array_equal(self.end, other.end)
                and self.t_start == other.t_start
                and self.t_end == other.t_end)

    @property
    def vector(self) -> np.ndarray:
        return self.end - self.start

    @property
    def length_km(self) -> float:
        return float(np.linalg.norm(self.vector))

    @property
    def length_m(self) -> float:
        return self.length_km * KM_TO_M

    @property
    def direction(self) -> np.ndarray:
        """Unit vector from start to end."""
        return self.vector / self.length_km

    def subdivide(self, num_intervals: int) -> np.ndarray:
        """Evenly spaced nodes from start to end, shape (num_intervals + 1, 3)."""
        fractions = np.linspace(0.0, 1.0, num_intervals + 1)
        return self.start + np.outer(fractions, self.vector)


def intersect_shell(
    station_km,
    spacecraft_km,
    body_radius_km: float,
    shell_altitude_km: float = IONOSPHERE_MAX_ALTITUDE_KM
) -> Optional[PathSegment]:
    """
    Clip the station-spacecraft segment to the ionosphere shell.

    Args:
        station_km: Station position, body-fixed (km)
        spacecraft_km: Spacecraft position, body-fixed (km)
        body_radius_km: Reference body radius (km)
        shell_altitude_km: Shell top above the body (km)

    Returns:
        PathSegment inside the shell, or None when the segment never
        enters it.
    """
    s = np.asarray(station_km, dtype=float)
    d = np.asarray(spacecraft_km, dtype=float) - s
    radius = body_radius_km + shell_altitude_km

    a = float(d @ d)
    if a == 0.0:
        return None
    b = 2.0 * float(s @ d)
    c = float(s @ s) - radius * radius

    discriminant = b * b - 4.0 * a * c
    if discriminant <= 0.0:
        logger.debug("Signal path does not cross the ionosphere shell")
        return None

    root = math.sqrt(discriminant)
    t1 = (-b - root) / (2.0 * a)
    t2 = (-b + root) / (2.0 * a)

    if (t1 > 1.0 and t2 > 1.0) or (t1 < 0.0 and t2 < 0.0):
        logger.debug(f"Shell crossing outside segment (t1={t1:.4f}, t2={t2:.4f})")
        return None

    t1 = max(t1, 0.0)
    t2 = min(t2, 1.0)

    return PathSegment(start=s + t1 * d, end=s + t2 * d, t_start=t1, t_end=t2)


def cartesian_to_geodetic(
    position_km,
    equatorial_radius_km: float,
    flattening: float,
    tolerance: float = 1e-12,
    max_iterations: int = 20
) -> Tuple[float, float, float]:
    """
    Body-fixed Cartesian position to geodetic coordinates.

    Uses the classic fixed-point iteration on latitude, converging in a few
    steps for any altitude of interest here.

    Returns:
        (latitude_deg, longitude_deg, altitude_km)
    """
    x, y, z = (float(v) for v in position_km)
    e2 = flattening * (2.0 - flattening)
    p = math.hypot(x, y)
    lon = math.atan2(y, x)

    if p < 1e-9:
        # On the polar axis
        polar_radius = equatorial_radius_km * (1.0 - flattening)
        lat = math.copysign(math.pi / 2.0, z) if z != 0.0 else 0.0
        return math.degrees(lat), 0.0, abs(z) - polar_radius

    lat = math.atan2(z, p * (1.0 - e2))
    for _ in range(max_iterations):
        sin_lat = math.sin(lat)
        n = equatorial_radius_km / math.sqrt(1.0 - e2 * sin_lat * sin_lat)
        new_lat = math.atan2(z + n * e2 * sin_lat, p)
        if abs(new_lat - lat) < tolerance:
            lat = new_lat
            break
        lat = new_lat

    sin_lat = math.sin(lat)
    cos_lat = math.cos(lat)
    n = equatorial_radius_km / math.sqrt(1.0 - e2 * sin_lat * sin_lat)
    if abs(cos_lat) > 1e-10:
        alt = p / cos_lat - n
    else:
        alt = abs(z) / abs(sin_lat) - n * (1.0 - e2)

    return math.degrees(lat), math.degrees(lon), alt
