#!/usr/bin/env python3
"""
Bending Angle Solver - Elevation Correction from Ionospheric Refraction

================================================================================
THEORY
================================================================================
Across a thin layer boundary Snell's law n_i·sin(θ_i) = n_{i+1}·sin(θ_{i+1})
gives, to first order in the index change,

    Δθ ≈ ((n_{i+1} - n_i) / n_i) · tan(θ)

where θ is the angle of incidence: the angle between the propagation
direction and the local radius vector. With the phase refractive index

    n = 1 - 40.3 · Ne / f²

the path is walked BACKWARD in 200 equal steps, from the spacecraft-side
end of the in-shell segment to the station-side end:

    end (spacecraft side)
      ● θ = acos(û · r̂_end),  Δθ = 0
      │
      ● r_i = r_{i+1} - dR
      │     Δθ += ((n_{i+1} - n_i) / n_i) · tan θ
      │     θ   = acos(û · r̂_i) - Δθ
      ⋮
      ● start (station side)

The elevation correction is -Δθ (elevation is π/2 - θ).

================================================================================
NUMERICAL BEHAVIOUR
================================================================================
Near grazing incidence (θ → π/2) tan θ diverges, and as n → 0 (signal
frequency approaching the plasma frequency) the ratio does too. Neither is
clamped: large outputs are the model's answer in those regimes and the
caller decides what to do with them. At the critical density (n = 0)
the division follows IEEE rules and the result is inf or NaN.

Direction matters. The walk always starts at segment.end; swapping the
station and spacecraft reverses the walk, and the two orderings agree only
to first order (tan θ is sampled at the other end of each step).
"""

import logging
import math
from typing import Optional

import numpy as np

from ..constants import NUM_OF_INTERVALS, IONO_COEFFICIENT
from .electron_density import DensityFunction
from .shell_geometry import PathSegment

logger = logging.getLogger(__name__)


def refractive_index(density_per_m3: float, frequency_hz: float) -> float:
    """Phase refractive index of the ionosphere (unmagnetised, collisionless)."""
    return 1.0 - IONO_COEFFICIENT * density_per_m3 / (frequency_hz * frequency_hz)


def _incidence_angle(direction: np.ndarray, position: np.ndarray) -> np.float64:
    # A node on the body centre gives NaN
    cos_theta = np.float64(direction @ position) / np.float64(np.linalg.norm(position))
    # acos domain only; rounding can push |cos| a hair past 1
    return np.arccos(np.clip(cos_theta, -1.0, 1.0))


class BendingAngleSolver:
    """Backward refraction trace along a PathSegment."""

    def __init__(self, density_fn: DensityFunction, num_intervals: int = NUM_OF_INTERVALS):
        if num_intervals < 1:
            raise ValueError(f"num_intervals must be >= 1, got {num_intervals}")
        self.density_fn = density_fn
        self.num_intervals = num_intervals

    def solve(
        self,
        segment: Optional[PathSegment],
        epoch_mjd: float,
        frequency_hz: float
    ) -> float:
        """
        Elevation-angle correction for the path.

        Args:
            segment: In-shell path, or None if the signal misses the shell
            epoch_mjd: Measurement epoch (UTC MJD)
            frequency_hz: Signal frequency

        Returns:
            Elevation correction in radians (-Δθ)
        """
        if segment is None:
            return 0.0

        direction = segment.direction
        d_r = segment.vector / self.num_intervals

        # float64 with IEEE semantics: n_i == 0 (critical density) and
        # through-centre nodes give inf/NaN instead of raising
        with np.errstate(divide='ignore', invalid='ignore'):
            r_next = segment.end
            theta = _incidence_angle(direction, r_next)
            n_next = np.float64(refractive_index(self.density_fn(r_next, epoch_mjd), frequency_hz))

            d_theta = np.float64(0.0)
            for _ in range(self.num_intervals):
                r_i = r_next - d_r
                n_i = np.float64(refractive_index(self.density_fn(r_i, epoch_mjd), frequency_hz))

                d_theta += ((n_next - n_i) / n_i) * np.tan(theta)

                r_next = r_i
                theta = _incidence_angle(direction, r_next) - d_theta
                n_next = n_i

        logger.debug(f"Elevation correction = {math.degrees(-d_theta) * 1000.0:.9f} mdeg")
        return float(-d_theta)
