"""
Total Electron Content along the in-shell signal path.

TEC = ∫ Ne ds  (electrons/m²), Montenbruck & Gill eq. 6.70.

The integral is a fixed 200-interval midpoint sum: the density model is
expensive, so the number of evaluations per measurement is bounded rather
than adaptive.
"""

import logging
from typing import Optional

import numpy as np

from ..constants import NUM_OF_INTERVALS, KM_TO_M
from .electron_density import DensityFunction
from .shell_geometry import PathSegment

logger = logging.getLogger(__name__)


class TECIntegrator:
    """Midpoint-rule TEC integration along a PathSegment."""

    def __init__(self, density_fn: DensityFunction, num_intervals: int = NUM_OF_INTERVALS):
        if num_intervals < 1:
            raise ValueError(f"num_intervals must be >= 1, got {num_intervals}")
        self.density_fn = density_fn
        self.num_intervals = num_intervals

    def integrate(self, segment: Optional[PathSegment], epoch_mjd: float) -> float:
        """
        Args:
            segment: In-shell path, or None if the signal misses the shell
            epoch_mjd: Measurement epoch (UTC MJD)

        Returns:
            TEC in electrons/m²
        """
        if segment is None:
            return 0.0

        nodes = segment.subdivide(self.num_intervals)
        midpoints = 0.5 * (nodes[:-1] + nodes[1:])
        ds = segment.length_km / self.num_intervals * KM_TO_M   # m

        tec = 0.0
        for point in midpoints:
            tec += self.density_fn(point, epoch_mjd) * ds

        logger.debug(f"TEC = {tec / 1.0e16:.6f} TECU over {segment.length_km:.1f} km")
        return tec
