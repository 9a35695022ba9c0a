#!/usr/bin/env python3
"""
Electron Density Provider Interface and Adapters

================================================================================
CONTRACT
================================================================================
The physical electron-density model is an external black box:

    density(position_km, altitude_km, year, month_day, decimal_hour)
        → electrons/m³

    position_km   body-fixed Cartesian position of the sample point
    altitude_km   geodetic altitude of that point
    year          e.g. 2024
    month_day     month*100 + day, e.g. 315 for March 15
    decimal_hour  universal time, hours

Providers are pure functions of their inputs: no caching across calls, no
side effects after initialize(). A provider whose backing data is missing
raises DataUnavailableError.

DensityAdapter is the only caller. It converts Cartesian points and MJD
epochs into the contract's inputs and clamps negative outputs to zero, so a
misbehaving model can never produce negative TEC.

================================================================================
IRI CONFIGURATION
================================================================================
The IRI Fortran core is driven by a block of global switches. The adapter
always runs it in one fixed configuration:

    coordinates   geographic (not geomagnetic)
    time          universal time
    outputs       electron density only; Te/Ti, ion composition, drifts,
                  spread-F probability and console messages disabled

Only the electron-density output is ever read.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable

import numpy as np

from ..constants import EARTH_EQUATORIAL_RADIUS_KM, EARTH_FLATTENING
from ..epoch import calendar_fields
from ..errors import DataUnavailableError
from .shell_geometry import cartesian_to_geodetic

logger = logging.getLogger(__name__)

# Callable used by the integrators: (position_km, epoch_mjd) -> electrons/m³
DensityFunction = Callable[[np.ndarray, float], float]


class ElectronDensityProvider(ABC):
    """
    Interface for the external electron-density model.

    Implementations must be side-effect free once initialize() has run.
    """

    def initialize(self) -> None:
        """One-time setup (load coefficient files, import native modules)."""

    @abstractmethod
    def density(
        self,
        position_km: np.ndarray,
        altitude_km: float,
        year: int,
        month_day: int,
        decimal_hour: float
    ) -> float:
        """
        Electron density at a point.

        Returns:
            electrons/m³; callers clamp negative values to zero
        """
        pass


class ConstantDensityProvider(ElectronDensityProvider):
    """Uniform density everywhere. Useful offline and for checking integrals."""

    def __init__(self, density_per_m3: float):
        self.density_per_m3 = float(density_per_m3)

    def density(self, position_km, altitude_km, year, month_day, decimal_hour) -> float:
        return self.density_per_m3


class IRI2016DensityProvider(ElectronDensityProvider):
    """
    Electron density from the International Reference Ionosphere.

    Wraps the iri2016 package (pip install iri2016; needs gfortran on first
    import). The import is deferred to initialize() so the rest of the
    package works without it.

    Usage:
        provider = IRI2016DensityProvider(equatorial_radius_km=6378.1363,
                                          flattening=0.0033527)
        provider.initialize()
    """

    def __init__(
        self,
        equatorial_radius_km: float = EARTH_EQUATORIAL_RADIUS_KM,
        flattening: float = EARTH_FLATTENING
    ):
        self.equatorial_radius_km = equatorial_radius_km
        self.flattening = flattening
        self._iri_module = None

    def initialize(self) -> None:
        if self._iri_module is not None:
            return
        try:
            import iri2016
        except ImportError as e:
            raise DataUnavailableError(
                "IRI-2016 not available (pip install iri2016 + gfortran required)"
            ) from e
        self._iri_module = iri2016
        logger.info("IRI-2016 model available and functional")

    def density(self, position_km, altitude_km, year, month_day, decimal_hour) -> float:
        if self._iri_module is None:
            raise DataUnavailableError("IRI-2016 provider used before initialize()")

        lat, lon, _ = cartesian_to_geodetic(
            position_km, self.equatorial_radius_km, self.flattening
        )
        month, day = divmod(month_day, 100)
        seconds = int(round(decimal_hour * 3600.0))
        hour, rem = divmod(seconds, 3600)
        minute, second = divmod(rem, 60)
        if hour == 24:
            hour, minute, second = 23, 59, 59
        when = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)

        try:
            result = self._iri_module.IRI(
                when,
                (altitude_km, altitude_km + 1.0, 1.0),
                lat,
                lon
            )
        except Exception as e:
            raise DataUnavailableError(f"Ionosphere data files not found: {e}") from e

        return float(result['ne'].values[0])


class DensityAdapter:
    """
    Bridges integration points to an ElectronDensityProvider.

    Computes the geodetic altitude and UT calendar fields of each sample,
    calls the provider, and clamps negative results to zero. Calling the
    adapter directly gives the DensityFunction the integrators use.
    """

    def __init__(
        self,
        provider: ElectronDensityProvider,
        equatorial_radius_km: float = EARTH_EQUATORIAL_RADIUS_KM,
        flattening: float = EARTH_FLATTENING
    ):
        self.provider = provider
        self.equatorial_radius_km = equatorial_radius_km
        self.flattening = flattening
        self._initialized = False
        self._init_lock = threading.Lock()
        self.stats = {
            'density_calls': 0,
            'negative_clamped': 0,
        }

    def initialize(self) -> None:
        with self._init_lock:
            if self._initialized:
                return
            self.provider.initialize()
            self._initialized = True
            logger.debug(f"Density provider initialized: {type(self.provider).__name__}")

    def __call__(self, position_km: np.ndarray, epoch_mjd: float) -> float:
        if not self._initialized:
            self.initialize()

        _, _, altitude_km = cartesian_to_geodetic(
            position_km, self.equatorial_radius_km, self.flattening
        )
        year, month_day, hours = calendar_fields(epoch_mjd)

        self.stats['density_calls'] += 1
        value = float(self.provider.density(
            np.asarray(position_km, dtype=float), altitude_km, year, month_day, hours
        ))
        if value < 0.0:
            self.stats['negative_clamped'] += 1
            return 0.0
        return value

    def get_stats(self) -> dict:
        return dict(self.stats)

