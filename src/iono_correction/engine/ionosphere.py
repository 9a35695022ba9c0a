#!/usr/bin/env python3
"""
Ionosphere Correction Engine - Model Dispatch

================================================================================
PURPOSE
================================================================================
Single entry point for measurement models: given a CorrectionRequest, return
the range / elevation / time corrections of the selected model.

    CorrectionRequest ──▶ IonosphereCorrection.correction()
                               │
               ┌───────────────┴────────────────┐
               ▼                                ▼
         IRI2007Correction               TRK223Correction
     ValidityWindowGuard.check        TRK223Evaluator.range_correction
     intersect_shell                  (store lookup, form evaluation,
     TECIntegrator.integrate           S-band rescaling)
     BendingAngleSolver.solve
               │                                │
               └───────────────┬────────────────┘
                               ▼
                  CorrectionResult(range, angle, time = range / c)

Each model is a CorrectionStrategy registered under its CorrectionModel
member; adding a model means adding a strategy, not touching callers.

================================================================================
PHYSICS MODEL (IRI2007)
================================================================================
    drho   = 40.3 × TEC / f²        (m)     Montenbruck & Gill eq. 6.69
    dphi   = bending angle           (rad)
    dtime  = drho / c                (s)

EMPIRICAL MODEL (TRK-2-23)
    drho from the DSN calibration, dphi = 0, dtime = drho / c
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from ..calibration.data_files import CalibrationData, load_calibration_data
from ..calibration.trk223_evaluator import TRK223Evaluator
from ..calibration.validity_window import ValidityWindowGuard
from ..constants import (
    EARTH_EQUATORIAL_RADIUS_KM,
    EARTH_FLATTENING,
    IONO_COEFFICIENT,
    IONOSPHERE_MAX_ALTITUDE_KM,
    NUM_OF_INTERVALS,
)
from ..errors import ConfigurationError
from ..interfaces.correction_result import CorrectionModel, CorrectionRequest, CorrectionResult
from ..physics.bending_angle import BendingAngleSolver
from ..physics.electron_density import (
    ConstantDensityProvider,
    DensityAdapter,
    DensityFunction,
    ElectronDensityProvider,
    IRI2016DensityProvider,
)
from ..physics.shell_geometry import intersect_shell
from ..physics.tec_integrator import TECIntegrator

logger = logging.getLogger(__name__)


class CorrectionStrategy(ABC):
    """A correction model: request in, CorrectionResult out."""

    model: CorrectionModel

    @abstractmethod
    def evaluate(self, request: CorrectionRequest) -> CorrectionResult:
        pass


class IRI2007Correction(CorrectionStrategy):
    """Physics model: shell clipping, TEC and refraction through a density model."""

    model = CorrectionModel.IRI2007

    def __init__(
        self,
        density_fn: DensityFunction,
        guard: ValidityWindowGuard,
        num_intervals: int = NUM_OF_INTERVALS,
        shell_altitude_km: float = IONOSPHERE_MAX_ALTITUDE_KM
    ):
        self.guard = guard
        self.shell_altitude_km = shell_altitude_km
        self.tec_integrator = TECIntegrator(density_fn, num_intervals)
        self.bending_solver = BendingAngleSolver(density_fn, num_intervals)

    def evaluate(self, request: CorrectionRequest) -> CorrectionResult:
        self.guard.check(request.epoch_mjd)

        segment = intersect_shell(
            request.station_position_km,
            request.spacecraft_position_km,
            request.body_radius_km,
            self.shell_altitude_km
        )

        freq = request.frequency_hz
        tec = self.tec_integrator.integrate(segment, request.epoch_mjd)
        drho = IONO_COEFFICIENT * tec / (freq * freq)
        dphi = self.bending_solver.solve(segment, request.epoch_mjd, freq)

        logger.debug(f"IRI2007: freq = {freq / 1e6:.6f} MHz, tec = {tec / 1e16:.6f}e16, "
                     f"drho = {drho:.6f} m, dphi = {dphi:.3e} rad")
        return CorrectionResult(range_m=drho, angle_rad=dphi, model=self.model, tec=tec)


class TRK223Correction(CorrectionStrategy):
    """Empirical DSN calibration model."""

    model = CorrectionModel.TRK223

    def __init__(self, evaluator: TRK223Evaluator):
        self.evaluator = evaluator

    def evaluate(self, request: CorrectionRequest) -> CorrectionResult:
        if request.station_id is None or request.spacecraft_id is None:
            raise ConfigurationError(
                "TRK-2-23 corrections need both a station_id and a spacecraft_id"
            )
        drho = self.evaluator.range_correction(
            request.station_id,
            request.spacecraft_id,
            request.epoch_mjd,
            request.frequency_hz
        )
        return CorrectionResult(range_m=drho, angle_rad=0.0, model=self.model)


class IonosphereCorrection:
    """
    Ionospheric media correction for one measurement model instance.

    The density model and the calibration data are wired in once; the
    correction models they enable are then available per request.

    Usage:
        calibration = load_calibration_data('/usr/share/iono', ['dsn.csp'])
        iono = IonosphereCorrection(IRI2016DensityProvider(), calibration)
        result = iono.correction(request)
        range_m, angle_rad, time_s = result.as_array()
    """

    def __init__(
        self,
        provider: Optional[ElectronDensityProvider] = None,
        calibration: Optional[CalibrationData] = None,
        density_fn: Optional[DensityFunction] = None,
        equatorial_radius_km: float = EARTH_EQUATORIAL_RADIUS_KM,
        flattening: float = EARTH_FLATTENING,
        num_intervals: int = NUM_OF_INTERVALS,
        default_model: CorrectionModel = CorrectionModel.IRI2007
    ):
        """
        Args:
            provider: External electron-density model (IRI2007 correction)
            calibration: Validity windows and TRK-2-23 table
            density_fn: Pre-built (position_km, epoch_mjd) density callable;
                overrides provider
            equatorial_radius_km, flattening: Body shape for geodetic altitudes
            num_intervals: Integration resolution of the physics model
            default_model: Model used when callers do not choose one
        """
        self.calibration = calibration or CalibrationData()
        self.default_model = CorrectionModel.parse(default_model)
        self._strategies: Dict[CorrectionModel, CorrectionStrategy] = {}

        if density_fn is None and provider is not None:
            adapter = DensityAdapter(provider, equatorial_radius_km, flattening)
            adapter.initialize()
            density_fn = adapter
        self.density_fn = density_fn

        self.guard: Optional[ValidityWindowGuard] = None
        if self.calibration.has_windows:
            self.guard = ValidityWindowGuard(
                self.calibration.activity_window, self.calibration.driver_window
            )

        if density_fn is not None and self.guard is not None:
            self._strategies[CorrectionModel.IRI2007] = IRI2007Correction(
                density_fn, self.guard, num_intervals
            )
        if self.calibration.store is not None:
            self._strategies[CorrectionModel.TRK223] = TRK223Correction(
                TRK223Evaluator(self.calibration.store)
            )

        logger.info(f"Ionosphere correction models available: "
                    f"{', '.join(m.value for m in self.available_models) or 'none'}")

    @property
    def available_models(self):
        return list(self._strategies)

    def correction(self, request: CorrectionRequest) -> CorrectionResult:
        """
        Compute the correction for one request.

        Returns:
            CorrectionResult (range m, angle rad, time s)

        Raises:
            ConfigurationError: unknown model, or model without its data
            RangeValidationError: epoch outside the ap.dat window (IRI2007)
            CalibrationNotFoundError: no TRK-2-23 complex entry
        """
        model = CorrectionModel.parse(request.model)
        strategy = self._strategies.get(model)
        if strategy is None:
            raise ConfigurationError(
                f"Ionosphere model {model.value} is not configured: "
                f"{self._missing_inputs(model)}"
            )

        result = strategy.evaluate(request)
        logger.debug(f"Ionosphere correction ({model.value}): range = {result.range_m:.6f} m, "
                     f"angle = {result.angle_rad:.3e} rad, time = {result.time_s:.3e} s")
        return result

    def _missing_inputs(self, model: CorrectionModel) -> str:
        if model is CorrectionModel.IRI2007:
            if self.density_fn is None:
                return "no electron density provider"
            return "no ap.dat/ig_rz.dat validity windows"
        return "no TRK-2-23 calibration files loaded"

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        provider: Optional[ElectronDensityProvider] = None
    ) -> "IonosphereCorrection":
        """
        Build an instance from a configuration dictionary (see main.load_config).

        A provider passed in takes precedence over [density] in the config.
        """
        model_cfg = config.get('model', {})
        data_cfg = config.get('data', {})
        body_cfg = config.get('body', {})
        density_cfg = config.get('density', {})

        equatorial_radius = body_cfg.get('equatorial_radius_km', EARTH_EQUATORIAL_RADIUS_KM)
        flattening = body_cfg.get('flattening', EARTH_FLATTENING)

        data_path = data_cfg.get('data_path')
        calibration = load_calibration_data(
            Path(data_path) if data_path else None,
            data_cfg.get('csp_files', [])
        )

        model_name = model_cfg.get('name', CorrectionModel.IRI2007.value)
        if provider is None:
            density_cfg = dict(density_cfg)
            if model_name != CorrectionModel.IRI2007.value:
                density_cfg.setdefault('provider', 'none')
            provider = build_provider(density_cfg, equatorial_radius, flattening)

        return cls(
            provider=provider,
            calibration=calibration,
            equatorial_radius_km=equatorial_radius,
            flattening=flattening,
            num_intervals=model_cfg.get('num_intervals', NUM_OF_INTERVALS),
            default_model=model_name,
        )


def build_provider(
    density_cfg: Dict[str, Any],
    equatorial_radius_km: float = EARTH_EQUATORIAL_RADIUS_KM,
    flattening: float = EARTH_FLATTENING
) -> Optional[ElectronDensityProvider]:
    """
    Density provider from a [density] config section.

        provider = "iri2016" | "constant" | "none"
        value    = electrons/m³ for "constant"
    """
    kind = str(density_cfg.get('provider', 'iri2016')).lower()
    if kind == 'iri2016':
        return IRI2016DensityProvider(equatorial_radius_km, flattening)
    if kind == 'constant':
        return ConstantDensityProvider(density_cfg.get('value', 0.0))
    if kind == 'none':
        return None
    raise ConfigurationError(
        f"Unknown density provider {kind!r}; supported are iri2016, constant, none"
    )
