#!/usr/bin/env python3
"""
TRK-2-23 Evaluator - Empirical DSN Ionospheric Range Calibration

================================================================================
STATION RESOLUTION
================================================================================
A calibration is always published for the tracking complex; individual
antennas may carry an additional term. Station identifiers resolve to both
keys:

    Input     Station key    Complex key
    -------   -----------    -----------
    "14"      DSN(014)       DSN(C10)      number  0-29 → Goldstone
    "43"      DSN(043)       DSN(C40)      number 30-49 → Canberra
    "63"      DSN(063)       DSN(C60)      number 50+   → Madrid
    "C40"     DSN(C40)       DSN(C40)      complex given directly
    "GDS"     DSN(C10)       DSN(C10)      complex short names GDS/CAN/MAD

When the two keys coincide only the complex term is used.

================================================================================
FUNCTIONAL FORMS
================================================================================
t, t_start, t_end in seconds; coefficients c[0..N-1]:

    CONST    drho = c[0]
    TRIG     τ = 2π (t - t_start) / c[0]
             drho = c[1] + Σ_k c[2k]·cos(kτ) + c[2k+1]·sin(kτ),  k = 1, 2, ...
    NRMPOW   τ = 2 (t - t_start) / (t_end - t_start) - 1   (τ ∈ [-1, 1])
             drho = Σ_i c[i]·τ^i

Every term is rescaled from S-band to the link frequency:

    drho(f) = drho(2295 MHz) × (2295 MHz / f)²
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Sequence

from ..constants import (
    DSN_COMPLEX_ALIASES,
    DSN_COMPLEX_RANGES,
    DSN_LAST_COMPLEX,
    S_BAND_REFERENCE_HZ,
    SECONDS_PER_DAY,
)
from ..epoch import format_epoch
from ..errors import CalibrationNotFoundError, ConfigurationError
from .trk223_store import TRK223CalibrationEntry, TRK223CalibrationStore

logger = logging.getLogger(__name__)


class FunctionalForm(str, Enum):
    """TRK-2-23 calibration model types."""
    CONST = "CONST"
    TRIG = "TRIG"
    NRMPOW = "NRMPOW"

    @classmethod
    def parse(cls, tag: str) -> "FunctionalForm":
        try:
            return cls(str(tag).strip().upper())
        except ValueError:
            raise ConfigurationError(
                f"Unsupported functional form {tag!r} in calibration file; "
                f"allowed types are NRMPOW, TRIG, or CONST"
            ) from None


def _evaluate_const(coefs: Sequence[float], t: float, start: float, end: float) -> float:
    return coefs[0]


def _evaluate_trig(coefs: Sequence[float], t: float, start: float, end: float) -> float:
    period = coefs[0]
    if period == 0.0:
        raise ConfigurationError("TRIG calibration has a zero period")
    tau = 2.0 * math.pi * (t - start) / period

    drho = coefs[1]
    for k, i in enumerate(range(2, len(coefs), 2), start=1):
        drho += coefs[i] * math.cos(k * tau)
        if i + 1 < len(coefs):
            drho += coefs[i + 1] * math.sin(k * tau)
    return drho


def _evaluate_nrmpow(coefs: Sequence[float], t: float, start: float, end: float) -> float:
    if end == start:
        raise ConfigurationError("NRMPOW calibration has an empty time span")
    tau = 2.0 * (t - start) / (end - start) - 1.0
    return sum(c * tau ** i for i, c in enumerate(coefs))


# (coefficients, t, t_start, t_end) -> meters at S-band; times in seconds
FormEvaluator = Callable[[Sequence[float], float, float, float], float]

_MIN_COEFFICIENTS: Dict[FunctionalForm, int] = {
    FunctionalForm.CONST: 1,
    FunctionalForm.TRIG: 2,
    FunctionalForm.NRMPOW: 1,
}

FORM_EVALUATORS: Dict[FunctionalForm, FormEvaluator] = {
    FunctionalForm.CONST: _evaluate_const,
    FunctionalForm.TRIG: _evaluate_trig,
    FunctionalForm.NRMPOW: _evaluate_nrmpow,
}


def evaluate_form(
    form,
    coefficients: Sequence[float],
    epoch_mjd: float,
    start_mjd: float,
    end_mjd: float
) -> float:
    """Unscaled (S-band) correction of one functional form at an epoch."""
    form = FunctionalForm.parse(form)
    if len(coefficients) < _MIN_COEFFICIENTS[form]:
        raise ConfigurationError(
            f"{form.value} calibration needs at least {_MIN_COEFFICIENTS[form]} "
            f"coefficients, got {len(coefficients)}"
        )
    return FORM_EVALUATORS[form](
        coefficients,
        epoch_mjd * SECONDS_PER_DAY,
        start_mjd * SECONDS_PER_DAY,
        end_mjd * SECONDS_PER_DAY,
    )


@dataclass(frozen=True)
class StationKeys:
    """Canonical TRK-2-23 applicability keys for one ground station."""
    station_key: str
    complex_key: str

    @property
    def has_station_term(self) -> bool:
        return self.station_key != self.complex_key


def complex_for_station(number: int) -> str:
    for upper, complex_key in DSN_COMPLEX_RANGES:
        if number < upper:
            return complex_key
    return DSN_LAST_COMPLEX


def resolve_station(station_id) -> StationKeys:
    """Map a station identifier (14, "43", "C40", "MAD", ...) to its keys."""
    sid = ''.join(str(station_id).split()).upper()

    if sid in DSN_COMPLEX_ALIASES:
        complex_key = DSN_COMPLEX_ALIASES[sid]
        return StationKeys(station_key=complex_key, complex_key=complex_key)

    digits = sid[1:] if sid.startswith('C') else sid
    try:
        number = int(digits)
    except ValueError:
        raise ConfigurationError(f"Unrecognized DSN station identifier {station_id!r}") from None

    station_key = f"DSN(0{sid})" if len(sid) < 3 else f"DSN({sid})"
    return StationKeys(station_key=station_key, complex_key=complex_for_station(number))


def spacecraft_key(spacecraft_id) -> str:
    scid = ''.join(str(spacecraft_id).split()).upper()
    if scid.startswith('SCID(') and scid.endswith(')'):
        return scid
    return f"SCID({scid})"


class TRK223Evaluator:
    """
    Range correction from a TRK-2-23 calibration table.

    Usage:
        evaluator = TRK223Evaluator(store)
        drho = evaluator.range_correction("43", 99, epoch_mjd, 8.4e9)
    """

    def __init__(
        self,
        store: TRK223CalibrationStore,
        reference_frequency_hz: float = S_BAND_REFERENCE_HZ
    ):
        self.store = store
        self.reference_frequency_hz = reference_frequency_hz

    def frequency_scale(self, frequency_hz: float) -> float:
        ratio = self.reference_frequency_hz / frequency_hz
        return ratio * ratio

    def evaluate_entry(
        self,
        entry: TRK223CalibrationEntry,
        epoch_mjd: float,
        frequency_hz: float
    ) -> float:
        """Correction of one entry at the link frequency (m)."""
        raw = evaluate_form(
            entry.form, entry.coefficients, epoch_mjd, entry.start_mjd, entry.end_mjd
        )
        return raw * self.frequency_scale(frequency_hz)

    def range_correction(
        self,
        station_id,
        spacecraft_id,
        epoch_mjd: float,
        frequency_hz: float
    ) -> float:
        """
        Sum of the complex-level and (if any) station-level corrections.

        Raises:
            CalibrationNotFoundError: no complex-level entry covers the epoch
        """
        keys = resolve_station(station_id)
        scid = spacecraft_key(spacecraft_id)

        complex_entry = self.store.find(scid, keys.complex_key, epoch_mjd)
        if complex_entry is None:
            raise CalibrationNotFoundError(
                station=keys.station_key,
                complex_key=keys.complex_key,
                spacecraft=scid,
                epoch=format_epoch(epoch_mjd),
            )

        correction = self.evaluate_entry(complex_entry, epoch_mjd, frequency_hz)

        if keys.has_station_term:
            station_entry = self.store.find(scid, keys.station_key, epoch_mjd)
            if station_entry is not None:
                correction += self.evaluate_entry(station_entry, epoch_mjd, frequency_hz)

        logger.debug(f"TRK-2-23 {keys.station_key}/{keys.complex_key} {scid}: "
                     f"drho = {correction:.6f} m at {frequency_hz / 1e6:.3f} MHz")
        return correction
