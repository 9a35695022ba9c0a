"""
Exceptions raised by the ionospheric correction engine.

Every error derives from IonosphereError and from the builtin exception a
caller would naturally catch (ValueError for bad inputs, RuntimeError for
missing data, LookupError for missing calibrations).
"""

from typing import Optional


class IonosphereError(Exception):
    """Base class for all correction-engine errors."""


class ConfigurationError(IonosphereError, ValueError):
    """Unsupported model selector, functional form, or identifier."""


class DataUnavailableError(IonosphereError, RuntimeError):
    """Backing reference data (indices, calibration files, model) missing."""


class RangeValidationError(IonosphereError, ValueError):
    """Epoch lies outside a validity window that cannot be extrapolated."""

    def __init__(self, message: str, lower: Optional[str] = None,
                 upper: Optional[str] = None, epoch: Optional[float] = None):
        super().__init__(message)
        self.lower = lower
        self.upper = upper
        self.epoch = epoch


class CalibrationNotFoundError(IonosphereError, LookupError):
    """No complex-level TRK-2-23 calibration covers the request."""

    def __init__(self, station: str, complex_key: str, spacecraft: str, epoch: str):
        super().__init__(
            f"Unable to find ionospheric correction for {station} in DSN complex "
            f"{complex_key} and {spacecraft} at {epoch}"
        )
        self.station = station
        self.complex_key = complex_key
        self.spacecraft = spacecraft
        self.epoch = epoch


class SoftValidityWarning(UserWarning):
    """Epoch outside the ionospheric-activity window; correction still computed."""
