"""
iono-correction: Ionospheric Media Correction for Radiometric Tracking

Computes the ionospheric range, elevation and time corrections for a signal
between a ground station and a spacecraft, for use by orbit-determination
measurement models.

Models:
    1. IRI2007  - electron density integrated along the in-shell signal path
                  (TEC) plus a backward refraction trace (bending angle)
    2. TRK-2-23 - DSN empirical calibrations (CONST/TRIG/NRMPOW) per station,
                  spacecraft and time window

The electron-density model itself is an external collaborator behind the
ElectronDensityProvider interface.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .interfaces.correction_result import (
    CorrectionModel,
    CorrectionRequest,
    CorrectionResult,
)
from .engine.ionosphere import IonosphereCorrection
from .errors import (
    IonosphereError,
    ConfigurationError,
    DataUnavailableError,
    RangeValidationError,
    CalibrationNotFoundError,
    SoftValidityWarning,
)

__all__ = [
    "CorrectionModel",
    "CorrectionRequest",
    "CorrectionResult",
    "IonosphereCorrection",
    "IonosphereError",
    "ConfigurationError",
    "DataUnavailableError",
    "RangeValidationError",
    "CalibrationNotFoundError",
    "SoftValidityWarning",
    "__version__",
]
