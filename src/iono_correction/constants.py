#!/usr/bin/env python3
"""
Ionospheric Correction Shared Constants

================================================================================
PURPOSE
================================================================================
Single source of truth for the physical constants, shell geometry, and DSN
calibration conventions used by the correction engine.

================================================================================
PROPAGATION PHYSICS
================================================================================
SPEED OF LIGHT: 299,792,458 m/s (scipy.constants)

IONOSPHERIC DELAY (first order, Montenbruck & Gill eq. 6.69):
    drho = 40.3 × TEC / f²   (meters, TEC in electrons/m², f in Hz)

REFRACTIVE INDEX (phase, collisionless, unmagnetised):
    n = 1 - 40.3 × Ne / f²

SHELL:
    Electron density is integrated from the ground up to 2000 km above the
    reference body. Above that the plasmasphere contribution is ignored.

================================================================================
DSN TRK-2-23 CONVENTIONS
================================================================================
Calibration coefficients are characterised at S-band (2295 MHz) and are
rescaled by (f_ref / f)² to the actual link frequency.

Tracking complexes (station number ranges):
    DSN(C10)  Goldstone   stations  0-29
    DSN(C40)  Canberra    stations 30-49
    DSN(C60)  Madrid      stations 50+

================================================================================
REFERENCES
================================================================================
- Montenbruck, O. & Gill, E. (2000). "Satellite Orbits." Springer. Sec. 6.4.
- DSN 820-013 TRK-2-23, "Media Calibration Interface"
"""

from typing import Dict, FrozenSet

from scipy import constants as _sc

# =============================================================================
# PHYSICAL CONSTANTS
# =============================================================================

SPEED_OF_LIGHT = _sc.speed_of_light  # m/s
KM_TO_M = 1000.0
SECONDS_PER_DAY = 86400.0

# First-order ionospheric coefficient (m³/s²)
IONO_COEFFICIENT = 40.3

# =============================================================================
# SHELL / INTEGRATION
# =============================================================================

IONOSPHERE_MAX_ALTITUDE_KM = 2000.0
NUM_OF_INTERVALS = 200

# Earth defaults (used for geodetic altitude of integration points)
EARTH_EQUATORIAL_RADIUS_KM = 6378.1363
EARTH_FLATTENING = 0.0033527

# =============================================================================
# TRK-2-23
# =============================================================================

S_BAND_REFERENCE_HZ = 2295.0e6

# Measurement types carrying range-equivalent ionospheric calibrations
TRK223_MEASUREMENT_TYPES: FrozenSet[str] = frozenset({'DOPRNG', 'RANGE'})

# Calibration type for charged-particle (ionosphere) entries
TRK223_CHARGED_PARTICLE_SOURCE = 'CHPART'

# Short names accepted for whole complexes
DSN_COMPLEX_ALIASES: Dict[str, str] = {
    'GDS': 'DSN(C10)',
    'CAN': 'DSN(C40)',
    'MAD': 'DSN(C60)',
}

# Upper bounds (exclusive) of the station-number range of each complex
DSN_COMPLEX_RANGES = (
    (30, 'DSN(C10)'),
    (50, 'DSN(C40)'),
)
DSN_LAST_COMPLEX = 'DSN(C60)'

# =============================================================================
# MODEL IDENTIFIERS
# =============================================================================

MODEL_IRI2007 = 'IRI2007'
MODEL_TRK223 = 'TRK-2-23'
