"""
Pytest configuration and fixtures for iono-correction tests.
"""

import math
import pytest
import sys
from pathlib import Path

import numpy as np

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

EARTH_RADIUS_KM = 6378.1363
S_BAND_HZ = 2295.0e6
SPEED_OF_LIGHT = 299792458.0


@pytest.fixture
def body_radius():
    """Reference body radius (km)."""
    return EARTH_RADIUS_KM


@pytest.fixture
def s_band_wavelength():
    """Wavelength of the 2295 MHz S-band reference (m)."""
    return SPEED_OF_LIGHT / S_BAND_HZ


@pytest.fixture
def station_equator():
    """Station on the equator at the prime meridian, on the surface."""
    return np.array([EARTH_RADIUS_KM, 0.0, 0.0])


@pytest.fixture
def spacecraft_overhead():
    """Spacecraft 20000 km straight above station_equator."""
    return np.array([EARTH_RADIUS_KM + 20000.0, 0.0, 0.0])


@pytest.fixture
def spacecraft_oblique():
    """Spacecraft seen from station_equator at 60 deg zenith angle."""
    z = math.radians(60.0)
    distance = 25000.0
    return np.array([
        EARTH_RADIUS_KM + distance * math.cos(z),
        distance * math.sin(z),
        0.0,
    ])


@pytest.fixture
def epoch_2024():
    """2024-03-15 12:00 UTC as MJD."""
    from iono_correction.epoch import modified_julian_date
    return modified_julian_date(2024, 3, 15, 12, 0, 0.0)


@pytest.fixture
def activity_window():
    """ig_rz.dat range used in tests."""
    from iono_correction.calibration.validity_window import ValidityWindow
    return ValidityWindow(name='ig_rz.dat', lower=20000101, upper=20250101)


@pytest.fixture
def driver_window():
    """ap.dat range used in tests."""
    from iono_correction.calibration.validity_window import ValidityWindow
    return ValidityWindow(name='ap.dat', lower=20000101, upper=20300101)


@pytest.fixture
def chapman_density():
    """
    Density function with a Gaussian F2-like peak at 350 km.

    Returns a (position_km, epoch_mjd) -> electrons/m³ callable.
    """
    def density(position_km, epoch_mjd):
        altitude = float(np.linalg.norm(position_km)) - EARTH_RADIUS_KM
        return 1.0e12 * math.exp(-((altitude - 350.0) / 100.0) ** 2)
    return density


@pytest.fixture
def csp_text():
    """TRK-2-23 document: Canberra complex + DSS-43, spacecraft 99."""
    return """\
# DSN ionosphere calibrations, generated for tests
ADJUST(RANGE,CONST,(0.5),CHPART,
       FROM(24/03/15,00:00),TO(24/03/16,00:00),DSN(C40),SCID(99));
ADJUST(DOPRNG,NRMPOW,(0.1,0.05),CHPART,
       FROM(24/03/15,00:00:00.0),TO(24/03/16,00:00),DSN(043),SCID(99));
ADJUST(RANGE,CONST,(9.9),TROPO,
       FROM(24/03/15,00:00),TO(24/03/16,00:00),DSN(C40),SCID(99));
ADJUST(RANGE,TRIG,(86400,1.0,0.2,0.3),CHPART,
       FROM(24/03/15,00:00),TO(24/03/16,00:00),DSN(C10),SCID(99));
"""


@pytest.fixture
def ionosphere_data_dir(tmp_path):
    """Data directory with IonosphereData/ap.dat and ig_rz.dat."""
    iono = tmp_path / 'IonosphereData'
    iono.mkdir()
    (iono / 'ap.dat').write_text(
        " 58  1  1  18 27 27 27 15 15 15 15\n"
        " 58  1  2  22 22 22 22 22 22 22 22\n"
        " 29 12 31   5  4  3  3  3  4  5  6\n"
        "\n"
    )
    (iono / 'ig_rz.dat').write_text(
        "\n"
        " 15 Jan 2025\n"
        " 1,1958,12,2025\n"
        " 10.5, 11.2, 12.0\n"
    )
    return tmp_path
