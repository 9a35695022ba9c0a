#!/usr/bin/env python3
"""
iono-correction: Ionospheric Media Correction for Radiometric Tracking

Command-line front end for the correction engine. Computes one correction
for a station/spacecraft geometry and prints it as JSON.

Usage:
    # Physics model with a TOML configuration
    iono-correction --config /etc/iono-correction/config.toml \\
        --station -2353.6 -4641.3 3677.0 --spacecraft -12000 -25000 20000 \\
        --epoch 2024-03-15T12:00:00

    # DSN calibration for station 43 and spacecraft 99
    iono-correction --model TRK-2-23 --csp dsn.csp --station-id 43 \\
        --spacecraft-id 99 --epoch 60384.5 --wavelength 0.0357

    # Uniform test ionosphere, no data files
    iono-correction --constant-density 1e12 --data-path ./data ...

Configuration (TOML):
    [model]
    name = "IRI2007"              # or "TRK-2-23"
    body_radius_km = 6378.1363
    num_intervals = 200

    [data]
    data_path = "/usr/share/iono-correction"   # IonosphereData/ap.dat, ig_rz.dat
    csp_files = ["dsn.csp"]

    [density]
    provider = "iri2016"          # "constant", "none"
    value = 1.0e12                # electrons/m³ for "constant"

    [body]
    equatorial_radius_km = 6378.1363
    flattening = 0.0033527
"""

import argparse
import copy
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import toml

# Set up logging before imports that use it
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger('iono-correction')

from .constants import EARTH_EQUATORIAL_RADIUS_KM, EARTH_FLATTENING, SPEED_OF_LIGHT, S_BAND_REFERENCE_HZ
from .engine.ionosphere import IonosphereCorrection
from .epoch import datetime_to_mjd
from .errors import IonosphereError
from .interfaces.correction_result import CorrectionModel, CorrectionRequest

DEFAULT_CONFIG: Dict[str, Any] = {
    'model': {
        'name': CorrectionModel.IRI2007.value,
        'body_radius_km': EARTH_EQUATORIAL_RADIUS_KM,
    },
    'data': {
        'data_path': None,
        'csp_files': [],
    },
    'density': {},
    'body': {
        'equatorial_radius_km': EARTH_EQUATORIAL_RADIUS_KM,
        'flattening': EARTH_FLATTENING,
    },
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from TOML file, layered over the defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            loaded = toml.load(f)
        for section, values in loaded.items():
            if isinstance(values, dict) and isinstance(config.get(section), dict):
                config[section].update(values)
            else:
                config[section] = values
    elif config_path:
        logger.warning(f"Config file {config_path} not found, using defaults")
    return config


def parse_epoch(text: str) -> float:
    """Epoch as MJD: either a number or an ISO-8601 UTC timestamp."""
    try:
        return float(text)
    except ValueError:
        pass
    try:
        return datetime_to_mjd(datetime.fromisoformat(text))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Epoch must be an MJD or ISO-8601 timestamp, got {text!r}"
        ) from None


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='iono-correction: ionospheric media correction',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # IRI physics model
    iono-correction -c config.toml --station X Y Z --spacecraft X Y Z --epoch 60384.5

    # DSN TRK-2-23 calibration
    iono-correction --model TRK-2-23 --csp dsn.csp --station-id 43 --spacecraft-id 99 \\
        --station X Y Z --spacecraft X Y Z --epoch 2024-03-15T12:00:00
        """
    )

    parser.add_argument('--config', '-c', help='Path to TOML configuration file')
    parser.add_argument('--station', nargs=3, type=float, required=True,
                        metavar=('X', 'Y', 'Z'), help='Station position, body-fixed km')
    parser.add_argument('--spacecraft', nargs=3, type=float, required=True,
                        metavar=('X', 'Y', 'Z'), help='Spacecraft position, body-fixed km')
    parser.add_argument('--epoch', type=parse_epoch, required=True,
                        help='UTC epoch as MJD or ISO-8601 timestamp')
    parser.add_argument('--wavelength', type=float,
                        default=SPEED_OF_LIGHT / S_BAND_REFERENCE_HZ,
                        help='Signal wavelength in m (default: S-band 2295 MHz)')
    parser.add_argument('--model', help='IRI2007 or TRK-2-23 (overrides config)')
    parser.add_argument('--body-radius', type=float, help='Body radius in km (overrides config)')
    parser.add_argument('--station-id', help='DSN station id for TRK-2-23 (e.g. 43, C40, MAD)')
    parser.add_argument('--spacecraft-id', help='Spacecraft id for TRK-2-23')
    parser.add_argument('--data-path', '-d', help='Directory holding IonosphereData/ (overrides config)')
    parser.add_argument('--csp', action='append', default=[], help='TRK-2-23 file (repeatable)')
    parser.add_argument('--constant-density', type=float,
                        help='Use a uniform electron density (electrons/m³) instead of IRI')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(args.config)

    # Apply command-line overrides
    if args.model:
        config['model']['name'] = args.model
    if args.body_radius is not None:
        config['model']['body_radius_km'] = args.body_radius
    if args.data_path:
        config['data']['data_path'] = args.data_path
    if args.csp:
        config['data']['csp_files'] = list(config['data'].get('csp_files', [])) + args.csp
    if args.constant_density is not None:
        config['density'] = {'provider': 'constant', 'value': args.constant_density}

    try:
        iono = IonosphereCorrection.from_config(config)
        request = CorrectionRequest(
            station_position_km=args.station,
            spacecraft_position_km=args.spacecraft,
            wavelength_m=args.wavelength,
            epoch_mjd=args.epoch,
            body_radius_km=config['model']['body_radius_km'],
            model=iono.default_model,
            station_id=args.station_id,
            spacecraft_id=args.spacecraft_id,
        )
        result = iono.correction(request)
    except IonosphereError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    print(result.to_json())
    return 0


if __name__ == '__main__':
    sys.exit(main())
