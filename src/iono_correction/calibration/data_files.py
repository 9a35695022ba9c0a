"""
Readers for the reference data files behind the correction models.

    <data_path>/IonosphereData/ap.dat      Ap index table
    <data_path>/IonosphereData/ig_rz.dat   IG12/Rz12 index table
    *.csp                                   DSN TRK-2-23 calibrations

Only the date ranges are read from the index tables; the tables themselves
belong to the density model.
"""

import calendar
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..errors import DataUnavailableError
from .trk223_store import TRK223CalibrationStore
from .validity_window import ValidityWindow

logger = logging.getLogger(__name__)

IONOSPHERE_DATA_DIR = 'IonosphereData'
AP_FILE = 'ap.dat'
IGRZ_FILE = 'ig_rz.dat'

PathLike = Union[str, Path]


def _read_lines(path: Path) -> List[str]:
    try:
        with open(path, 'r') as f:
            return f.read().splitlines()
    except OSError as e:
        raise DataUnavailableError(f"{path} file does not exist or cannot open") from e


def _ap_date(line: str, path: Path) -> int:
    try:
        year, month, day = (int(v) for v in line.split()[:3])
    except ValueError as e:
        raise DataUnavailableError(f"Cannot read a date from {path}: {line!r}") from e
    year += 1900 if year >= 58 else 2000
    return year * 10000 + month * 100 + day


def read_ap_time_range(path: PathLike) -> ValidityWindow:
    """
    Date range of ap.dat: first and last records, 'YY MM DD ...'.

    Two-digit years from 58 are 19xx, below are 20xx.
    """
    path = Path(path)
    lines = [line for line in _read_lines(path) if line.strip()]
    if not lines:
        raise DataUnavailableError(f"{path} is empty")

    window = ValidityWindow(
        name=AP_FILE,
        lower=_ap_date(lines[0], path),
        upper=_ap_date(lines[-1], path),
    )
    if window.upper <= window.lower:
        raise DataUnavailableError(f"Time range specified from {path} file is invalid")

    logger.debug(f"{path}: {window.describe()}")
    return window


def read_igrz_time_range(path: PathLike) -> ValidityWindow:
    """
    Date range of ig_rz.dat.

    The first non-blank line is the file's creation date; the second holds
    'monthMin,yearMin,monthMax,yearMax'. The range runs from the first day
    of the start month to the last day of the end month.
    """
    path = Path(path)
    lines = [line.strip() for line in _read_lines(path) if line.strip()]
    if len(lines) < 2:
        raise DataUnavailableError(f"{path} has no time range record")

    try:
        month_min, year_min, month_max, year_max = (
            int(v) for v in lines[1].split(',')[:4]
        )
    except ValueError as e:
        raise DataUnavailableError(f"Cannot read time range from {path}: {lines[1]!r}") from e

    day_max = calendar.monthrange(year_max, month_max)[1]
    window = ValidityWindow(
        name=IGRZ_FILE,
        lower=year_min * 10000 + month_min * 100 + 1,
        upper=year_max * 10000 + month_max * 100 + day_max,
    )
    if window.upper <= window.lower:
        raise DataUnavailableError(f"Time range specified from {path} file is invalid")

    logger.debug(f"{path}: {window.describe()}")
    return window


@dataclass(frozen=True)
class CalibrationData:
    """Everything the correction models read from disk, loaded once."""
    activity_window: Optional[ValidityWindow] = None    # ig_rz.dat
    driver_window: Optional[ValidityWindow] = None      # ap.dat
    store: Optional[TRK223CalibrationStore] = None

    @property
    def has_windows(self) -> bool:
        return self.activity_window is not None and self.driver_window is not None


def load_calibration_data(
    data_path: Optional[PathLike] = None,
    csp_files: Iterable[PathLike] = ()
) -> CalibrationData:
    """
    Load the validity windows and TRK-2-23 table.

    Args:
        data_path: Directory containing IonosphereData/ap.dat and ig_rz.dat;
            None skips the windows
        csp_files: TRK-2-23 files; relative paths resolve against data_path
    """
    activity = driver = None
    if data_path is not None:
        iono_dir = Path(data_path) / IONOSPHERE_DATA_DIR
        driver = read_ap_time_range(iono_dir / AP_FILE)
        activity = read_igrz_time_range(iono_dir / IGRZ_FILE)

    paths = []
    for csp in csp_files:
        csp = Path(csp)
        if not csp.is_absolute() and data_path is not None:
            csp = Path(data_path) / csp
        paths.append(csp)

    store = TRK223CalibrationStore.from_files(paths) if paths else None

    logger.info(
        f"Calibration data loaded: windows={'yes' if driver else 'no'}, "
        f"TRK-2-23 entries={len(store) if store else 0}"
    )
    return CalibrationData(activity_window=activity, driver_window=driver, store=store)
