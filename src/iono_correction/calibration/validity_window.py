"""
Validity windows for the IRI reference data.

Two date ranges bound the physics model, each read from a different file:

    ig_rz.dat   solar/ionospheric activity indices (IG12, Rz12)
                outside → warn once per guard, keep computing
    ap.dat      geomagnetic Ap indices
                outside → RangeValidationError; Ap cannot be extrapolated

Both are inclusive at the lower bound and exclusive at the upper bound,
compared on the UTC calendar date (yyyymmdd) of the epoch.
"""

import logging
import threading
import warnings
from dataclasses import dataclass

from ..epoch import yyyymmdd, format_yyyymmdd
from ..errors import RangeValidationError, SoftValidityWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidityWindow:
    """Date range [lower, upper) as yyyymmdd integers."""
    name: str
    lower: int
    upper: int

    def contains(self, date: int) -> bool:
        return self.lower <= date < self.upper

    def describe(self) -> str:
        return f"{format_yyyymmdd(self.lower)} to {format_yyyymmdd(self.upper)}"


class ValidityWindowGuard:
    """
    Checks epochs against the activity (soft) and driver (hard) windows.

    The warning counter is per instance; concurrent callers share it under
    a lock.
    """

    def __init__(self, activity_window: ValidityWindow, driver_window: ValidityWindow):
        self.activity_window = activity_window
        self.driver_window = driver_window
        self._warning_count = 0
        self._lock = threading.Lock()

    @property
    def warning_count(self) -> int:
        return self._warning_count

    def check(self, epoch_mjd: float) -> bool:
        """
        Validate an epoch.

        Returns:
            True if the epoch is inside the activity window as well

        Raises:
            RangeValidationError: epoch outside the driver window
        """
        date = yyyymmdd(epoch_mjd)

        in_activity = self.activity_window.contains(date)
        if not in_activity:
            self._warn_once(epoch_mjd)

        if not self.driver_window.contains(date):
            raise RangeValidationError(
                f"Epoch is out of range. Time range for ionosphere calculation is "
                f"from {format_yyyymmdd(self.driver_window.lower)} to "
                f"{format_yyyymmdd(self.driver_window.upper)}",
                lower=format_yyyymmdd(self.driver_window.lower),
                upper=format_yyyymmdd(self.driver_window.upper),
                epoch=epoch_mjd,
            )

        return in_activity

    def _warn_once(self, epoch_mjd: float) -> None:
        with self._lock:
            first = self._warning_count == 0
            self._warning_count += 1
        if not first:
            return

        message = (
            f"The epoch ({epoch_mjd:.12f} MJD) is out of the time range of the "
            f"ionosphere {self.activity_window.name} file "
            f"({self.activity_window.describe()}). Ionospheric corrections are "
            f"extrapolated."
        )
        logger.warning(message)
        warnings.warn(message, SoftValidityWarning, stacklevel=3)
