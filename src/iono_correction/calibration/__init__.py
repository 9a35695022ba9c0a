"""
Calibration data for ionospheric corrections.

Validity windows of the IRI reference data and the DSN TRK-2-23 empirical
calibration table, with the readers that load them.
"""

from .validity_window import ValidityWindow, ValidityWindowGuard
from .trk223_store import TRK223CalibrationEntry, TRK223CalibrationStore
from .trk223_evaluator import FunctionalForm, TRK223Evaluator, resolve_station
from .data_files import CalibrationData, load_calibration_data

__all__ = [
    'ValidityWindow',
    'ValidityWindowGuard',
    'TRK223CalibrationEntry',
    'TRK223CalibrationStore',
    'FunctionalForm',
    'TRK223Evaluator',
    'resolve_station',
    'CalibrationData',
    'load_calibration_data',
]
