"""
Correction Request/Result Data Models

These dataclasses define the contract between the correction engine and the
measurement models that consume it. A CorrectionRequest is built per
measurement; the CorrectionResult is applied additively to the raw
observable and can be serialised to JSON for logging or the CLI.

Contract Version: 1.0.0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
import json

import numpy as np

from ..constants import SPEED_OF_LIGHT, MODEL_IRI2007, MODEL_TRK223
from ..errors import ConfigurationError


class CorrectionModel(str, Enum):
    """Ionospheric correction model selector."""
    IRI2007 = MODEL_IRI2007     # Physics model: TEC + ray bending
    TRK223 = MODEL_TRK223       # DSN empirical calibration

    @classmethod
    def parse(cls, value) -> "CorrectionModel":
        """Accept an enum member or its identifier string."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(
                f"Unrecognized ionosphere model {value!r} used. "
                f"Supported models are {MODEL_IRI2007} and {MODEL_TRK223}"
            ) from None


def _as_vector(value) -> np.ndarray:
    """Private read-only copy of a position."""
    vec = np.array(value, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"Position must be a 3-vector, got shape {vec.shape}")
    vec.setflags(write=False)
    return vec


@dataclass(frozen=True, eq=False)
class CorrectionRequest:
    """
    Inputs for one correction.

    Positions are body-fixed Cartesian in km. The epoch is a UTC modified
    Julian date. station_id/spacecraft_id are only read by TRK-2-23.
    """
    station_position_km: np.ndarray
    spacecraft_position_km: np.ndarray
    wavelength_m: float
    epoch_mjd: float
    body_radius_km: float
    model: CorrectionModel = CorrectionModel.IRI2007
    station_id: Optional[str] = None
    spacecraft_id: Optional[str] = None

    def __post_init__(self):
        # Frozen: write the normalised vectors through object.__setattr__
        object.__setattr__(self, 'station_position_km', _as_vector(self.station_position_km))
        object.__setattr__(self, 'spacecraft_position_km', _as_vector(self.spacecraft_position_km))
        if self.wavelength_m <= 0.0:
            raise ValueError(f"Wavelength must be positive, got {self.wavelength_m}")

    def __eq__(self, other):
        if not isinstance(other, CorrectionRequest):
            return NotImplemented
        return (np.array_equal(self.station_position_km, other.station_position_km)
                and np.array_equal(self.spacecraft_position_km, other.spacecraft_position_km)
                and self.wavelength_m == other.wavelength_m
                and self.epoch_mjd == other.epoch_mjd
                and self.body_radius_km == other.body_radius_km
                and self.model == other.model
                and self.station_id == other.station_id
                and self.spacecraft_id == other.spacecraft_id)

    @property
    def frequency_hz(self) -> float:
        return SPEED_OF_LIGHT / self.wavelength_m

    def swapped(self) -> "CorrectionRequest":
        """Same request with station and spacecraft positions exchanged."""
        return CorrectionRequest(
            station_position_km=self.spacecraft_position_km,
            spacecraft_position_km=self.station_position_km,
            wavelength_m=self.wavelength_m,
            epoch_mjd=self.epoch_mjd,
            body_radius_km=self.body_radius_km,
            model=self.model,
            station_id=self.station_id,
            spacecraft_id=self.spacecraft_id,
        )


@dataclass(frozen=True)
class CorrectionResult:
    """
    Ionospheric correction for one measurement.

    time_s is always range_m / c; it is derived, never stored.
    """
    range_m: float = 0.0        # Range correction
    angle_rad: float = 0.0      # Elevation angle correction
    model: Optional[CorrectionModel] = None
    tec: Optional[float] = field(default=None, compare=False)  # electrons/m² (IRI2007 only)

    @property
    def time_s(self) -> float:
        return self.range_m / SPEED_OF_LIGHT

    def as_array(self) -> List[float]:
        """[range (m), angle (rad), time (s)] in the order measurement models expect."""
        return [self.range_m, self.angle_rad, self.time_s]

    def to_dict(self) -> dict:
        data = {
            "range_m": self.range_m,
            "angle_rad": self.angle_rad,
            "time_s": self.time_s,
        }
        if self.model is not None:
            data["model"] = self.model.value
        if self.tec is not None:
            data["tec"] = self.tec
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "CorrectionResult":
        data = json.loads(json_str)
        model = data.get("model")
        return cls(
            range_m=data.get("range_m", 0.0),
            angle_rad=data.get("angle_rad", 0.0),
            model=CorrectionModel(model) if model else None,
            tec=data.get("tec"),
        )
