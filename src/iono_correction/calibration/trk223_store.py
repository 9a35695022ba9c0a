#!/usr/bin/env python3
"""
TRK-2-23 Calibration Store - DSN Media Calibration Table

================================================================================
PURPOSE
================================================================================
The DSN distributes ionospheric calibrations as TRK-2-23 "CSP" records. Each
record gives a correction (in meters of range at S-band) as a functional
form over a validity window, for one spacecraft at either a whole tracking
complex or a single antenna:

    ADJUST(RANGE,NRMPOW,(0.812,-0.140,0.031),CHPART,
           FROM(24/02/05,00:00),TO(24/02/05,12:00),DSN(C40),SCID(99));

    field 0  measurement type        DOPRNG | RANGE | ...
    field 1  functional form         CONST | TRIG | NRMPOW
    field 2  coefficients            (c0,c1,...)
    field 3  calibration type        CHPART = charged particles (ionosphere)
    field 4  window start            FROM(YY/MM/DD,HH:MM[:SS.sss])
    field 5  window end              TO(YY/MM/DD,HH:MM[:SS.sss])
    field 6  applicability           DSN(Cnn) complex or DSN(nnn) station
    field 7  spacecraft              SCID(n)

Statements end with ';' and may span lines. Lines starting with '#' or '*'
are comments. Two-digit years 69-99 are 19xx, 00-68 are 20xx.

The store is filled once and is read-only afterwards.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from ..constants import TRK223_MEASUREMENT_TYPES, TRK223_CHARGED_PARTICLE_SOURCE
from ..epoch import modified_julian_date
from ..errors import DataUnavailableError

logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(
    r'^\s*(\d{2})/(\d{1,2})/(\d{1,2})[,T ]\s*(\d{1,2}):(\d{2})(?::(\d{1,2}(?:\.\d*)?))?\s*$'
)
_CSP_FIELDS = 8


@dataclass(frozen=True)
class TRK223CalibrationEntry:
    """One TRK-2-23 calibration record."""
    measurement_type: str
    form: str                       # functional-form tag as written in the file
    coefficients: Tuple[float, ...]
    source: str                     # calibration type, CHPART for ionosphere
    start_mjd: float
    end_mjd: float
    applicability: str              # DSN(C10), DSN(014), ...
    spacecraft: str                 # SCID(99)

    def covers(self, epoch_mjd: float) -> bool:
        """Entry windows are inclusive at both ends."""
        return self.start_mjd <= epoch_mjd <= self.end_mjd


def parse_trk223_time(text: str) -> float:
    """'24/02/05,13:45:10.5' → MJD."""
    match = _TIME_PATTERN.match(text)
    if not match:
        raise DataUnavailableError(f"Unreadable TRK-2-23 time: {text!r}")

    year = int(match.group(1))
    year += 1900 if year >= 69 else 2000
    second = float(match.group(6)) if match.group(6) else 0.0
    return modified_julian_date(
        year, int(match.group(2)), int(match.group(3)),
        int(match.group(4)), int(match.group(5)), second
    )


def _split_top_level(text: str, separator: str) -> List[str]:
    """Split on separator characters outside parentheses."""
    parts = []
    depth = 0
    current = []
    for ch in text:
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
        if ch == separator and depth == 0:
            parts.append(''.join(current))
            current = []
        else:
            current.append(ch)
    parts.append(''.join(current))
    return parts


def _unwrap(field: str, keyword: str) -> str:
    """'FROM(x)' → 'x'; anything without the keyword comes back unchanged."""
    head = keyword + '('
    if field.upper().startswith(head) and field.endswith(')'):
        return field[len(head):-1]
    return field


def _parse_coefficients(field: str) -> Tuple[float, ...]:
    body = field.strip()
    if body.startswith('(') and body.endswith(')'):
        body = body[1:-1]
    try:
        return tuple(float(v) for v in body.split(',') if v.strip())
    except ValueError as e:
        raise DataUnavailableError(f"Unreadable TRK-2-23 coefficients: {field!r}") from e


def parse_csp_record(statement: str) -> TRK223CalibrationEntry:
    """Parse one statement (without its terminating ';')."""
    body = ''.join(statement.split())   # blanks are not significant
    body = _unwrap(body, 'ADJUST')

    fields = _split_top_level(body, ',')
    if len(fields) != _CSP_FIELDS:
        raise DataUnavailableError(
            f"TRK-2-23 record has {len(fields)} fields, expected {_CSP_FIELDS}: {statement.strip()!r}"
        )

    return TRK223CalibrationEntry(
        measurement_type=fields[0].upper(),
        form=fields[1].upper(),
        coefficients=_parse_coefficients(fields[2]),
        source=fields[3].upper(),
        start_mjd=parse_trk223_time(_unwrap(fields[4], 'FROM')),
        end_mjd=parse_trk223_time(_unwrap(fields[5], 'TO')),
        applicability=fields[6].upper(),
        spacecraft=fields[7].upper(),
    )


def parse_csp(text: str) -> List[TRK223CalibrationEntry]:
    """Parse every record in a CSP document."""
    lines = [
        line for line in text.splitlines()
        if not line.lstrip().startswith(('#', '*'))
    ]
    entries = []
    for statement in _split_top_level('\n'.join(lines), ';'):
        if statement.strip():
            entries.append(parse_csp_record(statement))
    return entries


def load_csp_file(path: Union[str, Path]) -> List[TRK223CalibrationEntry]:
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise DataUnavailableError(f"{path} file does not exist or cannot open") from e
    entries = parse_csp(text)
    logger.debug(f"{path}: {len(entries)} TRK-2-23 records")
    return entries


class TRK223CalibrationStore:
    """
    Immutable table of TRK-2-23 entries.

    Entries keep their file order; when several match a lookup the last one
    wins, so later files override earlier ones.
    """

    def __init__(self, entries: Iterable[TRK223CalibrationEntry] = ()):
        self._entries: Tuple[TRK223CalibrationEntry, ...] = tuple(entries)

    @classmethod
    def from_files(cls, paths: Iterable[Union[str, Path]]) -> "TRK223CalibrationStore":
        entries: List[TRK223CalibrationEntry] = []
        for path in paths:
            entries.extend(load_csp_file(path))
        store = cls(entries)
        logger.info(f"Loaded {len(store)} TRK-2-23 calibration entries")
        return store

    @classmethod
    def from_text(cls, text: str) -> "TRK223CalibrationStore":
        return cls(parse_csp(text))

    @property
    def entries(self) -> Tuple[TRK223CalibrationEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def find(
        self,
        spacecraft: str,
        applicability: str,
        epoch_mjd: float,
        measurement_types=TRK223_MEASUREMENT_TYPES,
        source: str = TRK223_CHARGED_PARTICLE_SOURCE
    ) -> Optional[TRK223CalibrationEntry]:
        """
        Latest entry for a spacecraft/applicability whose window covers the epoch.

        Returns:
            Matching entry or None
        """
        match = None
        for entry in self._entries:
            if (entry.spacecraft == spacecraft
                    and entry.measurement_type in measurement_types
                    and entry.applicability == applicability
                    and entry.source == source
                    and entry.covers(epoch_mjd)):
                match = entry
        return match
