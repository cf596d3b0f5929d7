"""Periodic-series (VSOP87) coefficient tables and their evaluator.

A table holds, for each heliocentric coordinate (``L``, ``B``, ``R``), the
terms grouped by power of the time argument::

    value = Σ_power t**power · Σ_terms A·cos(B + C·t)

Tables come from two sources: the VSOP87 data bundled in ``pymeeus``
(amplitudes scaled by 1e8) or a directory of the published ``VSOP87D.*``
text files. Both use Julian millennia from J2000.0 as ``t``; the unit is
recorded on the table so the evaluator never has to guess.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from importlib import import_module
from pathlib import Path
from typing import Final, Literal

from ..core.angles import normalize_degrees
from ..core.errors import EphemerisDataUnavailable
from ..core.time import julian_centuries

LOG = logging.getLogger(__name__)

__all__ = [
    "HeliocentricPosition",
    "SERIES_BODIES",
    "SeriesTable",
    "evaluate_series",
    "load_pymeeus_tables",
    "load_vsop87_directory",
    "parse_vsop87_text",
]

Term = tuple[float, float, float]
TimeUnit = Literal["centuries", "millennia"]

# Earth is carried alongside the planets because geocentric conversion
# subtracts its heliocentric vector.
SERIES_BODIES: Final[tuple[str, ...]] = (
    "Mercury",
    "Venus",
    "Earth",
    "Mars",
    "Jupiter",
    "Saturn",
    "Uranus",
    "Neptune",
)

_VSOP87_SUFFIX: Final[dict[str, str]] = {
    "Mercury": "mer",
    "Venus": "ven",
    "Earth": "ear",
    "Mars": "mar",
    "Jupiter": "jup",
    "Saturn": "sat",
    "Uranus": "ura",
    "Neptune": "nep",
}

_COORDINATES: Final[tuple[str, ...]] = ("L", "B", "R")
_HEADER = re.compile(r"VARIABLE\s+(?P<var>[123]).*?\*T\*\*(?P<power>\d+)")


@dataclass(frozen=True)
class HeliocentricPosition:
    """Heliocentric ecliptic coordinates of date: degrees and AU."""

    longitude: float
    latitude: float
    radius: float


@dataclass(frozen=True)
class SeriesTable:
    """Coefficient groups for one body.

    ``terms`` maps ``"L"``, ``"B"`` and ``"R"`` to a sequence indexed by the
    power of ``t``; each entry is a sequence of ``(A, B, C)`` triples.
    """

    body: str
    source: str
    terms: Mapping[str, Sequence[Sequence[Term]]]
    time_unit: TimeUnit = "millennia"
    amplitude_scale: float = 1.0
    term_count: int = field(init=False)

    def __post_init__(self) -> None:
        missing = [coord for coord in _COORDINATES if not self.terms.get(coord)]
        if missing:
            raise EphemerisDataUnavailable(
                self.body, self.source, f"missing coordinate(s) {', '.join(missing)}"
            )
        count = sum(len(group) for coord in _COORDINATES for group in self.terms[coord])
        object.__setattr__(self, "term_count", count)

    def time_argument(self, jd: float) -> float:
        t = julian_centuries(jd)
        return t / 10.0 if self.time_unit == "millennia" else t

    def position(self, jd: float) -> HeliocentricPosition:
        """Evaluate the table at ``jd`` (dynamical time ≈ UT here)."""

        t = self.time_argument(jd)
        scale = self.amplitude_scale
        lon = evaluate_series(self.terms["L"], t) * scale
        lat = evaluate_series(self.terms["B"], t) * scale
        radius = evaluate_series(self.terms["R"], t) * scale
        return HeliocentricPosition(
            longitude=normalize_degrees(math.degrees(lon)),
            latitude=math.degrees(lat),
            radius=radius,
        )


def evaluate_series(groups: Sequence[Sequence[Term]], t: float) -> float:
    """Return ``Σ_power t**power · Σ A·cos(B + C·t)`` for ``groups``."""

    total = 0.0
    factor = 1.0
    for group in groups:
        total += factor * math.fsum(a * math.cos(b + c * t) for a, b, c in group)
        factor *= t
    return total


def _freeze(groups: Iterable[Iterable[Sequence[float]]]) -> tuple[tuple[Term, ...], ...]:
    return tuple(
        tuple((float(term[0]), float(term[1]), float(term[2])) for term in group)
        for group in groups
    )


def load_pymeeus_tables(bodies: Iterable[str] = SERIES_BODIES) -> dict[str, SeriesTable]:
    """Build tables from the VSOP87 data shipped with ``pymeeus``.

    Raises
    ------
    EphemerisDataUnavailable
        When ``pymeeus`` is not importable or a module lacks its tables.
    """

    tables: dict[str, SeriesTable] = {}
    for body in bodies:
        try:
            module = import_module(f"pymeeus.{body}")
        except ModuleNotFoundError as exc:
            raise EphemerisDataUnavailable(body, "pymeeus", str(exc)) from exc
        try:
            terms = {coord: _freeze(getattr(module, f"VSOP87_{coord}")) for coord in _COORDINATES}
        except AttributeError as exc:
            raise EphemerisDataUnavailable(body, "pymeeus", str(exc)) from exc
        tables[body] = SeriesTable(
            body=body,
            source="pymeeus",
            terms=terms,
            time_unit="millennia",
            amplitude_scale=1e-8,
        )
    LOG.debug("Loaded %d VSOP87 tables from pymeeus", len(tables))
    return tables


def parse_vsop87_text(text: str, body: str, source: str = "vsop87d") -> SeriesTable:
    """Parse the contents of a ``VSOP87D.*`` file into a :class:`SeriesTable`."""

    groups: dict[str, list[list[Term]]] = {coord: [] for coord in _COORDINATES}
    current: list[Term] | None = None
    for line in text.splitlines():
        if not line.strip():
            continue
        if "VSOP87" in line:
            match = _HEADER.search(line)
            if match is None:
                current = None
                continue
            coord = _COORDINATES[int(match.group("var")) - 1]
            power = int(match.group("power"))
            series = groups[coord]
            while len(series) <= power:
                series.append([])
            current = series[power]
            continue
        if current is None:
            continue
        fields = line.split()
        if len(fields) < 3:
            continue
        try:
            a, b, c = (float(value) for value in fields[-3:])
        except ValueError:
            continue
        current.append((a, b, c))

    return SeriesTable(
        body=body,
        source=source,
        terms={coord: _freeze(series) for coord, series in groups.items()},
        time_unit="millennia",
    )


def load_vsop87_directory(
    path: str | Path, bodies: Iterable[str] = SERIES_BODIES
) -> dict[str, SeriesTable]:
    """Load ``VSOP87D.<abbr>`` files from ``path``.

    Bodies whose file is absent are skipped with a warning; callers decide
    whether the remaining set is usable.
    """

    directory = Path(path).expanduser()
    if not directory.is_dir():
        raise EphemerisDataUnavailable("Earth", str(directory), "not a directory")
    tables: dict[str, SeriesTable] = {}
    for body in bodies:
        candidate = directory / f"VSOP87D.{_VSOP87_SUFFIX[body]}"
        if not candidate.is_file():
            LOG.warning(
                "VSOP87 file missing for %s at %s",
                body,
                candidate,
                extra={"err_code": "EPHEMERIS_FILE_MISSING"},
            )
            continue
        text = candidate.read_text(encoding="utf-8", errors="replace")
        tables[body] = parse_vsop87_text(text, body, source=str(candidate))
    return tables
