"""One-time ephemeris initialisation returning an explicit context handle."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from ..core.errors import EphemerisDataUnavailable
from .series import SeriesTable, load_pymeeus_tables, load_vsop87_directory

LOG = logging.getLogger(__name__)

__all__ = [
    "DATA_PATH_ENV",
    "EphemerisContext",
    "init_ephemeris",
    "reset_ephemeris",
]

DATA_PATH_ENV = "NATALENGINE_VSOP87_PATH"

_INIT_LOCK = threading.Lock()
_CONTEXTS: dict[tuple[str | None, bool], "EphemerisContext"] = {}


@dataclass(frozen=True)
class EphemerisContext:
    """Loaded coefficient tables plus a description of where they came from.

    ``mode`` is ``"pymeeus"``, ``"vsop87d"`` or ``"elements"``. With mode
    ``"elements"`` no series tables are available and every body resolves
    through Keplerian elements.
    """

    mode: str
    source: str | None
    tables: Mapping[str, SeriesTable] = field(default_factory=dict)

    @property
    def series_available(self) -> bool:
        return "Earth" in self.tables

    def table(self, body: str) -> SeriesTable:
        """Return the series table for ``body``.

        Raises
        ------
        EphemerisDataUnavailable
            When the table (or Earth's, which every geocentric conversion
            needs) was not loaded.
        """

        if not self.series_available:
            raise EphemerisDataUnavailable(body, self.mode, "Earth series not loaded")
        try:
            return self.tables[body]
        except KeyError:
            raise EphemerisDataUnavailable(body, self.source or self.mode) from None


def _normalize_path(path: str | os.PathLike[str] | None) -> str | None:
    if not path:
        path = os.environ.get(DATA_PATH_ENV)
    if not path:
        return None
    return str(Path(path).expanduser())


def _load(resolved: str | None, prefer_elements: bool) -> EphemerisContext:
    if prefer_elements:
        return EphemerisContext(mode="elements", source=None)

    if resolved is not None:
        try:
            tables = load_vsop87_directory(resolved)
        except EphemerisDataUnavailable as exc:
            LOG.info(
                "VSOP87 directory unusable (%s); trying bundled tables",
                exc,
                extra={"err_code": "EPHEMERIS_FALLBACK"},
            )
        else:
            if "Earth" in tables:
                return EphemerisContext(
                    mode="vsop87d", source=resolved, tables=MappingProxyType(tables)
                )
            LOG.info(
                "VSOP87 directory %s has no Earth table; trying bundled tables",
                resolved,
                extra={"err_code": "EPHEMERIS_FALLBACK"},
            )

    try:
        tables = load_pymeeus_tables()
    except EphemerisDataUnavailable as exc:
        LOG.info(
            "Series tables unavailable (%s); using Keplerian elements",
            exc,
            extra={"err_code": "EPHEMERIS_FALLBACK"},
        )
        return EphemerisContext(mode="elements", source=None)
    return EphemerisContext(mode="pymeeus", source="pymeeus", tables=MappingProxyType(tables))


def init_ephemeris(
    path: str | os.PathLike[str] | None = None,
    *,
    force: bool = False,
    prefer_elements: bool = False,
) -> EphemerisContext:
    """Load coefficient tables once and return the shared context.

    Repeated calls with the same arguments return the same context without
    reloading. ``force`` discards the cached context for those arguments.
    When ``path`` is omitted the ``NATALENGINE_VSOP87_PATH`` environment
    variable is consulted, then the tables bundled with ``pymeeus``.
    """

    resolved = _normalize_path(path)
    key = (resolved, bool(prefer_elements))
    with _INIT_LOCK:
        context = _CONTEXTS.get(key)
        if context is not None and not force:
            LOG.debug("Ephemeris already initialised (mode=%s)", context.mode)
            return context
        context = _load(resolved, prefer_elements)
        _CONTEXTS[key] = context
    LOG.info(
        "Ephemeris initialised: mode=%s source=%s tables=%d",
        context.mode,
        context.source or "(none)",
        len(context.tables),
    )
    return context


def reset_ephemeris() -> None:
    """Forget every cached context (used by tests)."""

    with _INIT_LOCK:
        _CONTEXTS.clear()
