"""Transit snapshots: current positions aspected against a natal chart."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from ..core.bodies import TRANSIT_BODIES, canonical_name, transit_class
from ..core.errors import EphemerisDataUnavailable
from ..core.time import ensure_utc, julian_day_from_datetime, local_sidereal_time
from ..ephemeris.adapter import BodyPosition, EphemerisAdapter
from ..ephemeris.frames import mean_obliquity, nutation
from ..ephemeris.house_systems import ChartAngles, compute_angles
from ..observability.metrics import CHART_COMPUTE_DURATION
from ..scoring.orb import OrbCalculator
from .aspects import match_aspect
from .natal import ANGLE_TARGETS, ChartLocation, NatalChart

LOG = logging.getLogger(__name__)

__all__ = ["TRANSIT_GROUPS", "TransitContact", "TransitScanner", "TransitSnapshot"]

TRANSIT_GROUPS: tuple[str, ...] = ("short_term", "regular", "long_term")


@dataclass(frozen=True)
class TransitContact:
    """Aspect between a transiting body or angle and a natal body or angle.

    ``applying`` is approximated from the transiting body's direction only
    (direct motion counts as applying). The window is a fixed half-width
    around the scan moment keyed to the body, not a computed ingress/egress.
    """

    moment: datetime
    julian_day: float
    transiting_body: str
    natal_body: str
    aspect: str
    angle: float
    separation: float
    orb: float
    orb_allow: float
    transit_class: str
    applying: bool
    window_days: float
    window_start: datetime
    window_end: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "moment": self.moment.isoformat(),
            "julian_day": self.julian_day,
            "transiting_body": self.transiting_body,
            "natal_body": self.natal_body,
            "aspect": self.aspect,
            "angle": self.angle,
            "separation": self.separation,
            "orb": self.orb,
            "orb_allow": self.orb_allow,
            "transit_class": self.transit_class,
            "applying": self.applying,
            "motion_estimate": "approximate",
            "window_days": self.window_days,
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
        }


@dataclass(frozen=True)
class TransitSnapshot:
    """Short-lived aggregate of "now" positions and their natal contacts."""

    moment: datetime
    julian_day: float
    positions: dict[str, BodyPosition]
    contacts: tuple[TransitContact, ...]
    observer: ChartLocation | None = None
    angles: ChartAngles | None = None
    unavailable: dict[str, str] = field(default_factory=dict)

    @property
    def topocentric(self) -> bool:
        return self.observer is not None

    @property
    def degraded(self) -> bool:
        return bool(self.unavailable)

    def grouped(self) -> dict[str, list[TransitContact]]:
        """Contacts keyed by ``short_term``, ``regular`` and ``long_term``."""

        groups: dict[str, list[TransitContact]] = {name: [] for name in TRANSIT_GROUPS}
        for contact in self.contacts:
            groups[contact.transit_class].append(contact)
        return groups

    def to_dict(self) -> dict[str, Any]:
        return {
            "moment": self.moment.isoformat(),
            "julian_day": self.julian_day,
            "topocentric": self.topocentric,
            "observer": (
                {"latitude": self.observer.latitude, "longitude": self.observer.longitude}
                if self.observer
                else None
            ),
            "angles": self.angles.to_dict() if self.angles else None,
            "positions": {name: pos.to_dict() for name, pos in self.positions.items()},
            "contacts": [contact.to_dict() for contact in self.contacts],
            "unavailable": dict(self.unavailable),
        }


class TransitScanner:
    """Compute transit contacts against a natal chart."""

    def __init__(
        self,
        *,
        adapter: EphemerisAdapter | None = None,
        orb_calculator: OrbCalculator | None = None,
        bodies: Sequence[str] | None = None,
    ) -> None:
        self.adapter = adapter or EphemerisAdapter()
        self.orb_calculator = orb_calculator or OrbCalculator()
        self.bodies = tuple(canonical_name(body) for body in (bodies or TRANSIT_BODIES))

    def _positions(
        self, jd: float, observer: ChartLocation | None
    ) -> tuple[dict[str, BodyPosition], dict[str, str], ChartAngles | None]:
        positions: dict[str, BodyPosition] = {}
        unavailable: dict[str, str] = {}
        for name in self.bodies:
            try:
                positions[name] = self.adapter.body_position(name, jd)
            except EphemerisDataUnavailable as exc:
                LOG.warning(
                    "Skipping transiting %s: %s",
                    name,
                    exc,
                    extra={"err_code": "BODY_UNAVAILABLE"},
                )
                unavailable[name] = str(exc)
        if observer is None:
            return positions, unavailable, None
        if "Moon" in positions:
            positions["Moon"] = self.adapter.topocentric_moon(
                jd, observer.latitude, observer.longitude
            )
        lst = local_sidereal_time(jd, observer.longitude)
        eps = mean_obliquity(jd) + nutation(jd).obliquity
        return positions, unavailable, compute_angles(lst, observer.latitude, eps)

    def _movers(
        self, positions: dict[str, BodyPosition], angles: ChartAngles | None
    ) -> list[tuple[str, float, bool, str]]:
        """``(name, longitude, applying, transit class)`` for everything that transits."""

        movers = [
            (name, pos.longitude, not pos.retrograde, transit_class(name))
            for name, pos in positions.items()
        ]
        if angles is not None:
            current = {"Ascendant": angles.ascendant, "Midheaven": angles.midheaven}
            # Angles sweep the zodiac once a day and never turn back.
            movers.extend(
                (name, current[name], True, "short_term")
                for name in self.orb_calculator.transit_angles
                if name in current
            )
        return movers

    def _natal_targets(self, natal_chart: NatalChart) -> dict[str, float]:
        targets = {name: pos.longitude for name, pos in natal_chart.positions.items()}
        angle_values = {
            "Ascendant": natal_chart.angles.ascendant,
            "Midheaven": natal_chart.angles.midheaven,
        }
        for name in ANGLE_TARGETS:
            targets[name] = angle_values[name]
        return targets

    def scan(
        self,
        natal_chart: NatalChart,
        moment: datetime | None = None,
        *,
        observer: ChartLocation | None = None,
    ) -> TransitSnapshot:
        """Return the transit snapshot for ``moment`` (default: now, UTC).

        With ``observer`` the Moon is corrected topocentrically and the
        current Ascendant/Midheaven are computed for the observer and aspected
        like the bodies; otherwise every position is geocentric and no current
        angles take part. Bodies without ephemeris data are listed in
        ``unavailable`` instead of failing the snapshot.
        """

        moment = ensure_utc(moment or datetime.now(UTC))
        jd = julian_day_from_datetime(moment)
        with CHART_COMPUTE_DURATION.labels(kind="transit").time():
            positions, unavailable, angles = self._positions(jd, observer)
            targets = self._natal_targets(natal_chart)
            contacts: list[TransitContact] = []
            for transiting, longitude, applying, group in self._movers(positions, angles):
                allow = self.orb_calculator.transit_orb(transiting)
                half_width = self.orb_calculator.transit_window_days(transiting)
                window = timedelta(days=half_width)
                for natal_name, natal_lon in targets.items():
                    if natal_name == transiting and transiting != "Sun":
                        continue
                    match = match_aspect(
                        longitude,
                        natal_lon,
                        self.orb_calculator.aspects,
                        max_orb=allow,
                    )
                    if match is None:
                        continue
                    contacts.append(
                        TransitContact(
                            moment=moment,
                            julian_day=jd,
                            transiting_body=transiting,
                            natal_body=natal_name,
                            aspect=match.aspect,
                            angle=match.angle,
                            separation=match.separation,
                            orb=match.orb,
                            orb_allow=match.orb_allow,
                            transit_class=group,
                            applying=applying,
                            window_days=half_width,
                            window_start=moment - window,
                            window_end=moment + window,
                        )
                    )
        contacts.sort(key=lambda c: (TRANSIT_GROUPS.index(c.transit_class), c.orb))
        return TransitSnapshot(
            moment=moment,
            julian_day=jd,
            positions=positions,
            contacts=tuple(contacts),
            observer=observer,
            angles=angles,
            unavailable=unavailable,
        )
