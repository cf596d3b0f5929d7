"""``houses`` subcommand: angles and cusps only."""

from __future__ import annotations

import argparse
import sys

from ..core.errors import NatalEngineError
from ..core.time import julian_day_from_datetime, local_sidereal_time
from ..ephemeris.frames import mean_obliquity, nutation
from ..ephemeris.house_systems import compute_angles, houses_with_fallback
from . import _common


def add_subparser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    """Register the ``houses`` subcommand."""

    parser = sub.add_parser(
        "houses",
        help="Compute chart angles and house cusps",
        description="Print Ascendant, Midheaven and cusps for the requested house systems.",
    )
    parser.add_argument("--date", required=True, help="Instant as ISO-8601")
    parser.add_argument("--lat", type=float, required=True, help="Latitude, north positive")
    parser.add_argument("--lon", type=float, required=True, help="Longitude, east positive")
    parser.add_argument(
        "--house-system",
        action="append",
        dest="house_systems",
        metavar="NAME",
        help="House system (placidus, equal, whole_sign); repeat for several",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON output")
    parser.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    """Execute the houses subcommand."""

    try:
        location = _common.location_from(args)
        jd = julian_day_from_datetime(_common.parse_moment(args.date))
        lst = local_sidereal_time(jd, location.longitude)
        eps = mean_obliquity(jd) + nutation(jd).obliquity
        angles = compute_angles(lst, location.latitude, eps)
        houses = [
            houses_with_fallback(
                system, lst=lst, latitude=location.latitude, obliquity=eps, angles=angles
            )
            for system in (args.house_systems or ["placidus"])
        ]
    except (NatalEngineError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.json:
        _common.emit_json(
            {
                "julian_day": jd,
                "sidereal_time": lst,
                "obliquity": eps,
                "angles": angles.to_dict(),
                "houses": [cusps.to_dict() for cusps in houses],
            }
        )
        return 0

    for label, value in angles.to_dict().items():
        print(f"{label:<12} {_common.format_longitude(value)}")
    for cusps in houses:
        suffix = f" (fallback from {cusps.fallback_from.value})" if cusps.degraded else ""
        print(f"{cusps.system.value}{suffix}")
        for index, cusp in enumerate(cusps.cusps, start=1):
            print(f"  {index:>2} {_common.format_longitude(cusp)}")
    return 0
