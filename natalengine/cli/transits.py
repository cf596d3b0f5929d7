"""``transits`` subcommand: current sky against a natal chart."""

from __future__ import annotations

import argparse
import sys

from ..chart.natal import ChartLocation, compute_natal_chart
from ..chart.transits import TransitScanner
from ..core.bodies import MINOR_BODIES, TRANSIT_BODIES
from ..core.errors import NatalEngineError
from . import _common


def add_subparser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    """Register the ``transits`` subcommand."""

    parser = sub.add_parser(
        "transits",
        help="Aspects from current positions to a natal chart",
        description=(
            "Compute transiting positions for --at (default: now) and report their "
            "aspects to the natal bodies, Ascendant and Midheaven."
        ),
    )
    _common.add_chart_arguments(parser)
    parser.add_argument("--at", help="Transit instant as ISO-8601 (default: now)")
    parser.add_argument("--observer-lat", type=float, help="Observer latitude for topocentric Moon")
    parser.add_argument("--observer-lon", type=float, help="Observer longitude for topocentric Moon")
    parser.set_defaults(func=run)


def _observer(args: argparse.Namespace, settings) -> ChartLocation | None:
    if args.observer_lat is not None and args.observer_lon is not None:
        return ChartLocation(args.observer_lat, args.observer_lon)
    configured = settings.transits.observer
    if configured is not None:
        return ChartLocation(*configured)
    return None


def _transit_bodies(settings) -> tuple[str, ...] | None:
    if not settings.transits.include_minor_bodies:
        return None
    extra = tuple(body for body in MINOR_BODIES if body not in TRANSIT_BODIES)
    return TRANSIT_BODIES + extra


def run(args: argparse.Namespace) -> int:
    """Execute the transits subcommand."""

    try:
        settings = _common.resolve_settings(args)
        adapter = _common.build_adapter(args, settings)
        natal = compute_natal_chart(
            _common.parse_moment(args.date),
            _common.location_from(args),
            config=_common.build_chart_config(args, settings),
            bodies=args.bodies,
            adapter=adapter,
        )
        moment = _common.parse_moment(args.at) if args.at else None
        snapshot = TransitScanner(adapter=adapter, bodies=_transit_bodies(settings)).scan(
            natal, moment, observer=_observer(args, settings)
        )
    except (NatalEngineError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.json:
        _common.emit_json(snapshot.to_dict())
        return 0

    print(f"Transits at {snapshot.moment.isoformat()}")
    labels = {
        "short_term": "Short-term influences",
        "regular": "Regular influences",
        "long_term": "Long-term influences",
    }
    for group, contacts in snapshot.grouped().items():
        if not contacts:
            continue
        print(labels[group])
        for contact in contacts:
            motion = "applying" if contact.applying else "separating"
            print(
                f"  {contact.transiting_body} {contact.aspect} natal {contact.natal_body}"
                f"  orb {contact.orb:.2f}°  {motion}  ±{contact.window_days:g}d"
            )
    for name, reason in snapshot.unavailable.items():
        print(f"Unavailable: {name}: {reason}")
    return 0
