"""``natal`` subcommand: compute and print a birth chart."""

from __future__ import annotations

import argparse
import sys

from ..chart.natal import compute_natal_chart
from ..core.errors import NatalEngineError
from . import _common


def add_subparser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    """Register the ``natal`` subcommand."""

    parser = sub.add_parser(
        "natal",
        help="Compute a natal chart",
        description="Compute body positions, angles, houses and aspects for an instant and place.",
    )
    _common.add_chart_arguments(parser)
    parser.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    """Execute the natal subcommand."""

    try:
        settings = _common.resolve_settings(args)
        chart = compute_natal_chart(
            _common.parse_moment(args.date),
            _common.location_from(args),
            config=_common.build_chart_config(args, settings),
            bodies=args.bodies,
            adapter=_common.build_adapter(args, settings),
        )
    except (NatalEngineError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.json:
        _common.emit_json(chart.to_dict())
        return 0

    print(f"Chart for {chart.moment.isoformat() if chart.moment else chart.julian_day}")
    print(f"  JD {chart.julian_day:.6f}  LST {chart.sidereal_time:.4f}°  ε {chart.obliquity:.4f}°")
    for name, pos in chart.positions.items():
        flag = " R" if pos.retrograde else ""
        note = f" ({pos.source})" if pos.estimated else ""
        house = chart.house_placements.get(name, "-")
        print(f"  {name:<16} {_common.format_longitude(pos.longitude)}{flag}  house {house}{note}")
    for name, pos in chart.points.items():
        print(f"  {name:<16} {_common.format_longitude(pos.longitude)}")
    for label, value in chart.angles.to_dict().items():
        print(f"  {label:<16} {_common.format_longitude(value)}")
    for system, cusps in chart.houses.items():
        suffix = f" (fallback from {cusps.fallback_from.value})" if cusps.degraded else ""
        print(f"Houses: {cusps.system.value}{suffix}")
        for index, cusp in enumerate(cusps.cusps, start=1):
            print(f"  {index:>2} {_common.format_longitude(cusp)}")
    print(f"Lunar phase: {chart.lunar_phase:.2f}° {chart.lunar_phase_name}")
    print("Aspects:")
    for aspect in chart.aspects:
        print(f"  {aspect.body_a} {aspect.aspect} {aspect.body_b}  orb {aspect.orb:.2f}°")
    for name, reason in chart.unavailable.items():
        print(f"Unavailable: {name}: {reason}")
    return 0
