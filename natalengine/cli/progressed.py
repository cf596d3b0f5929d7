"""``progressed`` subcommand."""

from __future__ import annotations

import argparse
import sys

from ..chart.config import PROGRESSION_METHOD_CHOICES
from ..chart.natal import compute_natal_chart
from ..chart.progressions import compute_progressed_chart
from ..core.errors import NatalEngineError
from . import _common


def add_subparser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    """Register the ``progressed`` subcommand."""

    parser = sub.add_parser(
        "progressed",
        help="Progress a natal chart to a target date",
        description="Day-for-a-year progression using the naive-date or solar-arc method.",
    )
    _common.add_chart_arguments(parser)
    parser.add_argument("--target", required=True, help="Target instant as ISO-8601")
    parser.add_argument(
        "--method",
        choices=PROGRESSION_METHOD_CHOICES,
        help="Progression method (default from settings: solar_arc)",
    )
    parser.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    """Execute the progressed subcommand."""

    try:
        settings = _common.resolve_settings(args)
        adapter = _common.build_adapter(args, settings)
        config = _common.build_chart_config(args, settings, progression_method=args.method)
        natal = compute_natal_chart(
            _common.parse_moment(args.date),
            _common.location_from(args),
            config=config,
            bodies=args.bodies,
            adapter=adapter,
        )
        progressed = compute_progressed_chart(
            natal, _common.parse_moment(args.target), config=config, adapter=adapter
        )
    except (NatalEngineError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.json:
        _common.emit_json(progressed.to_dict())
        return 0

    chart = progressed.chart
    print(f"Progressed ({progressed.method.value}) for {progressed.target_moment.isoformat()}")
    print(f"  progressed JD {progressed.progressed_julian_day:.6f}")
    if progressed.solar_arc is not None:
        print(f"  solar arc {progressed.solar_arc:.4f}°")
    for name, pos in chart.positions.items():
        print(f"  {name:<16} {_common.format_longitude(pos.longitude)}")
    for label, value in chart.angles.to_dict().items():
        print(f"  {label:<16} {_common.format_longitude(value)}")
    return 0
