"""Argument helpers shared by the CLI subcommands."""

from __future__ import annotations

import argparse
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..chart.config import ChartConfig
from ..chart.natal import ChartLocation
from ..config.settings import Settings, default_settings, load_settings
from ..core.angles import SIGN_NAMES, normalize_degrees, sign_index
from ..ephemeris.adapter import EphemerisAdapter
from ..ephemeris.runtime import init_ephemeris


def add_chart_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--date",
        required=True,
        help="Birth instant as ISO-8601 (e.g. 1990-01-01T00:00:00Z or with an offset)",
    )
    parser.add_argument("--lat", type=float, required=True, help="Latitude, north positive")
    parser.add_argument("--lon", type=float, required=True, help="Longitude, east positive")
    parser.add_argument(
        "--house-system",
        action="append",
        dest="house_systems",
        metavar="NAME",
        help="House system (placidus, equal, whole_sign); repeat for several",
    )
    parser.add_argument(
        "--body",
        action="append",
        dest="bodies",
        metavar="NAME",
        help="Restrict the roster to these bodies; repeat for several",
    )
    add_runtime_arguments(parser)


def add_runtime_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--vsop87-path", help="Directory holding VSOP87D.* files")
    parser.add_argument(
        "--elements-only",
        action="store_true",
        help="Skip series tables and use Keplerian elements for every planet",
    )
    parser.add_argument("--settings", type=Path, help="Path to a settings YAML file")
    parser.add_argument("--json", action="store_true", help="Emit JSON output")


def parse_moment(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` and naive values mean UTC."""

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"invalid ISO-8601 timestamp: {value!r}") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment


def resolve_settings(args: argparse.Namespace) -> Settings:
    path = getattr(args, "settings", None)
    if path is None:
        return default_settings()
    return load_settings(path)


def build_adapter(args: argparse.Namespace, settings: Settings) -> EphemerisAdapter:
    context = init_ephemeris(
        args.vsop87_path or settings.ephemeris.data_path,
        prefer_elements=bool(args.elements_only or settings.ephemeris.prefer_elements),
    )
    return EphemerisAdapter(context)


def build_chart_config(args: argparse.Namespace, settings: Settings, **overrides: Any) -> ChartConfig:
    base = settings.to_chart_config()
    systems = getattr(args, "house_systems", None)
    return ChartConfig(
        house_systems=tuple(systems) if systems else base.house_systems,
        progression_method=overrides.get("progression_method") or base.progression_method,
        nodes_variant=base.nodes_variant,
        include_minor_bodies=base.include_minor_bodies,
        orb_overrides=dict(base.orb_overrides),
    )


def location_from(args: argparse.Namespace) -> ChartLocation:
    return ChartLocation(latitude=args.lat, longitude=args.lon)


def format_longitude(longitude: float) -> str:
    """Render a longitude as ``DD°MM' Sign``."""

    lon = normalize_degrees(longitude)
    within = lon - 30.0 * sign_index(lon)
    degrees = int(within)
    minutes = int(round((within - degrees) * 60.0))
    if minutes == 60:
        degrees, minutes = degrees + 1, 0
    return f"{degrees:02d}°{minutes:02d}' {SIGN_NAMES[sign_index(lon)]}"


def emit_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))
