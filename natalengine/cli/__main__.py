"""Entry point for the natalengine CLI."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from ..boot.logging import configure_logging
from . import houses, natal, progressed, transits


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="natalengine", description="natalengine CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    natal.add_subparser(sub)
    transits.add_subparser(sub)
    progressed.add_subparser(sub)
    houses.add_subparser(sub)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
