"""Command line interface for natalengine."""

from .__main__ import build_parser, main

__all__ = ["build_parser", "main"]
