"""Orb policy exposed at the package level."""

from __future__ import annotations

from .orb import DEFAULT_ASPECTS, AspectDefinition, OrbCalculator, load_aspects_policy

__all__ = ["AspectDefinition", "DEFAULT_ASPECTS", "OrbCalculator", "load_aspects_policy"]
