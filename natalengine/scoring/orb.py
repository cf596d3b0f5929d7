"""Aspect angles and orb allowances sourced from the packaged policy JSON."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

from ..core.bodies import body_class, canonical_name

__all__ = ["AspectDefinition", "DEFAULT_ASPECTS", "OrbCalculator", "load_aspects_policy"]


def _normalize_name(name: str) -> str:
    return str(name).strip().lower()


@lru_cache(maxsize=1)
def load_aspects_policy() -> dict[str, Any]:
    """Load the packaged aspect policy with an editable-install fallback."""

    text: str | None = None
    try:
        resource = importlib_resources.files("natalengine.profiles").joinpath(
            "aspects_policy.json"
        )
        text = resource.read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError):  # pragma: no cover - packaging issues
        text = None
    if text is None:
        repo_path = Path(__file__).resolve().parents[1] / "profiles" / "aspects_policy.json"
        text = repo_path.read_text(encoding="utf-8")

    filtered = "\n".join(
        line for line in text.splitlines() if not line.strip().startswith("#")
    )
    return json.loads(filtered)


@dataclass(frozen=True)
class AspectDefinition:
    """One row of the aspect table."""

    name: str
    angle: float
    orb: float
    major: bool


def _aspect_table(policy: Mapping[str, Any], overrides: Mapping[str, float]) -> tuple[AspectDefinition, ...]:
    angles: Mapping[str, float] = policy.get("angles_deg", {})
    orbs: Mapping[str, float] = policy.get("orbs_deg", {})
    majors = {_normalize_name(name) for name in policy.get("major", [])}
    default = float(policy.get("default_orb_deg", 2.0))
    rows = []
    for name, angle in angles.items():
        key = _normalize_name(name)
        orb = float(overrides.get(key, orbs.get(key, default)))
        rows.append(AspectDefinition(key, float(angle), orb, key in majors))
    return tuple(sorted(rows, key=lambda row: row.angle))


DEFAULT_ASPECTS: tuple[AspectDefinition, ...] = _aspect_table(load_aspects_policy(), {})


class OrbCalculator:
    """Orb allowances for natal aspects and for transits.

    ``orb_overrides`` replaces the natal orb of the named aspects; it is how
    user settings reach the detector without editing the packaged policy.
    """

    def __init__(
        self,
        policy: Mapping[str, Any] | None = None,
        *,
        orb_overrides: Mapping[str, float] | None = None,
    ) -> None:
        self._policy = policy or load_aspects_policy()
        overrides = {_normalize_name(k): float(v) for k, v in (orb_overrides or {}).items()}
        self.aspects = _aspect_table(self._policy, overrides)

    def natal_orb(self, aspect: str) -> float:
        key = _normalize_name(aspect)
        for row in self.aspects:
            if row.name == key:
                return row.orb
        raise ValueError(
            f"Unknown aspect '{aspect}'. Valid options: {[row.name for row in self.aspects]}"
        )

    @property
    def transit_angles(self) -> tuple[str, ...]:
        """Chart angles that transit alongside the bodies when an observer is known."""

        return tuple(self._policy.get("transit_angles", ()))

    def _transit_key(self, body: str) -> str:
        return body if body in self.transit_angles else canonical_name(body)

    def transit_orb(self, body: str) -> float:
        """Orb for aspects made by transiting ``body`` (a body or a chart angle)."""

        by_class: Mapping[str, float] = self._policy.get("transit_orbs_by_class", {})
        default = float(self._policy.get("default_orb_deg", 2.0))
        key = "angle" if body in self.transit_angles else body_class(body)
        return float(by_class.get(key, default))

    def transit_window_days(self, body: str) -> float:
        """Half-width in days of the estimated effective window for ``body``."""

        windows: Mapping[str, float] = self._policy.get("transit_window_days", {})
        default = float(self._policy.get("default_window_days", 7.0))
        return float(windows.get(self._transit_key(body), default))
