"""Configuration models and helpers for natalengine settings."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator

from ..chart.config import ChartConfig
from ..ephemeris.house_systems import resolve_house_system

CURRENT_SETTINGS_SCHEMA_VERSION = 1
CONFIG_FILENAME = "config.yaml"

# -------------------- Settings Schema --------------------


class HousesCfg(BaseModel):
    """House systems to compute; the first is used for house placements."""

    systems: List[str] = Field(default_factory=lambda: ["placidus"])

    @field_validator("systems", mode="before")
    @classmethod
    def _canonical_systems(cls, value: object) -> List[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError("systems must be a list of house system names")
        resolved: List[str] = []
        for item in value:
            name = resolve_house_system(str(item)).value
            if name not in resolved:
                resolved.append(name)
        return resolved or ["placidus"]


class AspectsCfg(BaseModel):
    """Natal orb overrides keyed by aspect name."""

    orbs_by_aspect: Dict[str, float] = Field(default_factory=dict)

    @field_validator("orbs_by_aspect", mode="before")
    @classmethod
    def _cap_orbs(cls, data: Dict[str, float] | object) -> Dict[str, float] | object:
        if not isinstance(data, dict):
            return data
        return {
            str(key).lower(): max(0.0, min(15.0, float(value)))
            for key, value in data.items()
        }


class TransitsCfg(BaseModel):
    """Transit defaults."""

    observer_latitude: Optional[float] = None
    observer_longitude: Optional[float] = None
    include_minor_bodies: bool = False

    @field_validator("observer_latitude", mode="before")
    @classmethod
    def _cap_latitude(cls, value: object) -> Optional[float]:
        if value is None:
            return None
        return max(-90.0, min(90.0, float(value)))  # type: ignore[arg-type]

    @property
    def observer(self) -> Optional[Tuple[float, float]]:
        if self.observer_latitude is None or self.observer_longitude is None:
            return None
        return self.observer_latitude, self.observer_longitude


class EphemerisCfg(BaseModel):
    """Where series coefficients come from."""

    data_path: Optional[str] = None
    prefer_elements: bool = False


class ChartCfg(BaseModel):
    """Chart assembly options."""

    progression_method: Literal["solar_arc", "naive_date"] = "solar_arc"
    nodes_variant: Literal["mean", "true"] = "mean"
    include_minor_bodies: bool = True


class Settings(BaseModel):
    """Top-level settings document persisted as YAML."""

    schema_version: int = CURRENT_SETTINGS_SCHEMA_VERSION
    houses: HousesCfg = Field(default_factory=HousesCfg)
    aspects: AspectsCfg = Field(default_factory=AspectsCfg)
    transits: TransitsCfg = Field(default_factory=TransitsCfg)
    ephemeris: EphemerisCfg = Field(default_factory=EphemerisCfg)
    chart: ChartCfg = Field(default_factory=ChartCfg)

    def to_chart_config(self) -> ChartConfig:
        return ChartConfig(
            house_systems=tuple(self.houses.systems),
            progression_method=self.chart.progression_method,
            nodes_variant=self.chart.nodes_variant,
            include_minor_bodies=self.chart.include_minor_bodies,
            orb_overrides=dict(self.aspects.orbs_by_aspect),
        )


# -------------------- Persistence --------------------


def get_config_home() -> Path:
    """Return the directory where settings should be stored."""

    return Path(os.environ.get("NATALENGINE_HOME", str(Path.home() / ".natalengine")))


def config_path() -> Path:
    """Return the full path to the configuration file, creating directories as needed."""

    home = get_config_home()
    home.mkdir(parents=True, exist_ok=True)
    return home / CONFIG_FILENAME


def default_settings() -> Settings:
    """Instantiate a Settings object populated with defaults."""

    return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Persist the given settings to disk as YAML."""

    target_path = Path(path) if path else config_path()
    target_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump()
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
    return target_path


def _coerce_schema_version(raw: object) -> int:
    try:
        value = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1
    return max(1, value)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, writing defaults if the file is missing."""

    source_path = Path(path) if path else config_path()
    if not source_path.exists():
        settings = default_settings()
        save_settings(settings, source_path)
        return settings
    with source_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raw = {}
    data = deepcopy(raw)
    data["schema_version"] = min(
        _coerce_schema_version(raw.get("schema_version")), CURRENT_SETTINGS_SCHEMA_VERSION
    )
    return Settings(**data)


__all__ = [
    "AspectsCfg",
    "ChartCfg",
    "EphemerisCfg",
    "HousesCfg",
    "Settings",
    "TransitsCfg",
    "config_path",
    "default_settings",
    "get_config_home",
    "load_settings",
    "save_settings",
]
