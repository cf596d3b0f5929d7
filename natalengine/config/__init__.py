"""Persistent user settings."""

from .settings import Settings, default_settings, load_settings, save_settings

__all__ = ["Settings", "default_settings", "load_settings", "save_settings"]
