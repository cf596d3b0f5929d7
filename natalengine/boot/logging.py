"""Logging bootstrap for natalengine entry points.

Modules log through ``logging.getLogger(__name__)``. Fallback decisions carry
a machine-readable code in ``extra={"err_code": ...}``:

``EPHEMERIS_FALLBACK``
    a body was computed from a lower rung of the series/elements ladder
``EPHEMERIS_FILE_MISSING``
    a configured VSOP87 directory lacks the file for a body
``HOUSE_FALLBACK``
    Placidus was undefined and Equal houses were used instead
``BODY_UNAVAILABLE``
    a body was left out of a chart or transit snapshot

The default format prints the code in brackets; records without one show
``-``.
"""

from __future__ import annotations

import logging
import os
from typing import Any

__all__ = ["ERR_CODE_PLACEHOLDER", "ErrCodeFilter", "configure_logging"]

ERR_CODE_PLACEHOLDER = "-"

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(err_code)s] %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


class ErrCodeFilter(logging.Filter):
    """Give every record an ``err_code`` so the default format never fails."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "err_code"):
            record.err_code = ERR_CODE_PLACEHOLDER
        return True


def _coerce_level(value: str | int | None) -> int:
    if value is None:
        return logging.INFO
    if isinstance(value, int):
        return value
    candidate = value.strip()
    if not candidate:
        return logging.INFO
    if candidate.isdigit():
        return int(candidate)
    resolved = logging.getLevelName(candidate.upper())
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def configure_logging(*, level: str | int | None = None, **kwargs: Any) -> int:
    """Configure the root logger and return the effective level.

    ``level`` overrides the ``LOG_LEVEL`` environment variable (a level name
    or a number; anything else means INFO). Remaining keyword arguments go to
    :func:`logging.basicConfig`. Every root handler gets an
    :class:`ErrCodeFilter`.
    """

    effective_level = _coerce_level(os.environ.get("LOG_LEVEL") if level is None else level)
    logging.basicConfig(
        level=effective_level,
        format=kwargs.pop("format", _DEFAULT_FORMAT),
        datefmt=kwargs.pop("datefmt", _DEFAULT_DATEFMT),
        force=kwargs.pop("force", True),
        **kwargs,
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(existing, ErrCodeFilter) for existing in handler.filters):
            handler.addFilter(ErrCodeFilter())
    return effective_level
