"""Pytest configuration for natalengine."""

from __future__ import annotations

import pytest

from natalengine.ephemeris.adapter import EphemerisAdapter
from natalengine.ephemeris.runtime import init_ephemeris


@pytest.fixture(scope="session")
def elements_adapter() -> EphemerisAdapter:
    """Adapter that resolves every planet through Keplerian elements."""

    return EphemerisAdapter(init_ephemeris(prefer_elements=True))


@pytest.fixture(scope="session")
def series_adapter() -> EphemerisAdapter:
    """Adapter backed by the VSOP87 tables bundled with pymeeus."""

    pytest.importorskip("pymeeus")
    context = init_ephemeris()
    if not context.series_available:
        pytest.skip("VSOP87 tables unavailable")
    return EphemerisAdapter(context)
