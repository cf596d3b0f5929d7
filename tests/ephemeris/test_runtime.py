from __future__ import annotations

import threading

import pytest

from natalengine.core.errors import EphemerisDataUnavailable
from natalengine.ephemeris.runtime import (
    DATA_PATH_ENV,
    EphemerisContext,
    init_ephemeris,
    reset_ephemeris,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(DATA_PATH_ENV, raising=False)
    yield


def test_init_is_idempotent() -> None:
    first = init_ephemeris(prefer_elements=True)
    second = init_ephemeris(prefer_elements=True)
    assert first is second
    assert first.mode == "elements"
    assert not first.series_available


def test_force_reloads() -> None:
    first = init_ephemeris(prefer_elements=True)
    forced = init_ephemeris(prefer_elements=True, force=True)
    assert forced is not first
    assert init_ephemeris(prefer_elements=True) is forced


def test_concurrent_initialisation_shares_context() -> None:
    reset_ephemeris()
    results: list[EphemerisContext] = []
    lock = threading.Lock()

    def worker() -> None:
        context = init_ephemeris(prefer_elements=True)
        with lock:
            results.append(context)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(results) == 8
    assert all(context is results[0] for context in results)


def test_default_uses_bundled_tables() -> None:
    pytest.importorskip("pymeeus")
    context = init_ephemeris()
    assert context.mode == "pymeeus"
    assert context.series_available
    assert context.table("Mars").body == "Mars"


def test_directory_without_earth_falls_back(tmp_path) -> None:
    context = init_ephemeris(tmp_path)
    assert context.mode in {"pymeeus", "elements"}
    assert context.source != str(tmp_path)


def test_environment_variable_is_consulted(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(DATA_PATH_ENV, str(tmp_path / "absent"))
    context = init_ephemeris()
    assert context.mode in {"pymeeus", "elements"}


def test_elements_context_has_no_tables() -> None:
    context = EphemerisContext(mode="elements", source=None)
    with pytest.raises(EphemerisDataUnavailable):
        context.table("Mars")
