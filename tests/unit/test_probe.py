"""Tests for the reachability probe."""

from __future__ import annotations

import asyncio
import time

import pytest

pytest.importorskip("requests")
import requests

from markhub_client.probe import is_server_running


def test_probe_returns_true_for_live_server(live_http_port: int) -> None:
    """Any HTTP answer counts, even a 404."""
    started = time.monotonic()
    assert asyncio.run(is_server_running(live_http_port)) is True
    assert time.monotonic() - started < 1.0


def test_probe_accepts_port_as_string(live_http_port: int) -> None:
    assert asyncio.run(is_server_running(str(live_http_port))) is True


def test_probe_returns_false_when_nothing_listens(closed_port: int) -> None:
    started = time.monotonic()
    assert asyncio.run(is_server_running(closed_port)) is False
    assert time.monotonic() - started < 1.5


def test_probe_times_out_on_silent_listener(silent_port: int) -> None:
    started = time.monotonic()
    assert asyncio.run(is_server_running(silent_port, timeout_s=0.3)) is False
    assert time.monotonic() - started < 1.0


def test_probe_default_timeout_is_bounded(silent_port: int) -> None:
    started = time.monotonic()
    assert asyncio.run(is_server_running(silent_port)) is False
    assert time.monotonic() - started < 1.5


@pytest.mark.parametrize("port", ["not-a-port", "", None, 0, 70000])
def test_probe_rejects_invalid_ports(port) -> None:
    assert asyncio.run(is_server_running(port)) is False


def test_probe_normalizes_request_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(url: str, timeout: float, allow_redirects: bool):
        raise requests.ConnectionError("connection reset by peer")

    monkeypatch.setattr("requests.get", fake_get)

    assert asyncio.run(is_server_running(5174)) is False


def test_probe_hits_root_url(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[str] = []

    class _Response:
        status_code = 500

        def close(self) -> None:
            return None

    def fake_get(url: str, timeout: float, allow_redirects: bool):
        seen.append(url)
        return _Response()

    monkeypatch.setattr("requests.get", fake_get)

    assert asyncio.run(is_server_running(5174)) is True
    assert seen == ["http://localhost:5174/"]
