"""Tests for the preview server command line."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

import pytest

from markhub_server import __main__ as server_main


class _FakeServer:
    instances: list["_FakeServer"] = []

    def __init__(self, port: int, host: str, port_file: Path) -> None:
        self.port = port
        self.host = host
        self.port_file = port_file
        _FakeServer.instances.append(self)

    def start(self, on_ready=None) -> None:
        if on_ready is not None:
            on_ready(40200)


@pytest.fixture
def opened(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    urls: list[str] = []
    _FakeServer.instances = []
    monkeypatch.setattr(server_main, "PreviewServer", _FakeServer)
    monkeypatch.setattr(server_main.webbrowser, "open", urls.append)
    return urls


def test_parse_args_defaults() -> None:
    args = server_main.parse_args([])
    assert args.target is None
    assert args.port == 0
    assert args.host == "127.0.0.1"
    assert args.port_file is None
    assert args.no_browser is False


def test_browser_suppressed_by_flag_or_env(monkeypatch: pytest.MonkeyPatch) -> None:
    assert server_main.browser_suppressed(server_main.parse_args(["--no-browser"]))
    assert not server_main.browser_suppressed(server_main.parse_args([]))

    monkeypatch.setenv("MARKHUB_NO_BROWSER", "1")
    assert server_main.browser_suppressed(server_main.parse_args([]))


def test_initial_view_path_for_file(tmp_path: Path) -> None:
    doc = tmp_path / "a b.md"
    doc.write_text("# A")

    path = server_main.initial_view_path(str(doc))

    assert path == f"/local?file={quote(str(doc.resolve()), safe='')}"


def test_initial_view_path_for_url() -> None:
    path = server_main.initial_view_path("https://gist.github.com/u/1")
    assert path == "/view?url=https%3A%2F%2Fgist.github.com%2Fu%2F1"


def test_initial_view_path_for_unknown_target(capsys: pytest.CaptureFixture[str]) -> None:
    assert server_main.initial_view_path("missing.md") == "/"
    assert "Error: File not found: missing.md" in capsys.readouterr().err


def test_initial_view_path_without_target() -> None:
    assert server_main.initial_view_path(None) == "/"


def test_main_opens_initial_view(opened: list[str], tmp_path: Path) -> None:
    server_main.main(["--port-file", str(tmp_path / "port")])

    assert opened == ["http://localhost:40200/"]
    assert _FakeServer.instances[0].port_file == tmp_path / "port"
    assert _FakeServer.instances[0].port == 0


def test_main_respects_no_browser(opened: list[str], tmp_path: Path) -> None:
    server_main.main(["--no-browser", "--port-file", str(tmp_path / "port")])
    assert opened == []


def test_main_uses_discovery_path_by_default(opened: list[str], monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MARKHUB_PORT_FILE", str(tmp_path / "env-port"))
    server_main.main(["--no-browser"])
    assert _FakeServer.instances[0].port_file == tmp_path / "env-port"


def test_main_exits_on_startup_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    class _Broken:
        def __init__(self, **kwargs) -> None:
            raise OSError("cannot bind")

    monkeypatch.setattr(server_main, "PreviewServer", _Broken)

    with pytest.raises(SystemExit) as excinfo:
        server_main.main(["--no-browser", "--port-file", str(tmp_path / "port")])
    assert excinfo.value.code == 1
