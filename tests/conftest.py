"""
Shared pytest fixtures for enroll tests.

This module provides:
- load_page: Reads an HTML fixture from tests/testdata
- RecordingServer / http_server: A local HTTP server with scripted routes
  that records every request it receives
- free_port: A TCP port on 127.0.0.1 with nothing listening
- isolated_home: Empty HOME and working directory, no ENROLL_* variables
- Container isolation between tests
"""

from __future__ import annotations

import os
import socket
import threading
import urllib.parse
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

from enroll.core import reset

TESTDATA_DIR = Path(__file__).parent / "testdata"


@dataclass
class Route:
    """Scripted response for one path."""

    response: str = ""
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class RecordedCall:
    """One request as seen by the server."""

    method: str
    path: str
    query: str
    form: dict[str, str]
    cookie: str | None


class RecordingServer:
    """Threaded HTTP server answering from a path -> Route table."""

    def __init__(self, port: int = 0) -> None:
        self.routes: dict[str, Route] = {}
        self.calls: list[RecordedCall] = []
        self._lock = threading.Lock()
        self._httpd = ThreadingHTTPServer(("127.0.0.1", port), self._make_handler())
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        host, port = self._httpd.server_address[:2]
        return f"http://{host}:{port}"

    def _make_handler(self) -> type[BaseHTTPRequestHandler]:
        server = self

        class Handler(BaseHTTPRequestHandler):
            def _handle(self) -> None:
                parsed = urllib.parse.urlsplit(self.path)
                form: dict[str, str] = {}
                length = int(self.headers.get("Content-Length") or 0)
                if length:
                    raw = self.rfile.read(length).decode()
                    form = dict(urllib.parse.parse_qsl(raw, keep_blank_values=True))

                with server._lock:
                    server.calls.append(
                        RecordedCall(
                            method=self.command,
                            path=parsed.path,
                            query=parsed.query,
                            form=form,
                            cookie=self.headers.get("Cookie"),
                        )
                    )

                route = server.routes.get(parsed.path)
                if route is None:
                    route = Route(response="not found", status=404)

                payload = route.response.encode()
                self.send_response(route.status)
                self.send_header("Content-Type", "text/html; charset=utf-8")
                self.send_header("Content-Length", str(len(payload)))
                for name, value in route.headers.items():
                    self.send_header(name, value)
                self.end_headers()
                self.wfile.write(payload)

            def do_GET(self) -> None:
                self._handle()

            def do_POST(self) -> None:
                self._handle()

            def log_message(self, format: str, *args) -> None:
                pass

        return Handler

    def add_route(
        self,
        path: str,
        response: str = "",
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.routes[path] = Route(response=response, status=status, headers=headers or {})

    def start(self) -> RecordingServer:
        self._thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)

    def calls_to(self, path: str) -> list[RecordedCall]:
        return [c for c in self.calls if c.path == path]


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture(autouse=True)
def isolated_container() -> Iterator[None]:
    """Give every test a fresh, un-bootstrapped service container."""
    reset()
    yield
    reset()


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and cwd at empty temp dirs and clear ENROLL_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for name in [n for n in os.environ if n.startswith("ENROLL_")]:
        monkeypatch.delenv(name)
    return home


@pytest.fixture
def load_page() -> Callable[[str], str]:
    """Return a loader for HTML fixtures in tests/testdata."""

    def _load(name: str) -> str:
        return (TESTDATA_DIR / name).read_text()

    return _load


@pytest.fixture
def http_server() -> Iterator[RecordingServer]:
    """Start a RecordingServer on a random local port."""
    server = RecordingServer().start()
    try:
        yield server
    finally:
        server.stop()


@pytest.fixture
def free_port() -> int:
    """A local port with nothing listening on it."""
    return _free_port()


@pytest.fixture
def make_server() -> Iterator[Callable[[int], RecordingServer]]:
    """Return a factory for RecordingServers on a given port (not started).

    Every server created through the factory is stopped at teardown.
    """
    created: list[RecordingServer] = []

    def _make(port: int = 0) -> RecordingServer:
        server = RecordingServer(port)
        created.append(server)
        return server

    yield _make

    for server in created:
        if server._thread is not None:
            server.stop()
        else:
            server._httpd.server_close()
