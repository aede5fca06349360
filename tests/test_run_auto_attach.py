from __future__ import annotations

import time

import pytest

import smilkit
from smilkit.client import SmilkitClient
from smilkit.runner import SmilkitServer, _is_server_alive


def _wait_until_alive(url: str, *, timeout_s: float = 5.0) -> None:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if _is_server_alive(url.rstrip("/")):
            return
        time.sleep(0.05)
    raise AssertionError(f"server at {url} did not come up")


def test_run_auto_attaches_to_existing_server() -> None:
    """A second run() against a live host/port returns a client instead of a new server."""

    server = smilkit.run(host="127.0.0.1", port=0, new_server=True)
    assert isinstance(server, SmilkitServer)
    _wait_until_alive(server.url)

    attached = smilkit.run(host=server.host, port=server.port)

    assert isinstance(attached, SmilkitClient)
    assert attached.base_url == f"http://{server.host}:{server.port}"
    assert attached.get_settings()["quality"] == "editing"


def test_run_attaches_to_env_url(monkeypatch: pytest.MonkeyPatch) -> None:
    s1 = smilkit.run(host="127.0.0.1", port=0, new_server=True)
    _wait_until_alive(s1.url)

    monkeypatch.setenv("SMILKIT_URL", f"{s1.host}:{s1.port}")
    attached = smilkit.run()
    assert isinstance(attached, SmilkitClient)

    # new_server=True ignores SMILKIT_URL and starts a fresh server.
    s2 = smilkit.run(host="127.0.0.1", port=0, new_server=True)
    assert isinstance(s2, SmilkitServer)
    assert (s2.host, s2.port) != (s1.host, s1.port)
