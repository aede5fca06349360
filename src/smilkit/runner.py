from __future__ import annotations

import contextlib
import logging
import os
import socket
import threading
import time
from dataclasses import dataclass

import httpx
import uvicorn

from .client import SmilkitClient
from .server import create_app
from .settings import SettingsStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmilkitServer:
    host: str
    port: int
    url: str

    def client(self) -> SmilkitClient:
        return SmilkitClient(self.url.rstrip("/"))


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def _normalize_base_url(url: str) -> str:
    url = url.strip()
    if not url:
        return ""
    # Allow passing just host:port.
    if "://" not in url:
        url = "http://" + url
    return url.rstrip("/")


def _is_server_alive(base_url: str, *, timeout_s: float = 0.2) -> bool:
    """Best-effort probe for a reachable smilkit server."""

    try:
        with httpx.Client(base_url=base_url, timeout=timeout_s) as client:
            r = client.get("/healthz")
            if r.status_code != 200:
                return False
            return bool(r.json().get("ok"))
    except (httpx.HTTPError, ValueError):
        return False


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    log_level: str = "info",
    access_log: bool = False,
    new_server: bool = False,
    connect_timeout_s: float = 0.2,
    settings: SettingsStore | None = None,
) -> SmilkitServer | SmilkitClient:
    """Start the smilkit API in a background thread, or attach to a running one.

    Behavior:
    - If SMILKIT_URL is set and reachable, return a client for it unless `new_server=True`.
    - Otherwise, if `port != 0` and a server already answers at http://{host}:{port}, attach to it.
    - Otherwise start uvicorn on a daemon thread and return a `SmilkitServer`.
    """

    env_url = _normalize_base_url(os.getenv("SMILKIT_URL", ""))

    if env_url and not new_server:
        if _is_server_alive(env_url, timeout_s=connect_timeout_s):
            logger.info("Attaching to smilkit server at %s", env_url)
            return SmilkitClient(env_url)

    if port != 0 and not new_server:
        default_url = _normalize_base_url(f"http://{host}:{port}")
        if _is_server_alive(default_url, timeout_s=connect_timeout_s):
            logger.info("Attaching to smilkit server at %s", default_url)
            return SmilkitClient(default_url)

    if port == 0:
        port = _find_free_port(host)

    app = create_app(settings)
    config = uvicorn.Config(app, host=host, port=port, log_level=log_level, access_log=access_log)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    # Best-effort: lets a follow-up client probe see the socket.
    time.sleep(0.05)

    url = f"http://{host}:{port}/"
    logger.info("smilkit server listening on %s", url)
    return SmilkitServer(host=host, port=port, url=url)
