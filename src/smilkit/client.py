from __future__ import annotations

from typing import Any, Iterable, Mapping

import httpx

from .core.quality import SimulationQuality
from .core.records import AnimationBase, Element, animation_to_dict


def _animation_payload(animations: Iterable[AnimationBase | Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [animation_to_dict(a) if isinstance(a, AnimationBase) else dict(a) for a in animations]


def _element_payload(elements: Iterable[Element | Mapping[str, Any]]) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for e in elements:
        if isinstance(e, Element):
            out.append({"id": e.id, "type": e.type, "data": dict(e.data)})
        else:
            out.append(dict(e))
    return out


class SmilkitClient:
    """HTTP client for a running smilkit server.

    Contract (current):
    - GET   /api/settings, PATCH /api/settings
    - POST  /api/compile   {animations}            -> {elements, warnings, defs}
    - POST  /api/validate  {animation}             -> {valid, errors}
    - POST  /api/states    {animations, elements, time} -> {time, states}

    Pass `http` to reuse an existing `httpx.Client` (for example a FastAPI `TestClient`).
    """

    def __init__(self, base_url: str = "http://127.0.0.1:8000", *, http: httpx.Client | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = http

    def _request(self, method: str, path: str, *, json: Any = None, timeout_s: float = 10.0) -> Any:
        if self._http is not None:
            res = self._http.request(method, path, json=json)
        else:
            with httpx.Client(base_url=self.base_url, timeout=timeout_s) as client:
                res = client.request(method, path, json=json)
        if res.status_code >= 400:
            raise RuntimeError(f"{method} {path} failed: {res.status_code} {res.text}")
        return res.json()

    def healthy(self, *, timeout_s: float = 1.0) -> bool:
        try:
            data = self._request("GET", "/healthz", timeout_s=timeout_s)
        except (httpx.HTTPError, RuntimeError):
            return False
        return bool(data.get("ok"))

    def get_settings(self, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return self._request("GET", "/api/settings", timeout_s=timeout_s)

    def update_settings(
        self,
        *,
        quality: str | SimulationQuality | None = None,
        precision: int | None = None,
        optimize: bool | None = None,
        timeout_s: float = 10.0,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if quality is not None:
            body["quality"] = SimulationQuality.from_any(quality).value
        if precision is not None:
            body["precision"] = int(precision)
        if optimize is not None:
            body["optimize"] = bool(optimize)
        if not body:
            raise ValueError("Nothing to update")
        return self._request("PATCH", "/api/settings", json=body, timeout_s=timeout_s)

    def compile(self, animations: Iterable[AnimationBase | Mapping[str, Any]], *, timeout_s: float = 30.0) -> dict[str, Any]:
        """Compile records on the server. Returns `{elements, warnings, defs}`."""
        return self._request("POST", "/api/compile", json={"animations": _animation_payload(animations)}, timeout_s=timeout_s)

    def validate(self, animation: AnimationBase | Mapping[str, Any], *, timeout_s: float = 10.0) -> dict[str, Any]:
        payload = _animation_payload([animation])[0]
        return self._request("POST", "/api/validate", json={"animation": payload}, timeout_s=timeout_s)

    def states(
        self,
        animations: Iterable[AnimationBase | Mapping[str, Any]],
        time: float,
        elements: Iterable[Element | Mapping[str, Any]] | None = None,
        *,
        timeout_s: float = 30.0,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"animations": _animation_payload(animations), "time": float(time)}
        if elements is not None:
            body["elements"] = _element_payload(elements)
        return self._request("POST", "/api/states", json=body, timeout_s=timeout_s)
