from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .compiler import SmilCompiler, compile_result_to_dict, validate, validation_result_to_dict
from .core.aggregate import calculate_all_states
from .core.chains import apply_chain_delays, chain_from_dict, compute_chain_delays
from .core.quality import QUALITY_PRESETS, quality_settings_to_dict
from .core.records import element_from_dict, parse_animations
from .core.state import element_state_to_dict
from .settings import SettingsStore, settings_to_dict


def _list_field(body: dict, key: str, *, required: bool = True) -> list:
    if key not in body:
        if required:
            raise HTTPException(status_code=400, detail=f"Missing field: {key}")
        return []
    value = body.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise HTTPException(status_code=400, detail=f"{key} must be a list")
    return value


def create_api_app(settings: SettingsStore | None = None) -> FastAPI:
    app = FastAPI(title="smilkit", version="0.1.0")
    store = settings if settings is not None else SettingsStore()
    app.state.settings = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/settings")
    def get_settings() -> dict:
        return settings_to_dict(store.get())

    @app.patch("/api/settings")
    def update_settings(body: dict) -> dict:
        # Supported: quality, precision, optimize
        known = [k for k in ("quality", "precision", "optimize") if k in body]
        if not known:
            raise HTTPException(status_code=400, detail="Missing field: quality, precision or optimize")

        try:
            if "quality" in body:
                store.set_quality(body["quality"])
            if "precision" in body:
                store.set_precision(body["precision"])
            if "optimize" in body:
                store.set_optimize(body["optimize"])
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return {"ok": True, **settings_to_dict(store.get())}

    @app.get("/api/quality")
    def quality_presets() -> dict:
        return {mode.value: quality_settings_to_dict(q) for mode, q in QUALITY_PRESETS.items()}

    @app.post("/api/compile")
    def compile_animations(body: dict) -> dict:
        animations = _list_field(body, "animations")
        if not all(isinstance(a, dict) for a in animations):
            raise HTTPException(status_code=400, detail="animations must be a list of objects")
        result = SmilCompiler(store.compile_options()).compile_all(animations)
        return compile_result_to_dict(result)

    @app.post("/api/validate")
    def validate_animation(body: dict) -> dict:
        animation = body.get("animation")
        if not isinstance(animation, dict):
            raise HTTPException(status_code=400, detail="animation must be an object")
        return validation_result_to_dict(validate(animation))

    @app.post("/api/states")
    def states(body: dict) -> dict[str, Any]:
        raw_animations = _list_field(body, "animations")
        raw_elements = _list_field(body, "elements", required=False)
        raw_chains = _list_field(body, "chains", required=False)

        try:
            t = float(body.get("time", 0.0))
            records = parse_animations(raw_animations)
            elements = [element_from_dict(e) for e in raw_elements] if "elements" in body else None
            chains = [chain_from_dict(c) for c in raw_chains]
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise HTTPException(status_code=400, detail=str(e))

        if chains:
            records = apply_chain_delays(records, compute_chain_delays(chains, records))

        result = calculate_all_states(records, elements, t)
        return {
            "time": t,
            "states": {eid: element_state_to_dict(s) for eid, s in result.items()},
        }

    return app
