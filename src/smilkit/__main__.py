from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .compiler import CompileOptions, SmilCompiler
from .core.aggregate import calculate_all_states
from .core.chains import apply_chain_delays, chain_from_dict, compute_chain_delays
from .core.records import element_from_dict, parse_animations
from .core.state import element_state_to_dict


def _load(path: str) -> dict[str, Any]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    # Accept a bare list of animations as well as {"animations": [...], ...}.
    if isinstance(data, list):
        return {"animations": data}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object or list")
    return data


def _cmd_serve(args: argparse.Namespace) -> int:
    from .runner import run

    srv = run(host=args.host, port=args.port, log_level=args.log_level.lower())
    print(srv.url if hasattr(srv, "url") else srv.base_url)

    # Block forever (so it behaves like a normal CLI server)
    import time

    while True:
        time.sleep(3600)


def _cmd_compile(args: argparse.Namespace) -> int:
    data = _load(args.file)
    compiler = SmilCompiler(CompileOptions(precision=args.precision, optimize=not args.no_optimize))
    result = compiler.compile_all(data.get("animations") or [])
    for element in result.elements:
        print(element)
    for warning in result.warnings:
        print(warning, file=sys.stderr)
    return 1 if result.warnings and args.strict else 0


def _cmd_states(args: argparse.Namespace) -> int:
    data = _load(args.file)
    records = parse_animations(data.get("animations") or [])
    chains = [chain_from_dict(c) for c in data.get("chains") or []]
    if chains:
        records = apply_chain_delays(records, compute_chain_delays(chains, records))
    elements = [element_from_dict(e) for e in data["elements"]] if "elements" in data else None

    states = calculate_all_states(records, elements, args.time)
    out = {"time": args.time, "states": {eid: element_state_to_dict(s) for eid, s in states.items()}}
    print(json.dumps(out, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="smilkit", description="smilkit: SMIL animation preview and export")
    p.add_argument("--log-level", default="WARNING", help="logging level (DEBUG, INFO, WARNING, ...)")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=_cmd_serve)

    comp = sub.add_parser("compile", help="compile a JSON file of animations to SMIL markup")
    comp.add_argument("file")
    comp.add_argument("--precision", type=int, default=4)
    comp.add_argument("--no-optimize", action="store_true")
    comp.add_argument("--strict", action="store_true", help="exit 1 when any animation fails")
    comp.set_defaults(func=_cmd_compile)

    st = sub.add_parser("states", help="print element states at a time")
    st.add_argument("file")
    st.add_argument("--time", type=float, required=True)
    st.set_defaults(func=_cmd_states)

    args = p.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
