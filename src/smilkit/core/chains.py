from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Literal, Mapping, Sequence

import numpy as np

from .records import AnimationBase, AnimationRecord
from .timing import begin_seconds, total_duration

ChainTrigger = Literal["start", "end", "repeat"]


@dataclass(frozen=True)
class ChainEntry:
    animation_id: str
    delay: float = 0.0  # seconds
    trigger: ChainTrigger = "start"
    depends_on: str | None = None


@dataclass(frozen=True)
class AnimationChain:
    """An ordered run of animations; `end` entries start after their predecessor ends."""

    id: str
    entries: tuple[ChainEntry, ...] = field(default_factory=tuple)
    name: str | None = None


def make_chain(entries: Iterable[ChainEntry], *, name: str | None = None) -> AnimationChain:
    clamped = tuple(replace(e, delay=max(0.0, float(e.delay))) for e in entries)
    return AnimationChain(id=f"anim-chain-{uuid.uuid4().hex}", entries=clamped, name=name)


def compute_chain_delays(
    chains: Iterable[AnimationChain],
    records: Sequence[AnimationBase],
) -> dict[str, float]:
    """Start offset (seconds) of every chained animation.

    Within a chain a cursor tracks where the previous `end`-triggered entry finishes.
    Indefinite or unknown animations contribute no duration.
    """

    by_id = {r.id: r for r in records}
    delays: dict[str, float] = {}
    for chain in chains:
        cursor = 0.0
        for entry in chain.entries:
            duration = total_duration(by_id.get(entry.animation_id))
            if not np.isfinite(duration):
                duration = 0.0
            entry_delay = max(0.0, float(entry.delay))
            start = cursor + entry_delay if entry.trigger == "end" else entry_delay
            delays[entry.animation_id] = start
            if entry.trigger == "end":
                cursor = start + duration
            else:
                cursor = max(cursor, start)
    return delays


def _format_seconds(value: float) -> str:
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{text or '0'}s"


def apply_chain_delays(records: Sequence[AnimationRecord], delays: Mapping[str, float]) -> list[AnimationRecord]:
    """Return copies of `records` with `begin` shifted by their chain delay."""

    out: list[AnimationRecord] = []
    for record in records:
        delay = delays.get(record.id, 0.0)
        if delay:
            record = replace(record, begin=_format_seconds(begin_seconds(record) + delay))
        out.append(record)
    return out


def chain_to_dict(chain: AnimationChain) -> dict[str, Any]:
    return {
        "id": chain.id,
        "name": chain.name,
        "animations": [
            {
                "animationId": e.animation_id,
                "delay": float(e.delay),
                "trigger": e.trigger,
                **({"dependsOn": e.depends_on} if e.depends_on else {}),
            }
            for e in chain.entries
        ],
    }


def chain_from_dict(data: Mapping[str, Any]) -> AnimationChain:
    entries: list[ChainEntry] = []
    for item in data.get("animations", []) or []:
        trigger = str(item.get("trigger", "start"))
        if trigger not in ("start", "end", "repeat"):
            raise ValueError(f"Invalid chain trigger: {trigger!r}")
        entries.append(
            ChainEntry(
                animation_id=str(item["animationId"]),
                delay=max(0.0, float(item.get("delay", 0.0))),
                trigger=trigger,  # type: ignore[arg-type]
                depends_on=item.get("dependsOn"),
            )
        )
    cid = str(data.get("id") or f"anim-chain-{uuid.uuid4().hex}")
    return AnimationChain(id=cid, entries=tuple(entries), name=data.get("name"))
