"""
Per-request upstream call metadata.

A contextvar-backed recorder the upstream client reports into:
- endpoint name and HTTP status
- record count and elapsed time
- error kind when the call failed

The API layer attaches this to the response `meta` for transparency.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator


@dataclass
class UpstreamMeta:
    calls: list[dict[str, Any]] = field(default_factory=list)

    def record(self, payload: dict[str, Any]) -> None:
        self.calls.append(dict(payload))


_upstream_meta_var: contextvars.ContextVar[UpstreamMeta | None] = contextvars.ContextVar(
    "photoscope_upstream_meta", default=None
)


def record_upstream_call(payload: dict[str, Any]) -> None:
    meta = _upstream_meta_var.get()
    if not meta:
        return
    meta.record(payload)


@contextmanager
def capture_upstream_meta() -> Iterator[UpstreamMeta]:
    meta = UpstreamMeta()
    token = _upstream_meta_var.set(meta)
    try:
        yield meta
    finally:
        _upstream_meta_var.reset(token)
