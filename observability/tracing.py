"""Span helper for timing remote calls made on behalf of a session."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator


@contextmanager
def span(state: Any, name: str, **fields: Any) -> Iterator[None]:
    """Append ``{"span": name, "ms": ...}`` to ``state.events`` when the block exits."""
    start = time.perf_counter()
    outcome = "ok"
    try:
        yield
    except Exception:
        outcome = "error"
        raise
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        state.events.append({"span": name, "ms": elapsed_ms, "outcome": outcome, **fields})


__all__ = ["span"]
