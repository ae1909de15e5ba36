"""Request generation counters for discarding stale load results.

Each data-loading workflow takes a token before it calls the store and
checks it before applying the response. Starting a newer load of the same
kind, or invalidating the workflow, makes older tokens stale; the
in-flight request still completes but its result is ignored.
"""

from __future__ import annotations

from typing import Dict, Optional


class RequestGenerations:
    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}

    def begin(self, key: str) -> int:
        self._counters[key] = self._counters.get(key, 0) + 1
        return self._counters[key]

    def is_current(self, key: str, token: int) -> bool:
        return self._counters.get(key) == token

    def invalidate(self, key: Optional[str] = None) -> None:
        """Make outstanding tokens stale, for one workflow or all of them."""
        keys = [key] if key is not None else list(self._counters)
        for name in keys:
            self._counters[name] = self._counters.get(name, 0) + 1
