from __future__ import annotations

from typing import Iterable

from .base import SecurityScanner


class ScannerRegistry:
    def __init__(self, scanners: Iterable[SecurityScanner]):
        # registration order is run order
        self._by_name = {s.tool_name(): s for s in scanners}

    def list(self) -> list[str]:
        return list(self._by_name.keys())

    def get(self, name: str) -> SecurityScanner:
        return self._by_name[name]

    def pick(self, selected: list[str] | None, advanced: bool = False) -> list[SecurityScanner]:
        if selected:
            wanted = set(selected)
            return [s for name, s in self._by_name.items() if name in wanted]
        return [s for s in self._by_name.values() if advanced or not s.advanced]
