from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from imagesec.domain.models import Finding

logger = logging.getLogger(__name__)


@dataclass
class NormalizerContext:
    # scanned source tree, used to relativize tool-reported paths
    target_dir: Path


class FindingNormalizer(ABC):
    @abstractmethod
    def tool_name(self) -> str: ...

    @abstractmethod
    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]: ...


def load_json(artifact: Path, tool: str) -> Any:
    """Parsed artifact content, or None when missing, empty or not JSON."""
    if not artifact.exists():
        return None
    text = artifact.read_text(encoding="utf-8", errors="replace").strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Could not parse %s output: %s", tool, artifact.name, extra={"tool": tool})
        return None


def load_json_lines(artifact: Path, tool: str) -> list[dict]:
    if not artifact.exists():
        return []
    items: list[dict] = []
    bad = 0
    for line in artifact.read_text(encoding="utf-8", errors="ignore").splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            it = json.loads(line)
        except json.JSONDecodeError:
            bad += 1
            continue
        if isinstance(it, dict):
            items.append(it)
    if bad:
        logger.warning("Skipped %d unparseable %s lines", bad, tool, extra={"tool": tool})
    return items
