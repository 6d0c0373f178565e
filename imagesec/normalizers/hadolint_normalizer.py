from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding
from .base import FindingNormalizer, NormalizerContext, load_json
from .util import get_rel_path, to_int

LEVELS = {"error": "HIGH", "warning": "MEDIUM", "info": "LOW", "style": "INFO"}


class HadolintNormalizer(FindingNormalizer):
    def tool_name(self) -> str:
        return "hadolint"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, "hadolint")
        if not isinstance(data, list):
            return []

        return [
            Finding(
                tool="hadolint",
                type="CODE",
                severity=LEVELS.get(str(it.get("level") or "").lower(), "LOW"),
                file=get_rel_path(ctx.target_dir, str(it.get("file") or "")),
                line=to_int(it.get("line")),
                message=it.get("message") or it.get("code") or "Hadolint finding",
                rule_id=it.get("code"),
            )
            for it in data
            if isinstance(it, dict)
        ]
