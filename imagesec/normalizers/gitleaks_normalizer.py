from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding
from .base import FindingNormalizer, NormalizerContext, load_json
from .util import get_rel_path, to_int


class GitleaksNormalizer(FindingNormalizer):
    def tool_name(self) -> str:
        return "gitleaks"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, "gitleaks")
        if not isinstance(data, list):
            return []

        out: list[Finding] = []
        for it in data:
            if not isinstance(it, dict):
                continue
            rule = it.get("RuleID") or "generic"
            # Secret and Match are dropped: findings are persisted and rendered
            out.append(
                Finding(
                    tool="gitleaks",
                    type="SECRET",
                    severity="HIGH",
                    file=get_rel_path(ctx.target_dir, str(it.get("File") or "")),
                    line=to_int(it.get("StartLine")),
                    message=f"Secret detected: {it.get('Description') or rule}",
                    rule_id=rule,
                    extra={"commit": it.get("Commit") or None, "fingerprint": it.get("Fingerprint")},
                )
            )
        return out
