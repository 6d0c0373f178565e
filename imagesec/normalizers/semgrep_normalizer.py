from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding, normalize_severity
from .base import FindingNormalizer, NormalizerContext, load_json
from .util import get_rel_path, to_int


class SemgrepNormalizer(FindingNormalizer):
    def tool_name(self) -> str:
        return "semgrep"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, "semgrep")
        if not isinstance(data, dict):
            return []

        out: list[Finding] = []
        for r in data.get("results") or []:
            extra = r.get("extra") or {}
            meta = extra.get("metadata") or {}
            cwe = meta.get("cwe")
            if isinstance(cwe, list):
                cwe = cwe[0] if cwe else None
            # "CWE-79: Improper Neutralization ..." -> "CWE-79"
            if isinstance(cwe, str):
                cwe = cwe.split(":", 1)[0].strip()

            out.append(
                Finding(
                    tool="semgrep",
                    type="CODE",
                    severity=normalize_severity(extra.get("severity")),
                    file=get_rel_path(ctx.target_dir, str(r.get("path") or "")),
                    line=to_int((r.get("start") or {}).get("line")),
                    message=extra.get("message") or r.get("check_id") or "Semgrep finding",
                    rule_id=r.get("check_id"),
                    extra={"cwe": cwe},
                )
            )
        return out
