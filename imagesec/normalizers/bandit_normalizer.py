from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding, normalize_severity
from .base import FindingNormalizer, NormalizerContext, load_json
from .util import get_rel_path, to_int


class BanditNormalizer(FindingNormalizer):
    def tool_name(self) -> str:
        return "bandit"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, "bandit")
        if not isinstance(data, dict):
            return []

        out: list[Finding] = []
        for r in data.get("results") or []:
            file_rel = get_rel_path(ctx.target_dir, str(r.get("filename") or ""))

            sev = normalize_severity(r.get("issue_severity"), default="LOW")
            conf = (r.get("issue_confidence") or "LOW").upper()
            rule = r.get("test_id") or r.get("test_name")
            cwe = (r.get("issue_cwe") or {}).get("id")

            out.append(
                Finding(
                    tool="bandit",
                    type="CODE",
                    severity=sev,
                    file=file_rel,
                    line=to_int(r.get("line_number")),
                    message=r.get("issue_text") or "Bandit finding",
                    rule_id=str(rule) if rule else None,
                    extra={"confidence": conf, "cwe": f"CWE-{cwe}" if cwe else None},
                )
            )

        return out
