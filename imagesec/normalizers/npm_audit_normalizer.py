from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding, normalize_severity
from .base import FindingNormalizer, NormalizerContext, load_json


class NpmAuditNormalizer(FindingNormalizer):
    """``npm audit --json``: the npm 7+ ``vulnerabilities`` map, or the npm 6 ``advisories`` map."""

    def tool_name(self) -> str:
        return "npm-audit"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, "npm-audit")
        if not isinstance(data, dict):
            return []

        out: list[Finding] = []
        for name, v in (data.get("vulnerabilities") or {}).items():
            # "via" mixes advisory objects with names of vulnerable dependencies
            advisories = [a for a in v.get("via") or [] if isinstance(a, dict)]
            if not advisories:
                continue
            for a in advisories:
                out.append(
                    self._finding(
                        name,
                        v.get("range"),
                        a.get("title"),
                        a.get("source") or a.get("url"),
                        a.get("severity") or v.get("severity"),
                        (a.get("cwe") or [None])[0],
                        (a.get("cvss") or {}).get("score"),
                    )
                )

        for adv_id, a in (data.get("advisories") or {}).items():
            out.append(
                self._finding(
                    a.get("module_name"),
                    a.get("vulnerable_versions"),
                    a.get("title"),
                    adv_id,
                    a.get("severity"),
                    a.get("cwe") if isinstance(a.get("cwe"), str) else None,
                    (a.get("cvss") or {}).get("score"),
                )
            )
        return out

    @staticmethod
    def _finding(name, vrange, title, source, severity, cwe, score) -> Finding:
        return Finding(
            tool="npm-audit",
            type="DEPENDENCY",
            severity=normalize_severity(severity),
            file="package.json",
            line=None,
            message=f"{name} {vrange or '*'}: {title or 'vulnerable dependency'}",
            rule_id=str(source) if source is not None else name,
            extra={"package": name, "cwe": cwe, "cvss_score": score or None},
        )
