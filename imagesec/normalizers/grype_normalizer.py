from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding, normalize_severity
from .base import FindingNormalizer, NormalizerContext, load_json
from .util import get_rel_path


class GrypeNormalizer(FindingNormalizer):
    def __init__(self, tool: str = "grype", vuln_type: str = "DEPENDENCY"):
        self._tool = tool
        self._vuln_type = vuln_type

    def tool_name(self) -> str:
        return self._tool

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, self._tool)
        if not isinstance(data, dict):
            return []

        out: list[Finding] = []
        for m in data.get("matches") or []:
            vuln = m.get("vulnerability") or {}
            art = m.get("artifact") or {}
            locations = art.get("locations") or [{}]
            path = get_rel_path(ctx.target_dir, str(locations[0].get("path") or ""))

            fix_versions = (vuln.get("fix") or {}).get("versions") or []
            scores = [
                (c.get("metrics") or {}).get("baseScore")
                for c in vuln.get("cvss") or []
                if (c.get("metrics") or {}).get("baseScore") is not None
            ]

            name = art.get("name") or "unknown"
            msg = f"{name} {art.get('version') or '?'}: {vuln.get('description') or vuln.get('id')}"
            if fix_versions:
                msg += f" (fixed in {', '.join(fix_versions)})"

            out.append(
                Finding(
                    tool=self._tool,
                    type=self._vuln_type,
                    severity=normalize_severity(vuln.get("severity")),
                    file=path,
                    line=None,
                    message=msg,
                    rule_id=vuln.get("id"),
                    extra={
                        "package": name,
                        "installed_version": art.get("version"),
                        "fixed_version": fix_versions[0] if fix_versions else None,
                        "cvss_score": max(scores) if scores else None,
                    },
                )
            )
        return out
