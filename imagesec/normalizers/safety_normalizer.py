from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding, normalize_severity
from .base import FindingNormalizer, NormalizerContext, load_json


def _severity(vuln: dict) -> str:
    sev = vuln.get("severity")
    if isinstance(sev, dict):
        cvss = sev.get("cvssv3") or sev.get("cvssv2") or {}
        return normalize_severity(cvss.get("base_severity"))
    return normalize_severity(sev)


class SafetyNormalizer(FindingNormalizer):
    """``safety --json`` output.

    Newer releases emit ``{"vulnerabilities": [...]}``; 1.x emitted a bare
    list of ``[package, specifier, version, advisory, id]`` rows.
    """

    def tool_name(self) -> str:
        return "safety"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, "safety")
        out: list[Finding] = []

        if isinstance(data, list):
            for row in data:
                if not isinstance(row, list) or len(row) < 5:
                    continue
                pkg, _specifier, version, advisory, vid = row[:5]
                out.append(self._finding(pkg, version, advisory, vid, "MEDIUM", None))
            return out

        if not isinstance(data, dict):
            return []

        for v in data.get("vulnerabilities") or []:
            out.append(
                self._finding(
                    v.get("package_name"),
                    v.get("analyzed_version"),
                    v.get("advisory"),
                    v.get("vulnerability_id"),
                    _severity(v),
                    v.get("CVE"),
                )
            )
        return out

    @staticmethod
    def _finding(pkg, version, advisory, vid, severity: str, cve) -> Finding:
        return Finding(
            tool="safety",
            type="DEPENDENCY",
            severity=severity,
            file="requirements.txt",
            line=None,
            message=f"{pkg} {version}: {(advisory or '').strip() or vid}",
            rule_id=str(cve or vid) if (cve or vid) else None,
            extra={"package": pkg, "installed_version": version, "advisory_id": vid},
        )
