from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding, normalize_severity
from .base import FindingNormalizer, NormalizerContext, load_json
from .util import get_rel_path, to_int


def _cvss_score(vuln: dict) -> float | None:
    for source in (vuln.get("CVSS") or {}).values():
        score = (source or {}).get("V3Score") or (source or {}).get("V2Score")
        if score:
            return float(score)
    return None


class TrivyNormalizer(FindingNormalizer):
    """Trivy ``--format json`` reports (fs, config and image scans share the schema)."""

    def __init__(self, tool: str = "trivy", vuln_type: str = "DEPENDENCY"):
        self._tool = tool
        self._vuln_type = vuln_type

    def tool_name(self) -> str:
        return self._tool

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, self._tool)
        if not isinstance(data, dict):
            return []

        out: list[Finding] = []
        for result in data.get("Results") or []:
            target = get_rel_path(ctx.target_dir, str(result.get("Target") or ""))

            for v in result.get("Vulnerabilities") or []:
                pkg = v.get("PkgName") or "unknown"
                installed = v.get("InstalledVersion") or "?"
                fixed = v.get("FixedVersion")
                vid = v.get("VulnerabilityID") or "UNKNOWN"
                title = v.get("Title") or vid
                msg = f"{pkg} {installed}: {title}"
                if fixed:
                    msg += f" (fixed in {fixed})"
                out.append(
                    Finding(
                        tool=self._tool,
                        type=self._vuln_type,
                        severity=normalize_severity(v.get("Severity")),
                        file=target,
                        line=None,
                        message=msg,
                        rule_id=vid,
                        extra={
                            "package": pkg,
                            "installed_version": installed,
                            "fixed_version": fixed,
                            "cvss_score": _cvss_score(v),
                            "cwe": (v.get("CweIDs") or [None])[0],
                        },
                    )
                )

            for m in result.get("Misconfigurations") or []:
                if (m.get("Status") or "FAIL") != "FAIL":
                    continue
                cause = m.get("CauseMetadata") or {}
                out.append(
                    Finding(
                        tool=self._tool,
                        type="COMPLIANCE",
                        severity=normalize_severity(m.get("Severity")),
                        file=target,
                        line=to_int(cause.get("StartLine")),
                        message=m.get("Message") or m.get("Title") or "Misconfiguration",
                        rule_id=m.get("AVDID") or m.get("ID"),
                    )
                )

            for s in result.get("Secrets") or []:
                # Match holds the redacted line; never copy it
                out.append(
                    Finding(
                        tool=self._tool,
                        type="SECRET",
                        severity=normalize_severity(s.get("Severity"), default="HIGH"),
                        file=target,
                        line=to_int(s.get("StartLine")),
                        message=f"Secret detected: {s.get('Title') or s.get('RuleID')}",
                        rule_id=s.get("RuleID"),
                    )
                )

        return out
