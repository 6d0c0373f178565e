from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding, normalize_severity
from .base import FindingNormalizer, NormalizerContext, load_json
from .util import cvss_to_severity, get_rel_path


def _group_scores(pkg: dict) -> dict[str, str]:
    """Vulnerability id -> ``max_severity`` score from osv-scanner's groups."""
    scores: dict[str, str] = {}
    for g in pkg.get("groups") or []:
        for vid in g.get("ids") or []:
            if g.get("max_severity"):
                scores[vid] = g["max_severity"]
    return scores


class OsvNormalizer(FindingNormalizer):
    def tool_name(self) -> str:
        return "osv-scanner"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, "osv-scanner")
        if not isinstance(data, dict):
            return []

        out: list[Finding] = []
        for result in data.get("results") or []:
            source = get_rel_path(ctx.target_dir, str((result.get("source") or {}).get("path") or ""))
            for pkg in result.get("packages") or []:
                info = pkg.get("package") or {}
                scores = _group_scores(pkg)
                for v in pkg.get("vulnerabilities") or []:
                    vid = v.get("id") or "UNKNOWN"
                    db_sev = (v.get("database_specific") or {}).get("severity")
                    score = scores.get(vid)
                    severity = normalize_severity(db_sev) if db_sev else cvss_to_severity(score)
                    out.append(
                        Finding(
                            tool="osv-scanner",
                            type="DEPENDENCY",
                            severity=severity,
                            file=source,
                            line=None,
                            message=f"{info.get('name')} {info.get('version')}: {v.get('summary') or vid}",
                            rule_id=vid,
                            extra={
                                "package": info.get("name"),
                                "installed_version": info.get("version"),
                                "ecosystem": info.get("ecosystem"),
                                "cvss_score": float(score) if _is_number(score) else None,
                            },
                        )
                    )
        return out


def _is_number(value) -> bool:
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True
