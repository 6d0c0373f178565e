from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding
from .base import FindingNormalizer, NormalizerContext, load_json


class PipAuditNormalizer(FindingNormalizer):
    def tool_name(self) -> str:
        return "pip-audit"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, "pip-audit")
        # pip-audit < 2.5 wrote the dependency list at the top level
        deps = data.get("dependencies") if isinstance(data, dict) else data
        if not isinstance(deps, list):
            return []

        out: list[Finding] = []
        for dep in deps:
            if not isinstance(dep, dict):
                continue
            name = dep.get("name") or "unknown"
            version = dep.get("version") or "?"
            for v in dep.get("vulns") or []:
                fixes = v.get("fix_versions") or []
                msg = f"{name} {version}: {v.get('description') or v.get('id')}"
                if fixes:
                    msg += f" (fixed in {', '.join(fixes)})"
                # pip-audit reports no severity
                out.append(
                    Finding(
                        tool="pip-audit",
                        type="DEPENDENCY",
                        severity="MEDIUM",
                        file="requirements.txt",
                        line=None,
                        message=msg,
                        rule_id=v.get("id"),
                        extra={
                            "package": name,
                            "installed_version": version,
                            "fixed_version": fixes[0] if fixes else None,
                            "aliases": v.get("aliases") or [],
                        },
                    )
                )
        return out
