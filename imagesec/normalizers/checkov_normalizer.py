from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding, normalize_severity
from .base import FindingNormalizer, NormalizerContext, load_json
from .util import get_rel_path, to_int


class CheckovNormalizer(FindingNormalizer):
    def tool_name(self) -> str:
        return "checkov"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, "checkov")
        # one report per framework: a dict for a single framework, a list otherwise
        reports = [data] if isinstance(data, dict) else data
        if not isinstance(reports, list):
            return []

        out: list[Finding] = []
        for report in reports:
            if not isinstance(report, dict):
                continue
            for c in (report.get("results") or {}).get("failed_checks") or []:
                line_range = c.get("file_line_range") or [None]
                out.append(
                    Finding(
                        tool="checkov",
                        type="COMPLIANCE",
                        # open-source checkov leaves severity null
                        severity=normalize_severity(c.get("severity")),
                        file=get_rel_path(ctx.target_dir, str(c.get("file_path") or "").lstrip("/")),
                        line=to_int(line_range[0]),
                        message=c.get("check_name") or c.get("check_id") or "Checkov failed check",
                        rule_id=c.get("check_id"),
                        extra={"guideline": c.get("guideline"), "framework": report.get("check_type")},
                    )
                )
        return out
