from __future__ import annotations

import csv
from pathlib import Path
from typing import Any

from imagesec.core.config import settings
from imagesec.domain.models import Finding, RawToolResult, ReportSummary

from .executive import next_scan_date
from .summary import recommendations

CSV_HEADER = ["Timestamp", "Tool", "Category", "Severity", "Finding", "File", "Line", "Status", "CVSS_Score", "CWE_ID"]


def write_csv(path: Path, findings: list[Finding], timestamp: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as fh:
        w = csv.writer(fh)
        w.writerow(CSV_HEADER)
        for f in findings:
            w.writerow(
                [
                    timestamp,
                    f.tool,
                    f.category,
                    f.severity,
                    f.message,
                    f.file,
                    f.line or "",
                    "OPEN",
                    f.extra.get("cvss_score") or "",
                    f.extra.get("cwe") or "",
                ]
            )


def api_response(summary: ReportSummary, artifacts: dict[str, str | None]) -> dict[str, Any]:
    s = summary.by_severity
    return {
        "status": "success",
        "timestamp": summary.generated_at,
        "repository": settings.GITHUB_REPOSITORY,
        "scan_version": settings.VERSION,
        "summary": {
            "overall_status": summary.overall_status,
            "risk_level": summary.risk_level,
            "compliance_status": summary.compliance_status,
            "total_findings": summary.total,
            "critical_count": s["CRITICAL"],
            "high_count": s["HIGH"],
            "medium_count": s["MEDIUM"],
            "low_count": s["LOW"],
            "info_count": s["INFO"],
            "tools_executed": summary.tools.total - summary.tools.skipped,
            "tools_successful": summary.tools.successful + summary.tools.with_warnings,
            "tools_failed": summary.tools.failed,
            "tools_skipped": summary.tools.skipped,
            "coverage_percentage": summary.coverage_percentage,
        },
        "categories": {
            name: {"status": c.status, "findings": c.findings, "tools": c.tools} for name, c in summary.categories.items()
        },
        "trend": {
            "new": summary.trend.new,
            "resolved": summary.trend.resolved,
            "improvement_percentage": summary.trend.improvement_percentage,
        },
        "recommendations": recommendations(summary),
        "artifacts": artifacts,
        "next_scan_recommended": next_scan_date(summary.generated_at),
    }


def analysis_document(
    summary: ReportSummary,
    tool_runs: list[RawToolResult],
    advanced: bool,
) -> dict[str, Any]:
    return {
        "scan_metadata": {
            "generated_at": summary.generated_at,
            "repository": settings.GITHUB_REPOSITORY,
            "scan_mode": "advanced" if advanced else "basic",
            "version": settings.VERSION,
        },
        "summary": {
            "total": summary.total,
            "by_severity": summary.by_severity,
            "risk_level": summary.risk_level,
            "overall_status": summary.overall_status,
        },
        "tools": [
            {"tool": r.tool, "run": r.label, "status": r.status, "exit_code": r.exit_code, "artifact": r.artifact}
            for r in tool_runs
        ],
        "tool_counts": {
            "total": summary.tools.total,
            "successful": summary.tools.successful,
            "with_warnings": summary.tools.with_warnings,
            "failed": summary.tools.failed,
            "skipped": summary.tools.skipped,
        },
        "categories": {name: c.findings for name, c in summary.categories.items()},
    }
