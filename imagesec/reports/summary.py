"""Report summary computed from the unified SARIF document and the scan index.

Every count here is derived from SARIF ``results``; nothing is a placeholder,
so the severity totals always match what the unified document contains.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from imagesec.domain.models import (
    CATEGORY_TOOLS,
    SEVERITIES,
    CategorySummary,
    Finding,
    RawToolResult,
    ReportSummary,
    ToolRunCounts,
    Trend,
    at_least,
    normalize_severity,
)
from imagesec.domain.sarif import SarifReport

logger = logging.getLogger(__name__)

_LEVEL_SEVERITY = {"error": "HIGH", "warning": "MEDIUM", "note": "LOW", "none": "INFO"}
_CATEGORY_TYPE = {
    "vulnerability_management": "DEPENDENCY",
    "container_security": "CONTAINER",
    "static_analysis": "CODE",
    "secrets_detection": "SECRET",
    "compliance": "COMPLIANCE",
}


def findings_from_sarif(report: SarifReport | None) -> list[Finding]:
    if report is None:
        return []

    out: list[Finding] = []
    for run in report.runs:
        driver_tool = run.tool.driver.name.lower()
        for r in run.results:
            props = r.properties or {}
            severity = props.get("severity")
            severity = normalize_severity(severity) if severity else _LEVEL_SEVERITY.get(r.level, "MEDIUM")

            ftype = props.get("type") or _CATEGORY_TYPE.get(props.get("category", ""), "OTHER")

            file, line = "", None
            if r.locations:
                phys = r.locations[0].physicalLocation
                file = phys.artifactLocation.uri
                line = phys.region.startLine if phys.region else None

            out.append(
                Finding(
                    tool=props.get("tool") or driver_tool,
                    type=ftype,
                    severity=severity,
                    file=file,
                    line=line,
                    message=r.message.text,
                    rule_id=r.ruleId,
                    extra={k: props[k] for k in ("cwe", "cvss_score", "package", "fixed_version") if k in props},
                )
            )
    return out


def tool_run_counts(runs: Iterable[RawToolResult]) -> ToolRunCounts:
    c = ToolRunCounts()
    for r in runs:
        c.total += 1
        if r.status == "success":
            c.successful += 1
        elif r.status == "warning":
            c.with_warnings += 1
        elif r.status == "failed":
            c.failed += 1
        else:
            c.skipped += 1
    return c


def risk_level(critical: int, high: int) -> str:
    if critical > 0:
        return "HIGH RISK"
    if high > 5:
        return "MEDIUM-HIGH RISK"
    if high > 0:
        return "MEDIUM RISK"
    return "LOW RISK"


def _category_status(ran: bool, findings: list[Finding]) -> str:
    if not ran:
        return "NOT_SCANNED"
    sevs = {f.severity for f in findings}
    if sevs & {"CRITICAL", "HIGH"}:
        return "NEEDS_ATTENTION"
    if "MEDIUM" in sevs:
        return "GOOD"
    return "EXCELLENT"


def load_previous_ids(path: Path) -> list[str] | None:
    """Finding ids of the last run, from its ``findings.json`` baseline."""
    if not path.exists():
        return None
    try:
        items = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable trend baseline %s", path)
        return None
    return [it["id"] for it in items if isinstance(it, dict) and it.get("id")]


def _trend(current: list[Finding], previous: list[str] | None) -> Trend:
    if previous is None:
        return Trend()
    cur = {f.id for f in current}
    prev = set(previous)
    improvement = 0
    if prev:
        improvement = int(round((len(previous) - len(current)) / len(previous) * 100))
    return Trend(
        new=len(cur - prev),
        resolved=len(prev - cur),
        improvement_percentage=improvement,
        new_ids=sorted(cur - prev)[:50],
        resolved_ids=sorted(prev - cur)[:50],
    )


def summarize(
    findings: list[Finding],
    tool_runs: list[RawToolResult],
    previous: list[str] | None = None,
    generated_at: str | None = None,
) -> ReportSummary:
    by_sev = {s: 0 for s in SEVERITIES}
    for f in findings:
        by_sev[f.severity] = by_sev.get(f.severity, 0) + 1

    ran_tools = {r.tool for r in tool_runs if r.status != "skipped"}

    categories: dict[str, CategorySummary] = {}
    for cat, tools in CATEGORY_TOOLS.items():
        cat_findings = [f for f in findings if f.category == cat]
        # a multi-purpose scanner (trivy config/secret) also covers the category it reported into
        contributors = [t for t in tools if t in ran_tools]
        for f in cat_findings:
            if f.tool in ran_tools and f.tool not in contributors:
                contributors.append(f.tool)
        categories[cat] = CategorySummary(
            findings=len(cat_findings),
            status=_category_status(bool(contributors), cat_findings),
            tools=contributors,
        )

    compliance_findings = [f for f in findings if f.category == "compliance"]
    if any(at_least(f.severity, "HIGH") for f in compliance_findings):
        compliance = "NON_COMPLIANT"
    elif categories["compliance"].status != "NOT_SCANNED" or compliance_findings:
        compliance = "COMPLIANT"
    else:
        compliance = "NOT_EVALUATED"

    covered = sum(1 for c in categories.values() if c.status != "NOT_SCANNED")
    critical, high = by_sev["CRITICAL"], by_sev["HIGH"]

    return ReportSummary(
        generated_at=generated_at or datetime.now(timezone.utc).isoformat(timespec="seconds"),
        by_severity=by_sev,
        total=len(findings),
        categories=categories,
        tools=tool_run_counts(tool_runs),
        risk_level=risk_level(critical, high),
        compliance_status=compliance,
        coverage_percentage=int(round(covered / len(CATEGORY_TOOLS) * 100)),
        overall_status="SECURE" if critical + high == 0 else "AT_RISK",
        trend=_trend(findings, previous),
    )


TIMELINES = {"IMMEDIATE": "0-7 days", "SHORT_TERM": "1-4 weeks", "LONG_TERM": "1-3 months"}


def exceeds_threshold(summary: ReportSummary, fail_on: str) -> bool:
    return any(n > 0 and at_least(sev, fail_on) for sev, n in summary.by_severity.items())


def recommendations(summary: ReportSummary) -> list[dict[str, str]]:
    """Prioritized actions derived from the counts."""

    def item(priority: str, category: str, action: str) -> dict[str, str]:
        return {"priority": priority, "category": category, "action": action, "timeline": TIMELINES[priority]}

    out: list[dict[str, str]] = []
    if summary.critical:
        out.append(item("IMMEDIATE", "Vulnerabilities", f"Address {summary.critical} critical finding(s)"))
    if summary.high:
        out.append(item("IMMEDIATE", "Vulnerabilities", f"Remediate {summary.high} high severity finding(s)"))
    if summary.categories["secrets_detection"].findings:
        out.append(item("IMMEDIATE", "Secrets", "Rotate exposed credentials and remove them from the repository"))
    if summary.compliance_status == "NON_COMPLIANT":
        out.append(item("SHORT_TERM", "Compliance", "Fix failed compliance checks in the Dockerfiles"))
    if summary.by_severity.get("MEDIUM"):
        out.append(
            item("SHORT_TERM", "Dependencies", f"Review {summary.by_severity['MEDIUM']} medium severity finding(s)")
        )
    if summary.tools.failed:
        out.append(item("SHORT_TERM", "Tooling", f"Investigate {summary.tools.failed} failed scanner run(s)"))
    if summary.coverage_percentage < 100:
        out.append(item("LONG_TERM", "Coverage", "Enable advanced mode to cover every security category"))
    if not out:
        out.append(item("LONG_TERM", "Monitoring", "Continue regular security monitoring"))
    return out
