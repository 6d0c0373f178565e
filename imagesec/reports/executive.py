from __future__ import annotations

from datetime import datetime, timedelta

from imagesec.domain.models import Finding, RawToolResult, ReportSummary

from .summary import recommendations

TOP_N = 10


def next_scan_date(generated_at: str) -> str:
    """One week after ``generated_at`` (ISO 8601)."""
    return (datetime.fromisoformat(generated_at) + timedelta(days=7)).isoformat(timespec="seconds")


def _where(f: Finding) -> str:
    if not f.file:
        return ""
    return f" ({f.file}:{f.line})" if f.line else f" ({f.file})"


def _top(findings: list[Finding], severity: str) -> list[str]:
    picked = [f for f in findings if f.severity == severity][:TOP_N]
    if not picked:
        return [f"- No {severity.lower()} issues identified"]
    return [f"- [{f.tool}] {f.message}{_where(f)}" for f in picked]


def render_executive(
    summary: ReportSummary,
    findings: list[Finding],
    tool_runs: list[RawToolResult],
    repository: str,
) -> str:
    rec = recommendations(summary)[0]
    t = summary.trend

    lines = [
        "# Security Executive Summary",
        f"Generated: {summary.generated_at}",
        f"Repository: {repository}",
        "Scan Type: Comprehensive Multi-Tool Security Analysis",
        "",
        "## Security Posture Summary",
        f"- Risk Level: {summary.risk_level}",
        f"- Compliance Status: {summary.compliance_status}",
        f"- Recommendation: {rec['action']}",
        "",
        "## Scan Coverage",
        f"- Security tool runs: {summary.tools.total}",
        "- Scan categories: 5 (Vulnerability, Static Analysis, Secrets, Container, Compliance)",
        f"- Coverage Score: {summary.coverage_percentage}%",
        "",
        "## Key Findings",
        "",
        "### Critical Issues",
        *_top(findings, "CRITICAL"),
        "",
        "### High Priority Issues",
        *_top(findings, "HIGH"),
        "",
        "## Trend Analysis",
        f"- New findings: {t.new}",
        f"- Resolved findings: {t.resolved}",
        f"- Improvement: {t.improvement_percentage}%",
        "",
        "## Tool Performance",
        f"- Successful: {summary.tools.successful}",
        f"- Completed with findings: {summary.tools.with_warnings}",
        f"- Failed: {summary.tools.failed}",
        f"- Skipped (not installed): {summary.tools.skipped}",
        "",
        "## Security Categories",
    ]
    for name, cat in summary.categories.items():
        tools = ", ".join(cat.tools) or "none"
        lines.append(f"- {name}: {cat.findings} findings, {cat.status} (tools: {tools})")

    failed = [r.label for r in tool_runs if r.status == "failed"]
    if failed:
        lines += ["", "## Failed Scanner Runs", *[f"- {label}" for label in failed]]

    lines += [
        "",
        "## Recommendations",
        *[f"- [{r['priority']}] {r['action']} ({r['timeline']})" for r in recommendations(summary)],
        "",
        f"Report Generated: {summary.generated_at}",
        f"Next Recommended Scan: {next_scan_date(summary.generated_at)}",
        "",
    ]
    return "\n".join(lines)
