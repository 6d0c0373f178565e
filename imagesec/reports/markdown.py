from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import RawToolResult, ReportSummary
from imagesec.services.layout import SCAN_CATEGORIES, ResultsLayout

from .summary import recommendations

STATUS_ICONS = {"success": "✅", "warning": "⚠️", "failed": "❌", "skipped": "⏭️"}


def _results_listing(layout: ResultsLayout) -> list[str]:
    lines: list[str] = []
    for category in SCAN_CATEGORIES:
        cdir = layout.category_dir(category)
        files = sorted(p for p in cdir.glob("*") if p.is_file()) if cdir.is_dir() else []
        lines.append(f"### {category}/")
        if not files:
            lines.append("- _no results_")
        for p in files:
            lines.append(f"- `{p.name}` ({p.stat().st_size} bytes)")
        lines.append("")
    return lines


def render_markdown(
    summary: ReportSummary,
    tool_runs: list[RawToolResult],
    layout: ResultsLayout,
    advanced: bool,
) -> str:
    s = summary.by_severity
    lines = [
        "# Comprehensive Security Scan Report",
        "",
        f"**Generated:** {summary.generated_at}  ",
        f"**Scan mode:** {'advanced' if advanced else 'basic'}  ",
        f"**Overall status:** {summary.overall_status}",
        "",
        "## Security Metrics Dashboard",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Critical | {s['CRITICAL']} |",
        f"| High | {s['HIGH']} |",
        f"| Medium | {s['MEDIUM']} |",
        f"| Low | {s['LOW']} |",
        f"| Info | {s['INFO']} |",
        f"| **Total findings** | **{summary.total}** |",
        f"| Tools executed | {summary.tools.total - summary.tools.skipped} of {summary.tools.total} |",
        f"| Coverage | {summary.coverage_percentage}% |",
        "",
        "## Security Tools",
        "",
        "| Tool | Run | Status | Exit code |",
        "|------|-----|--------|-----------|",
    ]
    for r in tool_runs:
        lines.append(f"| {r.tool} | {r.label} | {STATUS_ICONS.get(r.status, '')} {r.status} | {r.exit_code} |")
    if not tool_runs:
        lines.append("| _none recorded_ | | | |")

    lines += ["", "## Scan Results", ""]
    lines += _results_listing(layout)

    lines += [
        "## Risk Assessment",
        "",
        f"- **Risk level:** {summary.risk_level}",
        f"- **Compliance:** {summary.compliance_status}",
        "",
        "| Category | Findings | Status |",
        "|----------|----------|--------|",
    ]
    for name, cat in summary.categories.items():
        lines.append(f"| {name} | {cat.findings} | {cat.status} |")

    lines += ["", "## Recommendations", ""]
    for rec in recommendations(summary):
        lines.append(f"- **{rec['priority']}** ({rec['timeline']}): {rec['action']}")

    lines += [
        "",
        "---",
        f"Unified SARIF: `{Path('sarif') / layout.unified_sarif.name}`",
        "",
    ]
    return "\n".join(lines)
