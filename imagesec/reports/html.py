from __future__ import annotations

from html import escape

from imagesec.domain.models import SEVERITIES, Finding, ReportSummary

COLORS = {
    "CRITICAL": "#8b0000",
    "HIGH": "#d9534f",
    "MEDIUM": "#f0ad4e",
    "LOW": "#5bc0de",
    "INFO": "#777777",
}

STYLE = """
body { font-family: -apple-system, Segoe UI, Helvetica, Arial, sans-serif; margin: 2rem; color: #222; }
.cards { display: flex; gap: 1rem; margin: 1rem 0 2rem; }
.card { flex: 1; padding: 1rem; border-radius: 6px; color: #fff; text-align: center; }
.card .n { font-size: 2rem; font-weight: bold; }
table { border-collapse: collapse; width: 100%; font-size: 0.9rem; }
th, td { border: 1px solid #ddd; padding: 0.4rem 0.6rem; text-align: left; vertical-align: top; }
th { background: #f5f5f5; }
"""


def render_html(summary: ReportSummary, findings: list[Finding], repository: str) -> str:
    cards = "".join(
        f'<div class="card" style="background:{COLORS[s]}"><div class="n">{summary.by_severity.get(s, 0)}</div>{s}</div>'
        for s in SEVERITIES
    )

    category_rows = "".join(
        f"<tr><td>{escape(name)}</td><td>{cat.findings}</td><td>{escape(cat.status)}</td>"
        f"<td>{escape(', '.join(cat.tools))}</td></tr>"
        for name, cat in summary.categories.items()
    )

    finding_rows = "".join(
        "<tr>"
        f'<td style="color:{COLORS.get(f.severity, "#222")}"><b>{escape(f.severity)}</b></td>'
        f"<td>{escape(f.tool)}</td>"
        f"<td>{escape(f.category)}</td>"
        f"<td>{escape(f.rule_id or '')}</td>"
        f"<td>{escape(f.message)}</td>"
        f"<td>{escape(f.file)}{':' + str(f.line) if f.line else ''}</td>"
        "</tr>"
        for f in findings
    )
    if not findings:
        finding_rows = '<tr><td colspan="6">No findings</td></tr>'

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Unified Security Report - {escape(repository)}</title>
<style>{STYLE}</style>
</head>
<body>
<h1>Unified Security Report</h1>
<p>Repository: <b>{escape(repository)}</b><br>
Generated: {escape(summary.generated_at)}<br>
Risk level: <b>{escape(summary.risk_level)}</b> &middot; Compliance: <b>{escape(summary.compliance_status)}</b>
&middot; Coverage: {summary.coverage_percentage}%</p>
<div class="cards">{cards}</div>
<h2>Categories</h2>
<table>
<tr><th>Category</th><th>Findings</th><th>Status</th><th>Tools</th></tr>
{category_rows}
</table>
<h2>Findings ({summary.total})</h2>
<table>
<tr><th>Severity</th><th>Tool</th><th>Category</th><th>Rule</th><th>Finding</th><th>Location</th></tr>
{finding_rows}
</table>
</body>
</html>
"""
