from __future__ import annotations

import json
import logging
from pathlib import Path

from imagesec.core.config import settings
from imagesec.domain.models import Finding, RawToolResult, ReportSummary
from imagesec.reports.executive import render_executive
from imagesec.reports.exports import analysis_document, api_response, write_csv
from imagesec.reports.html import render_html
from imagesec.reports.markdown import render_markdown
from imagesec.reports.summary import findings_from_sarif, load_previous_ids, summarize
from imagesec.services.layout import ResultsLayout
from imagesec.services.sarif_service import load_unified
from imagesec.services.scan_service import ScanService

logger = logging.getLogger(__name__)


class ReportService:
    """
    Renders every report format from the unified SARIF document and the scan index.
    """

    def __init__(self, layout: ResultsLayout):
        self.layout = layout

    def load(self) -> tuple[list[Finding], list[RawToolResult], ReportSummary]:
        findings = findings_from_sarif(load_unified(self.layout))
        tool_runs = ScanService.load_index(self.layout)
        previous = load_previous_ids(self.layout.findings_json)
        return findings, tool_runs, summarize(findings, tool_runs, previous=previous)

    def render(self, advanced: bool = False) -> tuple[ReportSummary, dict[str, Path]]:
        layout = self.layout
        layout.ensure()

        findings, tool_runs, summary = self.load()
        repo = settings.GITHUB_REPOSITORY

        paths = {
            "markdown": layout.reports_dir / "comprehensive-security-report.md",
            "executive": layout.report_dir("executive") / "security-executive-summary.txt",
            "html": layout.report_dir("html") / "unified-security-report.html",
            "csv": layout.report_dir("csv") / "security-findings.csv",
            "api": layout.report_dir("json") / "security-api-response.json",
            "analysis": layout.report_dir("json") / "security-analysis.json",
            "findings": layout.findings_json,
        }

        paths["markdown"].write_text(render_markdown(summary, tool_runs, layout, advanced), encoding="utf-8")
        paths["executive"].write_text(render_executive(summary, findings, tool_runs, repo), encoding="utf-8")
        paths["html"].write_text(render_html(summary, findings, repo), encoding="utf-8")
        write_csv(paths["csv"], findings, summary.generated_at)

        artifacts = {
            "sarif_report": self._rel(layout.unified_sarif) if layout.unified_sarif.exists() else None,
            "html_report": self._rel(paths["html"]),
            "executive_summary": self._rel(paths["executive"]),
            "csv_export": self._rel(paths["csv"]),
            "markdown_report": self._rel(paths["markdown"]),
        }
        paths["api"].write_text(json.dumps(api_response(summary, artifacts), indent=2), encoding="utf-8")
        paths["analysis"].write_text(
            json.dumps(analysis_document(summary, tool_runs, advanced), indent=2), encoding="utf-8"
        )

        # baseline for the next run's trend; written last so load() saw the previous one
        paths["findings"].write_text(json.dumps([f.to_dict() for f in findings], indent=2), encoding="utf-8")

        logger.info("Reports written: %d findings, %s", summary.total, summary.risk_level)
        return summary, paths

    def _rel(self, p: Path) -> str:
        return p.relative_to(self.layout.root).as_posix()
