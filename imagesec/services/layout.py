from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from imagesec.core.config import settings

SCAN_CATEGORIES = (
    "basic",
    "container-security",
    "static-analysis",
    "secrets",
    "compliance",
    "sbom",
    "malware",
)

REPORT_FORMATS = ("html", "json", "csv", "executive")


@dataclass(frozen=True)
class ResultsLayout:
    """Paths of one results tree (``comprehensive-security-results/`` by default)."""

    root: Path

    @classmethod
    def default(cls) -> "ResultsLayout":
        return cls(Path(settings.SCAN_RESULTS_DIR))

    def category_dir(self, category: str) -> Path:
        return self.root / category

    @property
    def sarif_dir(self) -> Path:
        return self.root / "sarif"

    @property
    def sarif_processed_dir(self) -> Path:
        return self.sarif_dir / "processed"

    @property
    def sarif_reports_dir(self) -> Path:
        return self.sarif_dir / "reports"

    @property
    def unified_sarif(self) -> Path:
        return self.sarif_dir / "unified-security-report.sarif"

    @property
    def sarif_summary(self) -> Path:
        return self.sarif_reports_dir / "sarif-summary.txt"

    @property
    def reports_dir(self) -> Path:
        return self.root / "reports"

    def report_dir(self, fmt: str) -> Path:
        return self.reports_dir / fmt

    @property
    def findings_json(self) -> Path:
        return self.report_dir("json") / "findings.json"

    @property
    def status_json(self) -> Path:
        return self.root / "scan-status.json"

    @property
    def summary_txt(self) -> Path:
        return self.root / "scan-summary.txt"

    @property
    def index_json(self) -> Path:
        return self.root / "scan-index.json"

    def ensure(self) -> None:
        for c in SCAN_CATEGORIES:
            self.category_dir(c).mkdir(parents=True, exist_ok=True)
        self.sarif_processed_dir.mkdir(parents=True, exist_ok=True)
        self.sarif_reports_dir.mkdir(parents=True, exist_ok=True)
        for fmt in REPORT_FORMATS:
            self.report_dir(fmt).mkdir(parents=True, exist_ok=True)

    def clear_tool_outputs(self) -> int:
        """Remove raw outputs of a previous scan; reports (and the trend baseline) stay."""
        removed = 0
        for c in SCAN_CATEGORIES:
            cdir = self.category_dir(c)
            if not cdir.is_dir():
                continue
            for p in cdir.iterdir():
                if p.is_file():
                    p.unlink()
                    removed += 1
        return removed
