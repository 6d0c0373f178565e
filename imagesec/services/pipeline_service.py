from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from imagesec.core.errors import NoSarifInputsError
from imagesec.domain.models import RawToolResult, ReportSummary
from imagesec.domain.schemas import ScanConfig
from imagesec.services.layout import ResultsLayout
from imagesec.services.report_service import ReportService
from imagesec.services.sarif_service import AggregationResult, SarifService
from imagesec.services.scan_service import ScanService

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    tool_runs: list[RawToolResult]
    summary: ReportSummary
    aggregation: AggregationResult | None
    reports: dict[str, Path] = field(default_factory=dict)


class PipelineService:
    """
    scan → convert to SARIF → aggregate → SARIF summary → render reports.
    """

    def __init__(self, scan: ScanService, sarif: SarifService):
        self.scan = scan
        self.sarif = sarif

    def run(self, config: ScanConfig, layout: ResultsLayout, scan_id: str | None = None) -> PipelineResult:
        log_extra = {"scan_id": scan_id} if scan_id else {}

        tool_runs = self.scan.run(config, layout, scan_id=scan_id)
        aggregation = self.build_sarif(layout, target_dir=Path(config.target_path), log_extra=log_extra)
        summary, reports = ReportService(layout).render(advanced=config.advanced)

        return PipelineResult(tool_runs=tool_runs, summary=summary, aggregation=aggregation, reports=reports)

    def build_sarif(
        self,
        layout: ResultsLayout,
        target_dir: Path | None = None,
        log_extra: dict | None = None,
    ) -> AggregationResult | None:
        """Convert, aggregate and summarize; no SARIF inputs is a warning, not an error."""
        self.sarif.convert_results(layout, target_dir=target_dir)
        aggregation: AggregationResult | None = None
        try:
            aggregation = self.sarif.aggregate(layout)
        except NoSarifInputsError as e:
            logger.warning("%s", e, extra=log_extra or {})
        self.sarif.write_summary(layout, aggregation)
        return aggregation
