from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from imagesec.core.config import settings
from imagesec.core.util import run_cmd
from imagesec.domain.models import RawToolResult
from imagesec.domain.schemas import ScanConfig
from imagesec.scanners.base import ScanTarget
from imagesec.scanners.registry import ScannerRegistry
from imagesec.services.layout import ResultsLayout

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class ScanService:
    """
    Orchestrates: prepare results tree → pull images → run each scanner → persist the index.
    """

    def __init__(self, registry: ScannerRegistry):
        self.scanners = registry

    def run(self, config: ScanConfig, layout: ResultsLayout, scan_id: str | None = None) -> list[RawToolResult]:
        log_extra = {"scan_id": scan_id} if scan_id else {}
        layout.ensure()
        cleared = layout.clear_tool_outputs()
        if cleared:
            logger.info("Removed %d tool outputs from a previous scan", cleared, extra=log_extra)

        selected = self.scanners.pick(config.tools, advanced=config.advanced)
        started = _now()
        status: dict[str, Any] = {
            "status": "in_progress",
            "scan_id": scan_id,
            "started_at": started,
            "target": config.target_path,
            "mode": "advanced" if config.advanced else "basic",
            "images": config.images,
            "tools": [s.tool_name() for s in selected],
        }
        self._write_status(layout, status)
        self._write_summary_header(layout, config, status["tools"], started)

        if any(s.category == "container-security" for s in selected):
            self._pull_images(config.images, log_extra)

        target = ScanTarget(
            path=Path(config.target_path),
            images=config.images,
            dockerfiles=config.dockerfiles,
            severity_threshold=config.severity_threshold,
        )

        results: list[RawToolResult] = []
        for scanner in selected:
            logger.info("Running %s ...", scanner.tool_name(), extra=log_extra)
            results.extend(scanner.scan(target, layout.root))

        layout.index_json.write_text(json.dumps([r.to_dict() for r in results], indent=2), encoding="utf-8")

        counts = {k: sum(1 for r in results if r.status == k) for k in ("success", "warning", "failed", "skipped")}
        status.update({"status": "completed", "finished_at": _now(), "results": counts})
        self._write_status(layout, status)
        self._append_summary_results(layout, results)

        logger.info(
            "Scan complete: %d runs (%d failed, %d skipped)",
            len(results),
            counts["failed"],
            counts["skipped"],
            extra=log_extra,
        )
        return results

    @staticmethod
    def load_index(layout: ResultsLayout) -> list[RawToolResult]:
        if not layout.index_json.exists():
            return []
        items = json.loads(layout.index_json.read_text(encoding="utf-8") or "[]")
        return [RawToolResult.from_dict(it) for it in items]

    @staticmethod
    def _pull_images(images: list[str], log_extra: dict) -> None:
        if not images:
            return
        if shutil.which("docker") is None:
            logger.warning("docker not installed, image scanners will use local state only", extra=log_extra)
            return
        for image in images:
            r = run_cmd(["docker", "pull", image], timeout_sec=settings.TOOL_TIMEOUT)
            if not r.ok:
                logger.warning("Could not pull %s", image, extra=log_extra)

    @staticmethod
    def _write_status(layout: ResultsLayout, status: dict[str, Any]) -> None:
        layout.status_json.write_text(json.dumps(status, indent=2), encoding="utf-8")

    @staticmethod
    def _write_summary_header(layout: ResultsLayout, config: ScanConfig, tools: list[str], started: str) -> None:
        lines = [
            "Comprehensive Security Scan Summary",
            "===================================",
            f"Started: {started}",
            f"Target: {config.target_path}",
            f"Mode: {'advanced' if config.advanced else 'basic'}",
            f"Images: {', '.join(config.images) or 'none'}",
            f"Dockerfiles: {', '.join(config.dockerfiles) or 'none'}",
            f"Tools: {', '.join(tools) or 'none'}",
            "",
        ]
        layout.summary_txt.write_text("\n".join(lines), encoding="utf-8")

    @staticmethod
    def _append_summary_results(layout: ResultsLayout, results: list[RawToolResult]) -> None:
        lines = ["Results:"]
        for r in results:
            lines.append(f"  [{r.status.upper():7}] {r.label} (exit {r.exit_code}) -> {r.artifact or '-'}")
        lines.append("")
        with layout.summary_txt.open("a", encoding="utf-8") as fh:
            fh.write("\n".join(lines))
