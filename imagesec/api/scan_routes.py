from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from imagesec.core.containers import build_normalizer_registry, build_scanner_registry
from imagesec.domain.models import SEVERITIES
from imagesec.domain.schemas import ScanConfig
from imagesec.services.pipeline_service import PipelineService
from imagesec.services.sarif_service import SarifService
from imagesec.services.scan_service import ScanService
from imagesec.services.scan_store import ScanStore

router = APIRouter(prefix="/api", tags=["scans"])

# Build once at module level
_scanners = build_scanner_registry()
_pipeline = PipelineService(ScanService(_scanners), SarifService(build_normalizer_registry()))


# ── Request / Response schemas ────────────────────────────────────
class ScanRequest(BaseModel):
    """Request body for starting a scan."""

    target_path: str = Field(".", description="Directory to scan for dependencies, Dockerfiles and source code.")
    images: list[str] | None = Field(
        None,
        description="Images to scan. If omitted, the builder and dev images are scanned.",
        json_schema_extra={"examples": [["alteriom/builder:latest"]]},
    )
    advanced: bool = Field(False, description="Also run the advanced scanners (SAST, secrets, compliance, SBOM).")
    tools: list[str] | None = Field(
        None,
        description="Scanner names to run. If omitted, every applicable scanner runs.",
        json_schema_extra={"examples": [["trivy", "hadolint"]]},
    )


class ScanResponse(BaseModel):
    """Result of a completed scan."""

    scan_id: str
    summary: dict[str, Any]
    artifacts: list[str] = Field(..., description="Report files written under the scan's results tree.")


# ── Endpoints ─────────────────────────────────────────────────────
@router.get(
    "/tools",
    summary="List available scanners",
    response_description="Names of registered scanners, in run order",
)
def list_tools() -> list[str]:
    """Return the names of all registered scanners."""
    return _scanners.list()


@router.post(
    "/scans",
    response_model=ScanResponse,
    summary="Run a security scan",
    response_description="Scan ID, risk summary and report artifacts",
)
def create_scan(req: ScanRequest) -> dict[str, Any]:
    """Run the full pipeline in a new results tree.

    **Steps performed:**
    1. Run the selected scanners and record each tool run
    2. Convert tool outputs to SARIF and aggregate them
    3. Render the markdown, HTML, CSV, JSON and executive reports
    """
    if not Path(req.target_path).is_dir():
        raise HTTPException(status_code=400, detail=f"Target path not found: {req.target_path}")

    unknown = sorted(set(req.tools or []) - set(_scanners.list()))
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown tools: {', '.join(unknown)}")

    cfg = ScanConfig(target_path=req.target_path, advanced=req.advanced, tools=req.tools)
    if req.images is not None:
        cfg.images = req.images

    sid = ScanStore.create_scan(cfg)
    layout = ScanStore.layout(sid)
    result = _pipeline.run(cfg, layout, scan_id=sid)

    s = result.summary
    return {
        "scan_id": sid,
        "summary": {
            "total": s.total,
            "by_severity": {sev: s.by_severity.get(sev, 0) for sev in SEVERITIES},
            "risk_level": s.risk_level,
            "overall_status": s.overall_status,
        },
        "artifacts": sorted(p.relative_to(layout.root).as_posix() for p in result.reports.values()),
    }


@router.get(
    "/scans/{scan_id}",
    summary="Get scan results",
    response_description="The JSON API response document of the scan",
)
def get_scan(scan_id: str) -> dict[str, Any]:
    """Retrieve the persisted API response written when the scan finished."""
    if not ScanStore.scan_exists(scan_id):
        raise HTTPException(status_code=404, detail="Scan not found")

    p = ScanStore.layout(scan_id).report_dir("json") / "security-api-response.json"
    if not p.exists():
        raise HTTPException(status_code=404, detail="No report for this scan yet")
    return json.loads(p.read_text(encoding="utf-8"))


@router.get(
    "/scans/{scan_id}/sarif",
    summary="Get unified SARIF",
    response_description="The unified SARIF 2.1.0 document",
)
def get_sarif(scan_id: str) -> dict[str, Any]:
    """Return the unified SARIF document, or 404 when no tool produced SARIF input."""
    if not ScanStore.scan_exists(scan_id):
        raise HTTPException(status_code=404, detail="Scan not found")

    p = ScanStore.layout(scan_id).unified_sarif
    if not p.exists():
        raise HTTPException(status_code=404, detail="No SARIF report for this scan")
    return json.loads(p.read_text(encoding="utf-8"))
