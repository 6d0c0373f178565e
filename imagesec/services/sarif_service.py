from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from imagesec.core.errors import AggregationError, NoSarifInputsError
from imagesec.domain.models import Finding
from imagesec.domain.sarif import (
    SARIF_VERSION,
    SarifArtifactLocation,
    SarifDriver,
    SarifInvocation,
    SarifLocation,
    SarifMessage,
    SarifPhysicalLocation,
    SarifRegion,
    SarifReport,
    SarifResult,
    SarifRule,
    SarifRun,
    SarifTool,
)
from imagesec.normalizers.base import NormalizerContext
from imagesec.normalizers.registry import NormalizerRegistry
from imagesec.services.layout import SCAN_CATEGORIES, ResultsLayout

logger = logging.getLogger(__name__)

SRCROOT = "%SRCROOT%"

# tool -> (driver name, informationUri, version)
KNOWN_TOOLS: dict[str, tuple[str, str, str | None]] = {
    "trivy": ("Trivy", "https://trivy.dev/", "0.50.0"),
    "trivy-image": ("Trivy", "https://trivy.dev/", "0.50.0"),
    "safety": ("Safety", "https://pyup.io/safety/", "3.0.0"),
    "bandit": ("Bandit", "https://bandit.readthedocs.io/", "1.7.5"),
    "semgrep": ("Semgrep", "https://semgrep.dev/", "1.45.0"),
    "grype": ("Grype", "https://github.com/anchore/grype", "0.74.0"),
    "grype-container": ("Grype", "https://github.com/anchore/grype", "0.74.0"),
    "pip-audit": ("pip-audit", "https://github.com/pypa/pip-audit", None),
    "osv-scanner": ("OSV-Scanner", "https://google.github.io/osv-scanner/", None),
    "npm-audit": ("npm audit", "https://docs.npmjs.com/cli/commands/npm-audit", None),
    "hadolint": ("Hadolint", "https://github.com/hadolint/hadolint", None),
    "dockle": ("Dockle", "https://github.com/goodwithtech/dockle", None),
    "gitleaks": ("Gitleaks", "https://gitleaks.io/", None),
    "trufflehog": ("TruffleHog", "https://github.com/trufflesecurity/trufflehog", None),
    "checkov": ("Checkov", "https://www.checkov.io/", None),
}

# artifact file-name prefix -> tool; the longest matching prefix wins
FILE_PREFIXES: dict[str, str] = {
    "trivy-image": "trivy-image",
    "trivy": "trivy",
    "grype-container": "grype-container",
    "grype": "grype",
    "safety": "safety",
    "pip-audit": "pip-audit",
    "osv": "osv-scanner",
    "npm-audit": "npm-audit",
    "hadolint": "hadolint",
    "dockle": "dockle",
    "bandit": "bandit",
    "semgrep": "semgrep",
    "gitleaks": "gitleaks",
    "trufflehog": "trufflehog",
    "checkov": "checkov",
}

LEVELS = {"CRITICAL": "error", "HIGH": "error", "MEDIUM": "warning", "LOW": "note", "INFO": "note"}

# GitHub code scanning reads this as a CVSS-like score
SECURITY_SEVERITY = {"CRITICAL": "9.5", "HIGH": "8.0", "MEDIUM": "5.5", "LOW": "2.0", "INFO": "0.0"}


def tool_for_file(path: Path) -> str | None:
    name = path.name
    matches = [p for p in FILE_PREFIXES if name.startswith(p)]
    if not matches:
        return None
    return FILE_PREFIXES[max(matches, key=len)]


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def to_sarif_result(f: Finding) -> SarifResult:
    locations = []
    if f.file:
        locations.append(
            SarifLocation(
                physicalLocation=SarifPhysicalLocation(
                    artifactLocation=SarifArtifactLocation(uri=f.file, uriBaseId=SRCROOT),
                    region=SarifRegion(startLine=f.line) if f.line else None,
                )
            )
        )

    cvss = f.extra.get("cvss_score")
    props = {
        "severity": f.severity,
        "category": f.category,
        "type": f.type,
        "tool": f.tool,
        "security-severity": str(cvss) if cvss else SECURITY_SEVERITY[f.severity],
    }
    for key in ("cwe", "cvss_score", "package", "fixed_version"):
        if f.extra.get(key) is not None:
            props[key] = f.extra[key]

    return SarifResult(
        ruleId=f.rule_id,
        level=LEVELS[f.severity],
        message=SarifMessage(text=f.message),
        locations=locations,
        partialFingerprints={"findingId": f.id},
        properties=props,
    )


def build_run(tool: str, findings: list[Finding], started_at: str | None = None) -> SarifRun:
    name, uri, version = KNOWN_TOOLS.get(tool, (tool, None, None))

    rules: dict[str, SarifRule] = {}
    for f in findings:
        if f.rule_id and f.rule_id not in rules:
            rules[f.rule_id] = SarifRule(
                id=f.rule_id,
                shortDescription=SarifMessage(text=f.message[:200]),
                properties={"tags": ["security", f.category]},
            )

    return SarifRun(
        tool=SarifTool(driver=SarifDriver(name=name, informationUri=uri, version=version, rules=list(rules.values()))),
        results=[to_sarif_result(f) for f in findings],
        invocations=[SarifInvocation(executionSuccessful=True, startTimeUtc=started_at or _utc_now())],
        originalUriBaseIds={SRCROOT: {"uri": "file:///"}},
    )


@dataclass
class AggregationResult:
    output: Path
    inputs: list[Path]
    included: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    valid: bool = True

    @property
    def run_count(self) -> int:
        return len(self.included)


class SarifService:
    def __init__(self, registry: NormalizerRegistry):
        self.registry = registry

    def normalize(
        self,
        tool: str,
        input_path: Path,
        output_path: Path | None = None,
        target_dir: Path | None = None,
    ) -> SarifReport | None:
        if not input_path.exists():
            logger.warning("No output to convert for %s: %s", tool, input_path, extra={"tool": tool})
            return None

        report = self._passthrough(input_path)
        if report is None:
            normalizer = self.registry.by_tool(tool)
            findings: list[Finding] = []
            if normalizer:
                ctx = NormalizerContext(target_dir=target_dir or Path("."))
                findings = normalizer.normalize(input_path, ctx)
            else:
                logger.info("No normalizer for %s, writing empty run", tool, extra={"tool": tool})
            report = SarifReport(runs=[build_run(tool, findings)])

        if output_path is not None:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(report.to_json(), encoding="utf-8")
        return report

    @staticmethod
    def _passthrough(input_path: Path) -> SarifReport | None:
        """The input itself, when the tool already wrote SARIF 2.1.0."""
        try:
            data = json.loads(input_path.read_text(encoding="utf-8", errors="replace") or "null")
        except json.JSONDecodeError:
            return None
        if not (isinstance(data, dict) and data.get("version") == SARIF_VERSION and "runs" in data):
            return None
        try:
            return SarifReport.model_validate(data)
        except ValidationError as e:
            logger.warning("Ignoring malformed SARIF in %s: %s", input_path.name, e.error_count())
            return None

    def convert_results(self, layout: ResultsLayout, target_dir: Path | None = None) -> int:
        layout.sarif_processed_dir.mkdir(parents=True, exist_ok=True)
        # processed files are rebuilt from the raw outputs on every pass
        for stale in layout.sarif_processed_dir.glob("*.sarif"):
            stale.unlink()
        produced = 0
        for category in SCAN_CATEGORIES:
            cdir = layout.category_dir(category)
            if not cdir.is_dir():
                continue
            for p in sorted(list(cdir.glob("*.json")) + list(cdir.glob("*.jsonl"))):
                tool = tool_for_file(p)
                if tool is None:
                    logger.debug("No SARIF conversion for %s", p.name)
                    continue
                out = layout.sarif_processed_dir / f"{p.stem}.sarif"
                if self.normalize(tool, p, out, target_dir=target_dir) is not None:
                    produced += 1
        logger.info("Converted %d tool outputs to SARIF", produced)
        return produced

    def aggregate(self, layout: ResultsLayout) -> AggregationResult:
        files = sorted(layout.sarif_processed_dir.glob("*.sarif")) if layout.sarif_processed_dir.is_dir() else []
        if not files:
            # a unified report from an earlier run must not outlive its inputs
            layout.unified_sarif.unlink(missing_ok=True)
            raise NoSarifInputsError("No SARIF files found for aggregation")

        result = AggregationResult(output=layout.unified_sarif, inputs=files)
        runs: list[SarifRun] = []
        for p in files:
            try:
                data = json.loads(p.read_text(encoding="utf-8"))
                file_runs = data.get("runs") if isinstance(data, dict) else None
                if not isinstance(file_runs, list) or not file_runs:
                    raise ValueError("no runs")
                runs.append(SarifRun.model_validate(file_runs[0]))
            except (json.JSONDecodeError, ValidationError, ValueError) as e:
                logger.warning("Skipping %s: %s", p.name, e)
                result.skipped.append(p.name)
                continue
            result.included.append(p.name)

        layout.unified_sarif.parent.mkdir(parents=True, exist_ok=True)
        layout.unified_sarif.write_text(SarifReport(runs=runs).to_json(), encoding="utf-8")

        try:
            json.loads(layout.unified_sarif.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            result.valid = False
            raise AggregationError(f"Unified SARIF is not valid JSON: {e}") from e

        logger.info("Aggregated %d SARIF runs (%d skipped)", result.run_count, len(result.skipped))
        return result

    @staticmethod
    def write_summary(layout: ResultsLayout, result: AggregationResult | None) -> Path:
        lines = [
            "SARIF Aggregation Summary",
            "=========================",
            f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')}",
            "",
        ]
        files = result.inputs if result else []
        lines.append(f"Processed SARIF files: {len(files)}")
        for p in files:
            size = p.stat().st_size if p.exists() else 0
            state = "skipped" if result and p.name in result.skipped else "included"
            lines.append(f"  - {p.stem}: {size} bytes ({state})")
        lines.append("")

        unified = layout.unified_sarif
        if result and unified.exists():
            lines.append(f"Unified report: {unified.name}")
            lines.append(f"  Valid JSON: {'yes' if result.valid else 'no'}")
            lines.append(f"  Size: {unified.stat().st_size} bytes")
            lines.append(f"  Runs: {result.run_count}")
        else:
            lines.append("Unified report: not generated (no SARIF inputs)")

        layout.sarif_summary.parent.mkdir(parents=True, exist_ok=True)
        layout.sarif_summary.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return layout.sarif_summary


def load_unified(layout: ResultsLayout) -> SarifReport | None:
    if not layout.unified_sarif.exists():
        return None
    return SarifReport.model_validate_json(layout.unified_sarif.read_text(encoding="utf-8"))
