from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from hashlib import sha1
from typing import Any, Literal

Severity = Literal["CRITICAL", "HIGH", "MEDIUM", "LOW", "INFO"]
FindingType = Literal["DEPENDENCY", "CONTAINER", "CODE", "SECRET", "COMPLIANCE", "OTHER"]
ToolStatus = Literal["success", "warning", "failed", "skipped"]

SEVERITIES: tuple[str, ...] = ("CRITICAL", "HIGH", "MEDIUM", "LOW", "INFO")
SEVERITY_RANK = {"INFO": 0, "LOW": 1, "MEDIUM": 2, "HIGH": 3, "CRITICAL": 4}

CATEGORY_BY_TYPE = {
    "DEPENDENCY": "vulnerability_management",
    "CONTAINER": "container_security",
    "CODE": "static_analysis",
    "SECRET": "secrets_detection",
    "COMPLIANCE": "compliance",
    "OTHER": "other",
}

# Report categories and the scanners that feed them
CATEGORY_TOOLS: dict[str, list[str]] = {
    "vulnerability_management": ["trivy", "grype", "safety", "pip-audit", "osv-scanner", "npm-audit"],
    "static_analysis": ["bandit", "semgrep", "hadolint"],
    "secrets_detection": ["gitleaks", "trufflehog"],
    "container_security": ["trivy-image", "dockle", "grype-container", "cosign", "docker-history"],
    "compliance": ["checkov"],
}


def normalize_severity(value: Any, default: str = "MEDIUM") -> str:
    """Map the many tool severity vocabularies onto ours."""
    s = str(value or "").strip().upper()
    aliases = {
        "MODERATE": "MEDIUM",
        "WARNING": "MEDIUM",
        "WARN": "MEDIUM",
        "ERROR": "HIGH",
        "FATAL": "HIGH",
        "NEGLIGIBLE": "LOW",
        "NOTE": "LOW",
        "STYLE": "INFO",
        "INFORMATIONAL": "INFO",
        "UNKNOWN": default,
        "": default,
    }
    s = aliases.get(s, s)
    return s if s in SEVERITY_RANK else default


def at_least(severity: str, threshold: str) -> bool:
    return SEVERITY_RANK.get(severity, 0) >= SEVERITY_RANK.get(threshold.upper(), 3)


@dataclass
class Finding:
    tool: str
    type: FindingType
    severity: Severity
    file: str
    line: int | None
    message: str
    rule_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        base = f"{self.tool}|{self.type}|{self.severity}|{self.file}|{self.line}|{self.rule_id}|{self.message}"
        return sha1(base.encode("utf-8")).hexdigest()

    @property
    def category(self) -> str:
        return CATEGORY_BY_TYPE.get(self.type, "other")

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["id"] = self.id
        d["category"] = self.category
        return d


@dataclass
class RawToolResult:
    """One scanner invocation, as recorded in ``scan-index.json``."""

    tool: str
    label: str
    category: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    artifact: str | None = None
    status: ToolStatus = "success"
    timed_out: bool = False

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        # keep the index small: raw output already lives in the artifact
        d.pop("stdout")
        d["stderr"] = (self.stderr or "")[-2000:]
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "RawToolResult":
        return cls(
            tool=d.get("tool", ""),
            label=d.get("label", d.get("tool", "")),
            category=d.get("category", ""),
            exit_code=int(d.get("exit_code", 0)),
            stderr=d.get("stderr", "") or "",
            artifact=d.get("artifact"),
            status=d.get("status", "success"),
            timed_out=bool(d.get("timed_out", False)),
        )


@dataclass
class ToolRunCounts:
    total: int = 0
    successful: int = 0
    with_warnings: int = 0
    failed: int = 0
    skipped: int = 0


@dataclass
class CategorySummary:
    findings: int
    status: str
    tools: list[str]


@dataclass
class Trend:
    new: int = 0
    resolved: int = 0
    improvement_percentage: int = 0
    new_ids: list[str] = field(default_factory=list)
    resolved_ids: list[str] = field(default_factory=list)


@dataclass
class ReportSummary:
    generated_at: str
    by_severity: dict[str, int]
    total: int
    categories: dict[str, CategorySummary]
    tools: ToolRunCounts
    risk_level: str
    compliance_status: str
    coverage_percentage: int
    overall_status: str
    trend: Trend

    @property
    def critical(self) -> int:
        return self.by_severity.get("CRITICAL", 0)

    @property
    def high(self) -> int:
        return self.by_severity.get("HIGH", 0)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------- Operational checks ----------


@dataclass
class PackageFacts:
    prod_pio_version: str | None = None
    latest_pio_version: str | None = None
    prod_python_version: str | None = None
    prod_created_date: date | None = None
    base_image_age_days: int | None = None
    security_updates_available: bool | None = None


@dataclass
class AuditResult:
    changes_detected: bool
    build_recommended: bool
    change_summary: str
    notes: list[str] = field(default_factory=list)
    prod_age_days: int | None = None

    def as_env(self) -> dict[str, str]:
        return {
            "CHANGES_DETECTED": str(self.changes_detected).lower(),
            "BUILD_RECOMMENDED": str(self.build_recommended).lower(),
            "CHANGE_SUMMARY": self.change_summary,
        }


@dataclass
class ImageCheck:
    image: str
    pullable: bool
    runs: bool | None = None
    version: str | None = None


@dataclass
class StatusReport:
    builder: ImageCheck
    dev: ImageCheck
    service_ok: bool | None
    verdict: Literal["READY", "AVAILABLE", "PARTIAL", "NOT_READY"]

    @property
    def ok(self) -> bool:
        return self.builder.pullable and self.dev.pullable


@dataclass
class WorkflowValidation:
    files: list[str]
    names: dict[str, str | None]
    invalid: list[str]
    local_status: Literal["PASS", "FAIL"]
    remote_status: Literal["PASS", "FAIL", "UNKNOWN", "SKIPPED"] = "SKIPPED"
    remote_workflows: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.local_status == "PASS" and self.remote_status != "FAIL"


@dataclass
class DockerfileCheck:
    deprecated_hits: list[str]
    modern_hits: list[str]

    @property
    def ok(self) -> bool:
        return not self.deprecated_hits and bool(self.modern_hits)
