"""Daily build audit: decide whether the development image needs a rebuild.

Compares the published production image with the latest PlatformIO release
and the age of the Python base image. The decision is data (``AuditResult``),
exported as ``KEY=value`` lines; it is never encoded in an exit status.
"""

from __future__ import annotations

import logging
import re
import shutil
from datetime import date, datetime, timezone
from pathlib import Path

import httpx

from imagesec.core.config import settings
from imagesec.core.errors import PrerequisiteError
from imagesec.core.util import run_cmd
from imagesec.domain.models import AuditResult, PackageFacts

logger = logging.getLogger(__name__)

PIO_VERSION_RE = re.compile(r"version (\d+\.\d+\.\d+)")
SEMVER_RE = re.compile(r"\d+\.\d+\.\d+")

REFRESH_DAYS = 7
STALE_PRODUCTION_DAYS = 30


def ensure_docker() -> None:
    if shutil.which("docker") is None:
        raise PrerequisiteError("docker is required but not installed")


def _created_date(value: str) -> date | None:
    # "2024-05-01T12:34:56.123456789Z" -> 2024-05-01
    try:
        return date.fromisoformat(value.strip().split("T", 1)[0])
    except ValueError:
        return None


class AuditService:
    def __init__(self, http: httpx.Client | None = None):
        self._http = http

    # ---------- fact collection ----------

    def collect_production_facts(self, image: str | None = None) -> PackageFacts:
        image = image or settings.builder_image
        facts = PackageFacts()

        if not run_cmd(["docker", "pull", image], timeout_sec=settings.TOOL_TIMEOUT).ok:
            logger.warning("Cannot pull production image %s", image)
            return facts

        r = run_cmd(["docker", "run", "--rm", image, "--version"], timeout_sec=60)
        m = PIO_VERSION_RE.search(r.stdout) if r.ok else None
        facts.prod_pio_version = m.group(1) if m else None

        r = run_cmd(["docker", "run", "--rm", "--entrypoint", "python", image, "--version"], timeout_sec=60)
        # python 2 printed its version to stderr
        m = SEMVER_RE.search(r.stdout or r.stderr) if r.ok else None
        facts.prod_python_version = m.group(0) if m else None

        r = run_cmd(["docker", "inspect", image, "--format", "{{.Created}}"], timeout_sec=30)
        facts.prod_created_date = _created_date(r.stdout) if r.ok else None
        return facts

    def latest_platformio_version(self) -> str:
        url = f"{settings.PYPI_URL.rstrip('/')}/platformio/json"
        try:
            if self._http is not None:
                resp = self._http.get(url)
            else:
                with httpx.Client(timeout=30.0) as client:
                    resp = client.get(url)
            resp.raise_for_status()
            return resp.json()["info"]["version"]
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning("PyPI lookup failed (%s), using pinned PlatformIO version", e)
            return settings.PINNED_PLATFORMIO_VERSION

    def base_image_age_days(self, image: str | None = None, today: date | None = None) -> int | None:
        image = image or settings.BASE_IMAGE
        today = today or datetime.now(timezone.utc).date()

        if not run_cmd(["docker", "pull", image], timeout_sec=settings.TOOL_TIMEOUT).ok:
            logger.warning("Cannot pull base image %s", image)
            return None
        r = run_cmd(["docker", "inspect", image, "--format", "{{.Created}}"], timeout_sec=30)
        created = _created_date(r.stdout) if r.ok else None
        if created is None:
            return None
        return (today - created).days

    def gather(self, today: date | None = None) -> PackageFacts:
        facts = self.collect_production_facts()
        facts.latest_pio_version = self.latest_platformio_version()
        facts.base_image_age_days = self.base_image_age_days(today=today)
        return facts

    # ---------- decision ----------

    @staticmethod
    def analyze_changes(facts: PackageFacts, today: date) -> AuditResult:
        changes = False
        build = False
        parts: list[str] = []
        notes: list[str] = []

        prod, latest = facts.prod_pio_version, facts.latest_pio_version
        if prod and latest and prod != latest:
            # informational only: PlatformIO is pinned
            changes = True
            parts.append(f"PlatformIO: {prod} → {latest}")
            notes.append(f"PlatformIO is pinned to {settings.PINNED_PLATFORMIO_VERSION}")

        base_age = facts.base_image_age_days
        if base_age is not None and base_age > REFRESH_DAYS:
            changes = build = True
            parts.append(f"Base image: {base_age} days old")

        prod_age = (today - facts.prod_created_date).days if facts.prod_created_date else None
        if prod_age is not None:
            if prod_age > STALE_PRODUCTION_DAYS:
                changes = build = True
                parts.append(f"Production age: {prod_age} days")
            elif prod_age > REFRESH_DAYS:
                parts.append(f"Production age: {prod_age} days")

        if facts.security_updates_available:
            changes = build = True
            parts.append("Security updates available")

        if today.weekday() == 6 or (base_age is not None and base_age > REFRESH_DAYS):
            build = True
            parts.append("Weekly refresh")

        if changes or build:
            return AuditResult(True, True, "; ".join(parts), notes=notes, prod_age_days=prod_age)
        return AuditResult(False, False, "No changes detected", notes=notes, prod_age_days=prod_age)

    # ---------- outputs ----------

    @staticmethod
    def render_audit_report(result: AuditResult, facts: PackageFacts, generated_at: str | None = None) -> str:
        generated_at = generated_at or datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        prod = facts.prod_pio_version or "unknown"
        latest = facts.latest_pio_version or "unknown"
        base_age = facts.base_image_age_days
        base_recent = base_age is not None and base_age <= REFRESH_DAYS
        prod_recent = result.prod_age_days is not None and result.prod_age_days <= REFRESH_DAYS
        base_age_text = str(base_age) if base_age is not None else "unknown"
        base_status = "✅ Recent" if base_recent else f"⚠️ {base_age_text} days old"
        base_advice = "Update recommended" if base_age is not None and base_age > REFRESH_DAYS else "Current"

        lines = [
            "# Daily Build Audit Report",
            "",
            f"**Generated:** {generated_at}  ",
            f"**Repository:** {settings.GITHUB_REPOSITORY}  ",
            f"**Production Image:** {settings.builder_image}  ",
            "",
            "## Summary",
            "",
            f"**Changes Detected:** {str(result.changes_detected).lower()}  ",
            f"**Build Recommended:** {str(result.build_recommended).lower()}  ",
            f"**Change Summary:** {result.change_summary}  ",
            "",
            "## Version Comparison",
            "",
            "| Component | Production | Latest Available | Status |",
            "|-----------|------------|------------------|--------|",
            f"| PlatformIO | {prod} | {latest} | {'✅ Current' if prod == latest else '⚠️ Different (pinned)'} |",
            f"| Python Base | {settings.BASE_IMAGE} | {settings.BASE_IMAGE} | {base_status} |",
            f"| Python Version | {facts.prod_python_version or 'unknown'} | - | - |",
            f"| Production Image Age | {facts.prod_created_date or 'unknown'} | - | "
            f"{'✅ Recent' if prod_recent else '⚠️ Consider refresh'} |",
            "",
            "## Analysis",
            "",
            "### PlatformIO",
            f"- **Production Version:** {prod}",
            f"- **Latest Available:** {latest}",
            f"- **Note:** PlatformIO is pinned to version {settings.PINNED_PLATFORMIO_VERSION} for stability",
            "",
            "### Base Image",
            f"- **Image:** {settings.BASE_IMAGE}",
            f"- **Age:** {base_age_text} days",
            f"- **Recommendation:** {base_advice}",
            "",
            "### Build Decision",
        ]

        if result.build_recommended:
            lines += ["**✅ PROCEED WITH BUILD**", "", "Reasons for build:"]
            lines += [f"- {p.strip()}" for p in result.change_summary.split(";")]
            steps = [
                "Proceed with development image build",
                "Tag with date-specific version",
                "Update development image tags",
                "Generate build summary",
            ]
        else:
            lines += ["**⏭️ SKIP BUILD**", "", "No significant changes detected. Daily build can be skipped."]
            steps = ["Skip build process", "Monitor for future changes", "Next audit in 24 hours"]

        lines += ["", "## Next Steps", ""]
        lines += [f"{i}. {s}" for i, s in enumerate(steps, start=1)]
        lines += ["", "---", "*This report is automatically generated by the daily build audit process.*", ""]
        return "\n".join(lines)

    @staticmethod
    def write_github_output(result: AuditResult, path: Path) -> None:
        with path.open("a", encoding="utf-8") as fh:
            for key, value in result.as_env().items():
                fh.write(f"AUDIT_{key}={value}\n")
