from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from imagesec.core.config import settings
from imagesec.core.util import image_label, run_cmd
from imagesec.domain.models import RawToolResult
from imagesec.normalizers.failure_policy import classify

logger = logging.getLogger(__name__)


@dataclass
class ScanTarget:
    path: Path
    images: list[str] = field(default_factory=list)
    dockerfiles: list[str] = field(default_factory=list)
    severity_threshold: str = "MEDIUM,HIGH,CRITICAL"

    def has_file(self, name: str) -> bool:
        return (self.path / name).is_file()


@dataclass
class Invocation:
    label: str
    cmd: list[str]
    # relative to the results root
    artifact: str
    # tool prints its report to stdout instead of writing the file itself
    capture_stdout: bool = False


class SecurityScanner(ABC):
    binary: str = ""
    category: str = "basic"
    advanced: bool = False

    @abstractmethod
    def tool_name(self) -> str: ...

    @abstractmethod
    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]: ...

    def scan(self, target: ScanTarget, results_root: Path) -> list[RawToolResult]:
        tool = self.tool_name()
        plan = self.invocations(target, results_root)
        if not plan:
            logger.info("No applicable inputs for %s, skipping", tool, extra={"tool": tool})
            return []

        if shutil.which(self.binary) is None:
            logger.warning("%s not installed, skipping", self.binary, extra={"tool": tool})
            return [
                RawToolResult(
                    tool=tool,
                    label=inv.label,
                    category=self.category,
                    exit_code=127,
                    stderr=f"{self.binary} not installed",
                    artifact=inv.artifact,
                    status="skipped",
                )
                for inv in plan
            ]

        out: list[RawToolResult] = []
        for inv in plan:
            artifact = results_root / inv.artifact
            artifact.parent.mkdir(parents=True, exist_ok=True)
            # a leftover output from an earlier run must not count for this one
            artifact.unlink(missing_ok=True)

            logger.info("Running %s", inv.label, extra={"tool": tool})
            r = run_cmd(inv.cmd, cwd=target.path, timeout_sec=settings.TOOL_TIMEOUT)

            if inv.capture_stdout and r.stdout:
                artifact.write_text(r.stdout, encoding="utf-8")

            status = classify(tool, r.exit_code, artifact, timed_out=r.timed_out)
            if status == "failed":
                logger.warning(
                    "%s failed (exit_code=%s)", inv.label, r.exit_code, extra={"tool": tool}
                )

            out.append(
                RawToolResult(
                    tool=tool,
                    label=inv.label,
                    category=self.category,
                    exit_code=r.exit_code,
                    stdout=r.stdout,
                    stderr=r.stderr,
                    artifact=inv.artifact,
                    status=status,
                    timed_out=r.timed_out,
                )
            )
        return out


class ImageScanner(SecurityScanner):
    """One invocation per configured container image."""

    category = "container-security"

    @abstractmethod
    def image_invocation(self, image: str, label: str, results_root: Path) -> Invocation: ...

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        return [self.image_invocation(img, image_label(img), results_root) for img in target.images]


def output_arg(results_root: Path, artifact: str) -> str:
    # tools run with cwd=target, so hand them an absolute path
    return str((results_root / artifact).resolve())
