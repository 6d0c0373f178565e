from __future__ import annotations

from pathlib import Path

from .base import Invocation, ScanTarget, SecurityScanner


class CheckovScanner(SecurityScanner):
    binary = "checkov"
    category = "compliance"
    advanced = True

    def tool_name(self) -> str:
        return "checkov"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        return [
            Invocation(
                label="checkov dockerfile",
                cmd=["checkov", "-d", ".", "--framework", "dockerfile", "--output", "json", "--quiet"],
                artifact="compliance/checkov-scan.json",
                capture_stdout=True,
            )
        ]
