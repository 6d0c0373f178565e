from __future__ import annotations

from pathlib import Path

from .base import Invocation, ScanTarget, SecurityScanner, output_arg


class GitleaksScanner(SecurityScanner):
    binary = "gitleaks"
    category = "secrets"
    advanced = True

    def tool_name(self) -> str:
        return "gitleaks"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        artifact = "secrets/gitleaks-scan.json"
        return [
            Invocation(
                label="gitleaks detect",
                cmd=[
                    "gitleaks",
                    "detect",
                    "--source",
                    ".",
                    "--report-format",
                    "json",
                    "--report-path",
                    output_arg(results_root, artifact),
                ],
                artifact=artifact,
            )
        ]


class TruffleHogScanner(SecurityScanner):
    binary = "trufflehog"
    category = "secrets"
    advanced = True

    def tool_name(self) -> str:
        return "trufflehog"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        # TruffleHog prints one JSON object per line to stdout with --json
        return [
            Invocation(
                label="trufflehog filesystem",
                cmd=["trufflehog", "filesystem", ".", "--json", "--no-update"],
                artifact="secrets/trufflehog-scan.json",
                capture_stdout=True,
            )
        ]
