from __future__ import annotations

from pathlib import Path

from .base import Invocation, ScanTarget, SecurityScanner, output_arg


class TrivyScanner(SecurityScanner):
    binary = "trivy"

    def tool_name(self) -> str:
        return "trivy"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        out = []
        for mode, artifact in (("fs", "basic/trivy-filesystem.json"), ("config", "basic/trivy-config.json")):
            out.append(
                Invocation(
                    label=f"trivy {mode}",
                    cmd=[
                        "trivy",
                        mode,
                        "--format",
                        "json",
                        "--output",
                        output_arg(results_root, artifact),
                        "--severity",
                        target.severity_threshold,
                        ".",
                    ],
                    artifact=artifact,
                )
            )
        return out


class SafetyScanner(SecurityScanner):
    binary = "safety"

    def tool_name(self) -> str:
        return "safety"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        if not target.has_file("requirements.txt"):
            return []
        artifact = "basic/safety-scan.json"
        return [
            Invocation(
                label="safety scan",
                cmd=[
                    "safety",
                    "scan",
                    "--output",
                    "json",
                    "--save-json",
                    output_arg(results_root, artifact),
                    "--file",
                    "requirements.txt",
                ],
                artifact=artifact,
            )
        ]


class PipAuditScanner(SecurityScanner):
    binary = "pip-audit"

    def tool_name(self) -> str:
        return "pip-audit"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        if not target.has_file("requirements.txt"):
            return []
        artifact = "basic/pip-audit-scan.json"
        return [
            Invocation(
                label="pip-audit",
                cmd=[
                    "pip-audit",
                    "--requirement",
                    "requirements.txt",
                    "--format=json",
                    f"--output={output_arg(results_root, artifact)}",
                ],
                artifact=artifact,
            )
        ]


class OsvScanner(SecurityScanner):
    binary = "osv-scanner"

    def tool_name(self) -> str:
        return "osv-scanner"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        artifact = "basic/osv-scan.json"
        return [
            Invocation(
                label="osv-scanner",
                cmd=["osv-scanner", "--format", "json", "--output", output_arg(results_root, artifact), "."],
                artifact=artifact,
            )
        ]


class GrypeScanner(SecurityScanner):
    binary = "grype"

    def tool_name(self) -> str:
        return "grype"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        artifact = "basic/grype-scan.json"
        return [
            Invocation(
                label="grype filesystem",
                cmd=["grype", ".", "-o", "json", "--file", output_arg(results_root, artifact)],
                artifact=artifact,
            )
        ]


class NpmAuditScanner(SecurityScanner):
    binary = "npm"

    def tool_name(self) -> str:
        return "npm-audit"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        if not target.has_file("package.json"):
            return []
        return [
            Invocation(
                label="npm audit",
                cmd=["npm", "audit", "--json"],
                artifact="basic/npm-audit.json",
                capture_stdout=True,
            )
        ]
