from __future__ import annotations

from pathlib import Path, PurePosixPath

from .base import Invocation, ScanTarget, SecurityScanner, output_arg


class HadolintScanner(SecurityScanner):
    binary = "hadolint"

    def tool_name(self) -> str:
        return "hadolint"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        out = []
        for dockerfile in target.dockerfiles:
            if not (target.path / dockerfile).is_file():
                continue
            # production/Dockerfile -> hadolint-production.json
            name = PurePosixPath(dockerfile).parent.name or "root"
            out.append(
                Invocation(
                    label=f"hadolint {dockerfile}",
                    cmd=["hadolint", dockerfile, "--format", "json"],
                    artifact=f"basic/hadolint-{name}.json",
                    capture_stdout=True,
                )
            )
        return out


class BanditScanner(SecurityScanner):
    binary = "bandit"
    category = "static-analysis"
    advanced = True

    def tool_name(self) -> str:
        return "bandit"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        artifact = "static-analysis/bandit-scan.json"
        # bandit writes JSON to file; stdout is progress only
        return [
            Invocation(
                label="bandit",
                cmd=["bandit", "-r", ".", "-f", "json", "-o", output_arg(results_root, artifact)],
                artifact=artifact,
            )
        ]


class SemgrepScanner(SecurityScanner):
    binary = "semgrep"
    category = "static-analysis"
    advanced = True

    def tool_name(self) -> str:
        return "semgrep"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        artifact = "static-analysis/semgrep-scan.json"
        return [
            Invocation(
                label="semgrep",
                cmd=["semgrep", "--config=auto", "--json", f"--output={output_arg(results_root, artifact)}", "."],
                artifact=artifact,
            )
        ]
