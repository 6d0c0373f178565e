from __future__ import annotations

from pathlib import Path

from .base import Invocation, ScanTarget, SecurityScanner, output_arg


class ClamAVScanner(SecurityScanner):
    binary = "clamscan"
    category = "malware"
    advanced = True

    def tool_name(self) -> str:
        return "clamav"

    def invocations(self, target: ScanTarget, results_root: Path) -> list[Invocation]:
        artifact = "malware/clamav-scan.txt"
        return [
            Invocation(
                label="clamscan",
                cmd=["clamscan", "-r", "-i", ".", f"--log={output_arg(results_root, artifact)}"],
                artifact=artifact,
            )
        ]
