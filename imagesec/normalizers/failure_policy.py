from __future__ import annotations

from pathlib import Path

# Tools that exit non-zero to say "findings present"
FINDINGS_EXIT_CODES: dict[str, tuple[int, ...]] = {
    "bandit": (1,),
    "gitleaks": (1,),
    "checkov": (1,),
    "hadolint": (1,),
    "pip-audit": (1,),
    "osv-scanner": (1,),
    "npm-audit": (1,),
    "semgrep": (1,),
    "safety": (64,),
    # clamscan: infected files found
    "clamav": (1,),
}


def _has_artifact(artifact_path: Path | None) -> bool:
    return bool(artifact_path and artifact_path.exists() and artifact_path.stat().st_size > 0)


def is_real_failure(tool: str, exit_code: int, artifact_path: Path | None) -> bool:
    tool = (tool or "").lower()
    if exit_code == 0:
        return False

    # A findings exit code only counts as success if the report was written
    if exit_code in FINDINGS_EXIT_CODES.get(tool, ()):
        return not _has_artifact(artifact_path)

    return True


def classify(tool: str, exit_code: int, artifact_path: Path | None, timed_out: bool = False) -> str:
    """Scan-index status for one invocation: success, warning or failed."""
    if timed_out:
        return "failed"
    if exit_code == 0:
        return "success"
    if is_real_failure(tool, exit_code, artifact_path):
        return "failed"
    return "warning"
