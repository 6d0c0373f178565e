import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


@dataclass
class CmdResult:
    exit_code: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


def run_cmd(cmd: Sequence[str], cwd: Path | None = None, timeout_sec: int = 60) -> CmdResult:
    """Run a command, never raising for timeouts or a missing binary.

    A timeout yields exit code 124 (as coreutils ``timeout`` does) and a
    missing executable yields 127.
    """
    logger.debug("Running command: %s", " ".join(cmd))
    try:
        p = subprocess.run(
            list(cmd),
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout_sec,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Command timed out after %ss: %s", timeout_sec, cmd[0])
        return CmdResult(124, "", f"timed out after {timeout_sec} seconds", timed_out=True)
    except FileNotFoundError as e:
        return CmdResult(127, "", str(e))
    return CmdResult(p.returncode, p.stdout or "", p.stderr or "")


def image_label(image: str) -> str:
    """``ghcr.io/owner/repo/builder:latest`` -> ``builder-latest``."""
    return image.rsplit("/", 1)[-1].replace(":", "-").replace("@", "-")
