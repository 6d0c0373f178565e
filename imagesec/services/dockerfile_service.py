from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import DockerfileCheck

# removed in PlatformIO 6; both fail at image build time
DEPRECATED_COMMANDS = ("pio platform install", "pio lib install")
MODERN_COMMAND = "pio pkg install"


def check_deprecated_commands(root: Path) -> DockerfileCheck:
    deprecated: list[str] = []
    modern: list[str] = []

    for df in sorted(root.rglob("Dockerfile")):
        if not df.is_file():
            continue
        rel = df.relative_to(root).as_posix()
        for n, line in enumerate(df.read_text(encoding="utf-8", errors="replace").splitlines(), start=1):
            if any(cmd in line for cmd in DEPRECATED_COMMANDS):
                deprecated.append(f"{rel}:{n}")
            if MODERN_COMMAND in line:
                modern.append(f"{rel}:{n}")

    return DockerfileCheck(deprecated_hits=deprecated, modern_hits=modern)
