from pathlib import Path


def get_rel_path(target: Path, filename: str) -> str:
    """
    Convert a tool-reported filename to a target-relative posix path.

    Handles three cases:
    1. Absolute path inside the target  → strip target prefix
    2. Relative path with ./             → strip leading ./
    3. Fallback                          → return cleaned posix path
    """
    if not filename:
        return ""
    try:
        f = Path(filename)
        root = target.resolve()

        if f.is_absolute():
            return f.resolve().relative_to(root).as_posix()

        f_resolved = (target / f).resolve()
        if f_resolved.is_relative_to(root):
            return f_resolved.relative_to(root).as_posix()

        return _strip_dot(f.as_posix())
    except ValueError:
        # absolute path outside the target (e.g. a path inside a container image)
        return Path(filename).as_posix()


def _strip_dot(p: str) -> str:
    while p.startswith("./"):
        p = p[2:]
    return p


def to_int(value) -> int | None:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def cvss_to_severity(score, default: str = "MEDIUM") -> str:
    """CVSS v3 qualitative rating for a base score."""
    try:
        s = float(score)
    except (TypeError, ValueError):
        return default
    if s >= 9.0:
        return "CRITICAL"
    if s >= 7.0:
        return "HIGH"
    if s >= 4.0:
        return "MEDIUM"
    if s > 0:
        return "LOW"
    return "INFO"
