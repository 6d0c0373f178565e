from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding
from .base import FindingNormalizer, NormalizerContext, load_json_lines
from .util import get_rel_path, to_int


class TruffleHogNormalizer(FindingNormalizer):
    def tool_name(self) -> str:
        return "trufflehog"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        out: list[Finding] = []
        for it in load_json_lines(artifact, "trufflehog"):
            # Extract file path from nested SourceMetadata
            source = (it.get("SourceMetadata") or {}).get("Data") or {}
            fs = source.get("Filesystem") or {}
            file_rel = get_rel_path(ctx.target_dir, str(fs.get("file") or ""))

            detector = it.get("DetectorName") or "Unknown"
            detector_type = it.get("DetectorType") or ""
            verified = bool(it.get("Verified"))

            status = "VERIFIED" if verified else "unverified"

            # Raw / RawV2 hold the secret itself and are never copied
            out.append(
                Finding(
                    tool="trufflehog",
                    type="SECRET",
                    severity="CRITICAL" if verified else "HIGH",
                    file=file_rel,
                    line=to_int(fs.get("line")),
                    message=f"Secret detected: {detector} ({status})",
                    rule_id=str(detector_type) if detector_type else detector,
                    extra={
                        "detector": detector,
                        "verified": verified,
                    },
                )
            )

        return out
