from __future__ import annotations

from pathlib import Path

from imagesec.domain.models import Finding
from .base import FindingNormalizer, NormalizerContext, load_json

LEVELS = {"FATAL": "HIGH", "WARN": "MEDIUM", "INFO": "LOW"}


class DockleNormalizer(FindingNormalizer):
    def tool_name(self) -> str:
        return "dockle"

    def normalize(self, artifact: Path, ctx: NormalizerContext) -> list[Finding]:
        data = load_json(artifact, "dockle")
        if not isinstance(data, dict):
            return []

        # the image is not in the report; the artifact name carries its label
        image = artifact.stem.removeprefix("dockle-")

        out: list[Finding] = []
        for d in data.get("details") or []:
            level = str(d.get("level") or "").upper()
            if level not in LEVELS:
                # SKIP / PASS
                continue
            alerts = d.get("alerts") or []
            msg = d.get("title") or d.get("code") or "Dockle finding"
            if alerts:
                msg = f"{msg}: {'; '.join(str(a) for a in alerts[:3])}"
            out.append(
                Finding(
                    tool="dockle",
                    type="CONTAINER",
                    severity=LEVELS[level],
                    file=image,
                    line=None,
                    message=msg,
                    rule_id=d.get("code"),
                )
            )
        return out
