from __future__ import annotations

from pathlib import Path

from .base import ImageScanner, Invocation, output_arg


class SyftScanner(ImageScanner):
    binary = "syft"
    category = "sbom"
    advanced = True

    def tool_name(self) -> str:
        return "syft"

    def image_invocation(self, image: str, label: str, results_root: Path) -> Invocation:
        artifact = f"sbom/syft-sbom-{label}.json"
        return Invocation(
            label=f"syft {image}",
            cmd=["syft", image, "-o", "cyclonedx-json", "--file", output_arg(results_root, artifact)],
            artifact=artifact,
        )
