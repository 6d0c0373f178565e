from __future__ import annotations

from pathlib import Path

from .base import ImageScanner, Invocation, output_arg


class TrivyImageScanner(ImageScanner):
    binary = "trivy"

    def tool_name(self) -> str:
        return "trivy-image"

    def image_invocation(self, image: str, label: str, results_root: Path) -> Invocation:
        artifact = f"container-security/trivy-image-{label}.json"
        return Invocation(
            label=f"trivy image {image}",
            cmd=["trivy", "image", "--format", "json", "--output", output_arg(results_root, artifact), image],
            artifact=artifact,
        )


class DockleScanner(ImageScanner):
    binary = "dockle"

    def tool_name(self) -> str:
        return "dockle"

    def image_invocation(self, image: str, label: str, results_root: Path) -> Invocation:
        artifact = f"container-security/dockle-{label}.json"
        return Invocation(
            label=f"dockle {image}",
            cmd=["dockle", "--format", "json", "--output", output_arg(results_root, artifact), image],
            artifact=artifact,
        )


class GrypeContainerScanner(ImageScanner):
    binary = "grype"

    def tool_name(self) -> str:
        return "grype-container"

    def image_invocation(self, image: str, label: str, results_root: Path) -> Invocation:
        artifact = f"container-security/grype-container-{label}.json"
        return Invocation(
            label=f"grype {image}",
            cmd=["grype", image, "-o", "json", "--file", output_arg(results_root, artifact)],
            artifact=artifact,
        )


class CosignScanner(ImageScanner):
    binary = "cosign"

    def tool_name(self) -> str:
        return "cosign"

    def image_invocation(self, image: str, label: str, results_root: Path) -> Invocation:
        # unsigned images exit non-zero; the verdict is kept as text
        return Invocation(
            label=f"cosign verify {image}",
            cmd=["cosign", "verify", image],
            artifact=f"container-security/cosign-verify-{label}.txt",
            capture_stdout=True,
        )


class DockerHistoryScanner(ImageScanner):
    binary = "docker"

    def tool_name(self) -> str:
        return "docker-history"

    def image_invocation(self, image: str, label: str, results_root: Path) -> Invocation:
        return Invocation(
            label=f"docker history {image}",
            cmd=["docker", "history", "--no-trunc", "--format", "json", image],
            artifact=f"container-security/layers-{label}.json",
            capture_stdout=True,
        )
