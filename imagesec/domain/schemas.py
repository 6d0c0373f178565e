from pydantic import BaseModel, Field

from imagesec.core.config import settings


def default_images() -> list[str]:
    return [settings.builder_image, settings.dev_image]


class ScanConfig(BaseModel):
    target_path: str = "."

    images: list[str] = Field(default_factory=default_images)
    dockerfiles: list[str] = Field(default_factory=lambda: list(settings.DOCKERFILES))

    advanced: bool = Field(default_factory=lambda: settings.ADVANCED_MODE)

    # None runs every applicable scanner
    tools: list[str] | None = None

    severity_threshold: str = Field(default_factory=lambda: settings.SEVERITY_THRESHOLD)
