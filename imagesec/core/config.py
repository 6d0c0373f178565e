import os

from pydantic import BaseModel


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> list[str]:
    return [p.strip() for p in os.getenv(name, default).split(",") if p.strip()]


class Settings(BaseModel):
    VERSION: str = "2.1.0"

    # Target registry / images
    DOCKER_REPOSITORY: str = os.getenv("DOCKER_REPOSITORY", "ghcr.io/sparck75/alteriom-docker-images")
    BASE_IMAGE: str = os.getenv("BASE_IMAGE", "python:3.11-slim")
    PINNED_PLATFORMIO_VERSION: str = os.getenv("PINNED_PLATFORMIO_VERSION", "6.1.13")
    DOCKERFILES: list[str] = _env_list("DOCKERFILES", "production/Dockerfile,development/Dockerfile")

    # Scanning
    SCAN_RESULTS_DIR: str = os.getenv("SCAN_RESULTS_DIR", "comprehensive-security-results")
    ADVANCED_MODE: bool = _env_bool("ADVANCED_MODE")
    SEVERITY_THRESHOLD: str = os.getenv("SEVERITY_THRESHOLD", "MEDIUM,HIGH,CRITICAL")
    FAIL_ON_SEVERITY: str = os.getenv("FAIL_ON_SEVERITY", "HIGH")
    TOOL_TIMEOUT: int = int(os.getenv("TOOL_TIMEOUT", "600"))

    # HTTP API storage
    DATA_DIR: str = os.getenv("DATA_DIR", "data")

    # GitHub
    GITHUB_REPOSITORY: str = os.getenv("GITHUB_REPOSITORY", "sparck75/alteriom-docker-images")
    GITHUB_TOKEN: str | None = os.getenv("GITHUB_TOKEN")
    GITHUB_API_URL: str = os.getenv("GITHUB_API_URL", "https://api.github.com")
    WORKFLOWS_DIR: str = os.getenv("WORKFLOWS_DIR", ".github/workflows")

    # Package index used by the daily audit
    PYPI_URL: str = os.getenv("PYPI_URL", "https://pypi.org/pypi")

    @property
    def builder_image(self) -> str:
        return f"{self.DOCKER_REPOSITORY}/builder:latest"

    @property
    def dev_image(self) -> str:
        return f"{self.DOCKER_REPOSITORY}/dev:latest"


settings = Settings()
