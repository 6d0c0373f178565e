from fastapi import FastAPI

from imagesec.api.scan_routes import router as scan_router
from imagesec.core.config import settings
from imagesec.core.logging import setup_logging

setup_logging()

tags_metadata = [
    {
        "name": "scans",
        "description": "Run security scans against the Docker images and the repository, "
        "and fetch the unified SARIF and JSON reports they produce.",
    },
    {
        "name": "health",
        "description": "Liveness check used by container orchestration.",
    },
]

app = FastAPI(
    title="Docker Image Security Scanner",
    version=settings.VERSION,
    description="Scan, normalize to SARIF, aggregate and report on the PlatformIO builder images.",
    openapi_tags=tags_metadata,
)

app.include_router(scan_router)


@app.get("/health", tags=["health"], summary="Health check")
def health() -> dict[str, str]:
    """Return service status and version."""
    return {"status": "healthy", "version": settings.VERSION}
