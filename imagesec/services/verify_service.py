from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from imagesec.core.config import settings
from imagesec.core.util import run_cmd
from imagesec.domain.models import ImageCheck
from imagesec.services.github_client import GitHubClient

logger = logging.getLogger(__name__)

PULL_TIMEOUT = 30
RUN_TIMEOUT = 15


@dataclass
class VerifyReport:
    workflow_status: str
    images: list[ImageCheck] = field(default_factory=list)

    @property
    def images_ok(self) -> bool:
        return all(i.pullable and i.runs for i in self.images)

    @property
    def ok(self) -> bool:
        # "unknown" means the API was unreachable; that alone does not block
        return self.images_ok and self.workflow_status != "in_progress"


class VerifyService:
    def __init__(self, github: GitHubClient | None = None):
        self.github = github or GitHubClient()

    def workflow_status(self, repository: str | None = None) -> str:
        repository = repository or settings.GITHUB_REPOSITORY
        try:
            runs = self.github.workflow_runs(repository)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Could not query workflow runs: %s", e)
            return "unknown"
        in_progress = sum(1 for r in runs if r.get("status") == "in_progress")
        if in_progress:
            logger.warning("Found %d workflow run(s) currently in progress", in_progress)
            return "in_progress"
        return "ok"

    @staticmethod
    def verify_image(image: str) -> ImageCheck:
        check = ImageCheck(image=image, pullable=run_cmd(["docker", "pull", image], timeout_sec=PULL_TIMEOUT).ok)
        if check.pullable:
            r = run_cmd(["docker", "run", "--rm", image, "--version"], timeout_sec=RUN_TIMEOUT)
            check.runs = r.ok
            lines = (r.stdout or "").strip().splitlines()
            check.version = lines[0] if r.ok and lines else None
        return check

    def check(self, images: list[str] | None = None) -> VerifyReport:
        images = images or [settings.builder_image, settings.dev_image]
        report = VerifyReport(workflow_status=self.workflow_status())
        report.images = [self.verify_image(img) for img in images]
        return report
