from __future__ import annotations

import logging
from pathlib import Path

import httpx
import yaml

from imagesec.core.config import settings
from imagesec.domain.models import WorkflowValidation
from imagesec.services.github_client import GitHubClient

logger = logging.getLogger(__name__)

# dynamic workflow GitHub adds for Copilot; not a build workflow
IGNORED_REMOTE_WORKFLOWS = {"Copilot"}


class WorkflowService:
    """Guards against duplicate build workflows (each one triggers a full image build)."""

    def __init__(self, github: GitHubClient | None = None):
        self.github = github or GitHubClient()

    @staticmethod
    def validate_local(workflows_dir: Path | None = None) -> WorkflowValidation:
        workflows_dir = workflows_dir or Path(settings.WORKFLOWS_DIR)
        files: list[Path] = []
        if workflows_dir.is_dir():
            files = sorted(p for p in workflows_dir.rglob("*") if p.is_file() and p.suffix in (".yml", ".yaml"))

        names: dict[str, str | None] = {}
        invalid: list[str] = []
        for p in files:
            rel = p.relative_to(workflows_dir).as_posix()
            try:
                doc = yaml.safe_load(p.read_text(encoding="utf-8"))
            except yaml.YAMLError as e:
                logger.warning("Invalid workflow YAML %s: %s", rel, e)
                invalid.append(rel)
                names[rel] = None
                continue
            names[rel] = doc.get("name") if isinstance(doc, dict) else None

        return WorkflowValidation(
            files=[p.relative_to(workflows_dir).as_posix() for p in files],
            names=names,
            invalid=invalid,
            local_status="PASS" if len(files) == 1 else "FAIL",
        )

    def validate_remote(self, result: WorkflowValidation, repository: str | None = None) -> WorkflowValidation:
        repository = repository or settings.GITHUB_REPOSITORY
        try:
            workflows = self.github.workflows(repository)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Could not fetch GitHub workflows: %s", e)
            result.remote_status = "UNKNOWN"
            return result

        active = [w.get("name") or "" for w in workflows if w.get("state") == "active"]
        build = [n for n in active if n and n not in IGNORED_REMOTE_WORKFLOWS]
        result.remote_workflows = build

        if not active:
            result.remote_status = "UNKNOWN"
        elif len(build) == 1:
            result.remote_status = "PASS"
        else:
            result.remote_status = "FAIL"
        return result

    def validate(self, workflows_dir: Path | None = None, check_remote: bool = False) -> WorkflowValidation:
        result = self.validate_local(workflows_dir)
        if check_remote:
            self.validate_remote(result)
        return result
