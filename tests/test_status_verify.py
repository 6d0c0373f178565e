import httpx
import pytest

from imagesec.core.config import settings
from imagesec.core.util import CmdResult
from imagesec.services.github_client import GitHubClient
from imagesec.services.status_service import StatusService
from imagesec.services.verify_service import VerifyService


def _docker(monkeypatch, module: str, available: set[str], runs: bool = True):
    def fake_run(cmd, cwd=None, timeout_sec=60):
        image = cmd[-2] if cmd[:2] == ["docker", "run"] else cmd[-1]
        if cmd[:2] == ["docker", "pull"]:
            return CmdResult(0 if image in available else 1, "", "")
        if cmd[:2] == ["docker", "run"]:
            return CmdResult(0, "PlatformIO Core, version 6.1.13\n", "") if runs else CmdResult(125, "", "boom")
        raise AssertionError(cmd)

    monkeypatch.setattr(f"imagesec.services.{module}.run_cmd", fake_run)


def _github(runs: list[dict] | None = None, status_code: int = 200) -> GitHubClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"workflow_runs": runs or []})

    return GitHubClient(http=httpx.Client(transport=httpx.MockTransport(handler)))


@pytest.mark.parametrize(
    "available, runs, verdict, ok",
    [
        ({"builder", "dev"}, True, "READY", True),
        ({"builder", "dev"}, False, "AVAILABLE", True),
        ({"dev"}, True, "PARTIAL", False),
        (set(), True, "NOT_READY", False),
    ],
)
def test_status_verdicts(monkeypatch, available, runs, verdict, ok):
    images = {"builder": settings.builder_image, "dev": settings.dev_image}
    _docker(monkeypatch, "status_service", {images[n] for n in available}, runs=runs)

    report = StatusService().check()
    assert report.verdict == verdict
    assert report.ok is ok


def test_status_tests_dev_when_builder_missing(monkeypatch):
    _docker(monkeypatch, "status_service", {settings.dev_image})
    report = StatusService().check()
    assert report.dev.runs is True
    assert report.dev.version == "PlatformIO Core, version 6.1.13"
    assert report.builder.runs is None


def test_verify_all_good(monkeypatch):
    _docker(monkeypatch, "verify_service", {settings.builder_image, settings.dev_image})
    report = VerifyService(github=_github([{"status": "completed"}])).check()
    assert report.workflow_status == "ok"
    assert report.ok


def test_verify_blocks_on_running_workflow(monkeypatch):
    _docker(monkeypatch, "verify_service", {settings.builder_image, settings.dev_image})
    report = VerifyService(github=_github([{"status": "in_progress"}])).check()
    assert report.images_ok
    assert not report.ok


def test_verify_unknown_workflow_status_does_not_block(monkeypatch):
    _docker(monkeypatch, "verify_service", {settings.builder_image, settings.dev_image})
    report = VerifyService(github=_github(status_code=500)).check()
    assert report.workflow_status == "unknown"
    assert report.ok


def test_verify_fails_when_image_does_not_run(monkeypatch):
    _docker(monkeypatch, "verify_service", {settings.builder_image, settings.dev_image}, runs=False)
    report = VerifyService(github=_github()).check()
    assert not report.ok
