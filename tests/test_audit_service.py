from datetime import date, timedelta

import httpx
import pytest

from imagesec.core.config import settings
from imagesec.core.errors import PrerequisiteError
from imagesec.core.util import CmdResult
from imagesec.domain.models import PackageFacts
from imagesec.services.audit_service import AuditService, ensure_docker

TODAY = date(2025, 3, 5)  # a Wednesday


def _pypi(version: str = "6.1.13") -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/pypi/platformio/json"
        return httpx.Response(200, json={"info": {"version": version}})

    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def docker(monkeypatch):
    """Fake docker CLI: production image 40 days old, base image 3 days old."""
    created = {
        settings.builder_image: (TODAY - timedelta(days=40)).isoformat() + "T08:15:00.123456789Z",
        settings.BASE_IMAGE: (TODAY - timedelta(days=3)).isoformat() + "T01:00:00Z",
    }

    def fake_run(cmd, cwd=None, timeout_sec=60):
        if cmd[:2] == ["docker", "pull"]:
            return CmdResult(0, "", "")
        if cmd[:2] == ["docker", "inspect"]:
            return CmdResult(0, created[cmd[2]] + "\n", "")
        if "--entrypoint" in cmd:
            return CmdResult(0, "Python 3.11.9\n", "")
        if cmd[:2] == ["docker", "run"]:
            return CmdResult(0, "PlatformIO Core, version 6.1.13\n", "")
        raise AssertionError(cmd)

    monkeypatch.setattr("imagesec.services.audit_service.run_cmd", fake_run)


def test_stale_production_image_recommends_build(docker):
    service = AuditService(http=_pypi())
    facts = service.gather(today=TODAY)

    assert facts.prod_pio_version == "6.1.13"
    assert facts.prod_python_version == "3.11.9"
    assert facts.base_image_age_days == 3

    result = service.analyze_changes(facts, TODAY)
    env = result.as_env()
    assert env["BUILD_RECOMMENDED"] == "true"
    assert env["CHANGES_DETECTED"] == "true"
    assert "Production age: 40 days" in env["CHANGE_SUMMARY"]


def test_fresh_images_skip_build():
    facts = PackageFacts(
        prod_pio_version="6.1.13",
        latest_pio_version="6.1.13",
        prod_created_date=TODAY - timedelta(days=2),
        base_image_age_days=1,
    )
    result = AuditService.analyze_changes(facts, TODAY)
    assert result.as_env() == {
        "CHANGES_DETECTED": "false",
        "BUILD_RECOMMENDED": "false",
        "CHANGE_SUMMARY": "No changes detected",
    }


def test_sunday_forces_weekly_refresh():
    facts = PackageFacts(prod_created_date=date(2025, 3, 8), base_image_age_days=1)
    result = AuditService.analyze_changes(facts, date(2025, 3, 9))
    assert result.build_recommended
    assert "Weekly refresh" in result.change_summary


def test_old_base_image_triggers_build():
    facts = PackageFacts(base_image_age_days=12)
    result = AuditService.analyze_changes(facts, TODAY)
    assert result.build_recommended
    assert "Base image: 12 days old" in result.change_summary


def test_platformio_difference_is_informational_only():
    facts = PackageFacts(prod_pio_version="6.1.13", latest_pio_version="6.1.16", base_image_age_days=1)
    result = AuditService.analyze_changes(facts, TODAY)
    assert result.changes_detected
    assert "PlatformIO: 6.1.13 → 6.1.16" in result.change_summary


def test_pypi_failure_falls_back_to_pinned_version():
    def handler(request):
        return httpx.Response(503)

    service = AuditService(http=httpx.Client(transport=httpx.MockTransport(handler)))
    assert service.latest_platformio_version() == settings.PINNED_PLATFORMIO_VERSION


def test_report_and_github_output(tmp_path, docker):
    service = AuditService(http=_pypi())
    facts = service.gather(today=TODAY)
    result = service.analyze_changes(facts, TODAY)

    report = service.render_audit_report(result, facts, generated_at="2025-03-05 06:00:00 UTC")
    assert "## Version Comparison" in report
    assert "PROCEED WITH BUILD" in report
    assert "- Production age: 40 days" in report

    out = tmp_path / "github_output"
    service.write_github_output(result, out)
    lines = out.read_text().splitlines()
    assert "AUDIT_BUILD_RECOMMENDED=true" in lines
    assert any(line.startswith("AUDIT_CHANGE_SUMMARY=") for line in lines)


def test_ensure_docker(monkeypatch):
    monkeypatch.setattr("imagesec.services.audit_service.shutil.which", lambda name: None)
    with pytest.raises(PrerequisiteError):
        ensure_docker()
