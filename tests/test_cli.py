import json
from datetime import date, timedelta

import pytest

from imagesec.cli import main
from imagesec.core.config import settings
from imagesec.core.util import CmdResult


@pytest.fixture
def docker_installed(monkeypatch):
    monkeypatch.setattr("imagesec.services.audit_service.shutil.which", lambda name: f"/usr/bin/{name}")


def test_usage_error_exits_2():
    with pytest.raises(SystemExit) as e:
        main(["no-such-command"])
    assert e.value.code == 2


def test_invalid_fail_on_is_usage_error():
    with pytest.raises(SystemExit) as e:
        main(["report", "--fail-on", "SEVERE"])
    assert e.value.code == 2


def test_normalize_missing_input(tmp_path, capsys):
    assert main(["normalize", "trivy", str(tmp_path / "nope.json")]) == 1
    assert "not found" in capsys.readouterr().err


def test_normalize_writes_sarif(tmp_path, write_json, trivy_report):
    src = write_json(tmp_path / "trivy.json", trivy_report)
    out = tmp_path / "trivy.sarif"
    assert main(["normalize", "trivy", str(src), "-o", str(out)]) == 0
    assert len(json.loads(out.read_text())["runs"][0]["results"]) == 2


def test_sarif_without_inputs_exits_1(tmp_path):
    results = tmp_path / "results"
    assert main(["sarif", "--results-dir", str(results)]) == 1
    assert not (results / "sarif" / "unified-security-report.sarif").exists()
    assert (results / "sarif" / "reports" / "sarif-summary.txt").exists()


def test_sarif_with_inputs(tmp_path, write_json, trivy_report):
    results = tmp_path / "results"
    write_json(results / "basic" / "trivy-filesystem.json", trivy_report)
    assert main(["sarif", "--results-dir", str(results)]) == 0
    assert len(json.loads((results / "sarif" / "unified-security-report.sarif").read_text())["runs"]) == 1


def test_report_fail_on_gate(tmp_path, write_json, trivy_report, capsys):
    results = tmp_path / "results"
    write_json(results / "basic" / "trivy-filesystem.json", trivy_report)
    main(["sarif", "--results-dir", str(results)])

    assert main(["report", "--results-dir", str(results), "--fail-on", "CRITICAL"]) == 1
    assert "Risk level: HIGH RISK" in capsys.readouterr().out


def test_scan_exit_code_follows_fail_on(tmp_path, monkeypatch, trivy_report):
    monkeypatch.setattr("imagesec.scanners.base.shutil.which", lambda name: f"/usr/bin/{name}")

    def fake_run(cmd, cwd=None, timeout_sec=60):
        out = cmd[cmd.index("--output") + 1]
        with open(out, "w", encoding="utf-8") as fh:
            json.dump(trivy_report, fh)
        return CmdResult(0, "", "")

    monkeypatch.setattr("imagesec.scanners.base.run_cmd", fake_run)
    base = ["scan", "--target", str(tmp_path), "--tools", "trivy", "--results-dir", str(tmp_path / "r")]

    assert main(base + ["--fail-on", "HIGH"]) == 1


def test_scan_with_nothing_found_passes(tmp_path, monkeypatch):
    monkeypatch.setattr("imagesec.scanners.base.shutil.which", lambda name: None)
    assert main(["scan", "--target", str(tmp_path), "--tools", "trivy", "--results-dir", str(tmp_path / "r")]) == 0


@pytest.mark.parametrize("count, code", [(0, 1), (1, 0), (2, 1)])
def test_validate_workflows_exit_code(tmp_path, count, code):
    d = tmp_path / "workflows"
    d.mkdir()
    for i in range(count):
        (d / f"wf{i}.yml").write_text(f"name: wf{i}\n")
    assert main(["validate-workflows", "--workflows-dir", str(d)]) == code


@pytest.mark.parametrize("available, code", [({"builder", "dev"}, 0), ({"builder"}, 1), (set(), 1)])
def test_status_exit_code(monkeypatch, docker_installed, available, code):
    images = {"builder": settings.builder_image, "dev": settings.dev_image}
    pullable = {images[n] for n in available}

    def fake_run(cmd, cwd=None, timeout_sec=60):
        if cmd[:2] == ["docker", "pull"]:
            return CmdResult(0 if cmd[-1] in pullable else 1, "", "")
        return CmdResult(0, "PlatformIO Core, version 6.1.13\n", "")

    monkeypatch.setattr("imagesec.services.status_service.run_cmd", fake_run)
    assert main(["status"]) == code


def test_status_requires_docker(monkeypatch, capsys):
    monkeypatch.setattr("imagesec.services.audit_service.shutil.which", lambda name: None)
    assert main(["status"]) == 1
    assert "docker is required" in capsys.readouterr().err


def test_audit_prints_decision_and_exports(tmp_path, monkeypatch, docker_installed, capsys):
    created = (date.today() - timedelta(days=40)).isoformat() + "T00:00:00Z"
    base_created = (date.today() - timedelta(days=3)).isoformat() + "T00:00:00Z"

    def fake_run(cmd, cwd=None, timeout_sec=60):
        if cmd[:2] == ["docker", "inspect"]:
            return CmdResult(0, created if cmd[2] == settings.builder_image else base_created, "")
        if "--entrypoint" in cmd:
            return CmdResult(0, "Python 3.11.9", "")
        return CmdResult(0, "PlatformIO Core, version 6.1.13", "")

    monkeypatch.setattr("imagesec.services.audit_service.run_cmd", fake_run)
    monkeypatch.setattr(
        "imagesec.services.audit_service.AuditService.latest_platformio_version", lambda self: "6.1.13"
    )
    gh_output = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(gh_output))
    report = tmp_path / "audit-report.md"

    assert main(["audit", "--output", str(report)]) == 0

    out = capsys.readouterr().out.splitlines()
    assert "BUILD_RECOMMENDED=true" in out
    assert any(line.startswith("CHANGE_SUMMARY=") and "Production age: 40 days" in line for line in out)
    assert "AUDIT_BUILD_RECOMMENDED=true" in gh_output.read_text()
    assert report.exists()


def test_check_dockerfiles(tmp_path):
    p = tmp_path / "production" / "Dockerfile"
    p.parent.mkdir()
    p.write_text("RUN pio pkg install -g -p espressif32\n")
    assert main(["check-dockerfiles", "--root", str(tmp_path)]) == 0

    p.write_text("RUN pio platform install espressif32\n")
    assert main(["check-dockerfiles", "--root", str(tmp_path)]) == 1


def test_keyboard_interrupt_exits_130(tmp_path, monkeypatch):
    def interrupted(root):
        raise KeyboardInterrupt

    monkeypatch.setattr("imagesec.cli.check_deprecated_commands", interrupted)
    assert main(["check-dockerfiles", "--root", str(tmp_path)]) == 130
