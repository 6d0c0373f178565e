from pathlib import Path

from imagesec.normalizers.bandit_normalizer import BanditNormalizer
from imagesec.normalizers.base import NormalizerContext
from imagesec.normalizers.checkov_normalizer import CheckovNormalizer
from imagesec.normalizers.dockle_normalizer import DockleNormalizer
from imagesec.normalizers.hadolint_normalizer import HadolintNormalizer
from imagesec.normalizers.semgrep_normalizer import SemgrepNormalizer


def test_bandit_normalizer_extracts_findings(tmp_path: Path, write_json):
    src = tmp_path / "scripts" / "build.py"
    src.parent.mkdir()
    src.write_text("import subprocess\nsubprocess.call('ls', shell=True)\n", encoding="utf-8")

    report = {
        "results": [
            {
                "filename": str(src),
                "issue_severity": "HIGH",
                "issue_confidence": "high",
                "issue_text": "subprocess call with shell=True identified, security issue.",
                "issue_cwe": {"id": 78},
                "test_id": "B602",
                "line_number": 2,
            }
        ]
    }
    p = write_json(tmp_path / "results" / "bandit-scan.json", report)
    (f,) = BanditNormalizer().normalize(p, NormalizerContext(target_dir=tmp_path))

    assert f.tool == "bandit"
    assert f.type == "CODE"
    assert f.severity == "HIGH"
    assert f.file == "scripts/build.py"
    assert f.line == 2
    assert f.rule_id == "B602"
    assert f.extra == {"confidence": "HIGH", "cwe": "CWE-78"}


def test_semgrep_cwe_is_shortened(tmp_path, write_json):
    report = {
        "results": [
            {
                "check_id": "python.lang.security.audit.eval-detected",
                "path": "tools/x.py",
                "start": {"line": 4},
                "extra": {
                    "severity": "WARNING",
                    "message": "Detected eval",
                    "metadata": {"cwe": ["CWE-95: Improper Neutralization of Directives"]},
                },
            }
        ]
    }
    p = write_json(tmp_path / "semgrep-scan.json", report)
    (f,) = SemgrepNormalizer().normalize(p, NormalizerContext(target_dir=tmp_path))
    assert f.severity == "MEDIUM"
    assert f.extra["cwe"] == "CWE-95"
    assert f.line == 4


def test_hadolint_levels(tmp_path, write_json):
    report = [
        {"code": "DL3008", "level": "warning", "message": "Pin versions in apt get install", "line": 5,
         "file": "production/Dockerfile"},
        {"code": "DL3059", "level": "info", "message": "Multiple consecutive RUN", "line": 9,
         "file": "production/Dockerfile"},
        {"code": "DL4000", "level": "error", "message": "MAINTAINER is deprecated", "line": 2,
         "file": "production/Dockerfile"},
    ]
    p = write_json(tmp_path / "hadolint-production.json", report)
    findings = HadolintNormalizer().normalize(p, NormalizerContext(target_dir=tmp_path))
    assert [f.severity for f in findings] == ["MEDIUM", "LOW", "HIGH"]
    assert findings[0].file == "production/Dockerfile"


def test_dockle_skips_pass_and_uses_image_label(tmp_path, write_json):
    report = {
        "details": [
            {"code": "CIS-DI-0001", "title": "Create a user for the container", "level": "WARN",
             "alerts": ["Last user should not be root"]},
            {"code": "CIS-DI-0005", "title": "Enable Content trust", "level": "INFO", "alerts": []},
            {"code": "CIS-DI-0006", "title": "HEALTHCHECK", "level": "PASS", "alerts": []},
            {"code": "DKL-DI-0006", "title": "Avoid latest tag", "level": "SKIP", "alerts": []},
        ]
    }
    p = write_json(tmp_path / "dockle-builder-latest.json", report)
    findings = DockleNormalizer().normalize(p, NormalizerContext(target_dir=tmp_path))
    assert [f.severity for f in findings] == ["MEDIUM", "LOW"]
    assert findings[0].file == "builder-latest"
    assert "Last user should not be root" in findings[0].message
    assert findings[0].type == "CONTAINER"


def test_checkov_single_and_multi_framework(tmp_path, write_json):
    check = {
        "check_id": "CKV_DOCKER_2",
        "check_name": "Ensure that HEALTHCHECK instructions have been added",
        "file_path": "/production/Dockerfile",
        "file_line_range": [1, 20],
        "severity": None,
    }
    single = write_json(tmp_path / "a" / "checkov-scan.json",
                        {"check_type": "dockerfile", "results": {"failed_checks": [check]}})
    multi = write_json(tmp_path / "b" / "checkov-scan.json", [
        {"check_type": "dockerfile", "results": {"failed_checks": [check]}},
        {"check_type": "github_actions", "results": {"failed_checks": [dict(check, check_id="CKV_GHA_1")]}},
    ])

    ctx = NormalizerContext(target_dir=tmp_path)
    (f,) = CheckovNormalizer().normalize(single, ctx)
    assert f.type == "COMPLIANCE"
    assert f.severity == "MEDIUM"
    assert f.file == "production/Dockerfile"
    assert f.line == 1

    assert [x.rule_id for x in CheckovNormalizer().normalize(multi, ctx)] == ["CKV_DOCKER_2", "CKV_GHA_1"]
