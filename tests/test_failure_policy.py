from imagesec.normalizers.failure_policy import classify, is_real_failure


def test_zero_exit_is_success(tmp_path):
    assert classify("trivy", 0, tmp_path / "missing.json") == "success"


def test_findings_exit_code_with_report_is_warning(tmp_path):
    artifact = tmp_path / "bandit.json"
    artifact.write_text('{"results": []}')
    assert not is_real_failure("bandit", 1, artifact)
    assert classify("bandit", 1, artifact) == "warning"


def test_findings_exit_code_without_report_is_failure(tmp_path):
    assert classify("bandit", 1, tmp_path / "bandit.json") == "failed"


def test_empty_report_counts_as_missing(tmp_path):
    artifact = tmp_path / "gitleaks.json"
    artifact.write_text("")
    assert is_real_failure("gitleaks", 1, artifact)


def test_safety_uses_exit_code_64(tmp_path):
    artifact = tmp_path / "safety.json"
    artifact.write_text("{}")
    assert classify("safety", 64, artifact) == "warning"
    assert classify("safety", 1, artifact) == "failed"


def test_unknown_nonzero_exit_is_failure(tmp_path):
    artifact = tmp_path / "trivy.json"
    artifact.write_text("{}")
    assert classify("trivy", 1, artifact) == "failed"


def test_timeout_always_fails(tmp_path):
    artifact = tmp_path / "bandit.json"
    artifact.write_text("{}")
    assert classify("bandit", 0, artifact, timed_out=True) == "failed"
