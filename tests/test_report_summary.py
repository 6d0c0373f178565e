from imagesec.domain.models import Finding, RawToolResult
from imagesec.domain.sarif import SarifReport
from imagesec.reports.summary import (
    exceeds_threshold,
    findings_from_sarif,
    recommendations,
    risk_level,
    summarize,
)
from imagesec.services.sarif_service import build_run


def _f(severity: str, tool: str = "trivy", ftype: str = "DEPENDENCY", msg: str | None = None) -> Finding:
    return Finding(tool=tool, type=ftype, severity=severity, file="requirements.txt", line=None,
                   message=msg or f"{severity} issue", rule_id=f"R-{severity}")


def _run(tool: str, status: str = "success") -> RawToolResult:
    return RawToolResult(tool=tool, label=tool, category="basic", exit_code=0, status=status)


def test_risk_levels():
    assert risk_level(1, 0) == "HIGH RISK"
    assert risk_level(0, 6) == "MEDIUM-HIGH RISK"
    assert risk_level(0, 1) == "MEDIUM RISK"
    assert risk_level(0, 0) == "LOW RISK"


def test_findings_round_trip_through_sarif():
    original = [_f("CRITICAL"), _f("LOW", tool="hadolint", ftype="CODE")]
    report = SarifReport(runs=[build_run("trivy", original[:1]), build_run("hadolint", original[1:])])

    findings = findings_from_sarif(report)
    assert [(f.tool, f.severity, f.type) for f in findings] == [
        ("trivy", "CRITICAL", "DEPENDENCY"),
        ("hadolint", "LOW", "CODE"),
    ]
    assert findings_from_sarif(None) == []


def test_summary_counts_come_from_findings():
    s = summarize([_f("CRITICAL"), _f("HIGH"), _f("HIGH", msg="other")], [_run("trivy")])
    assert s.by_severity == {"CRITICAL": 1, "HIGH": 2, "MEDIUM": 0, "LOW": 0, "INFO": 0}
    assert s.total == 3
    assert s.risk_level == "HIGH RISK"
    assert s.overall_status == "AT_RISK"
    assert s.categories["vulnerability_management"].status == "NEEDS_ATTENTION"
    assert s.categories["secrets_detection"].status == "NOT_SCANNED"


def test_coverage_and_compliance():
    runs = [_run(t) for t in ("trivy", "bandit", "gitleaks", "dockle", "checkov")]
    s = summarize([_f("HIGH", tool="checkov", ftype="COMPLIANCE")], runs)
    assert s.coverage_percentage == 100
    assert s.compliance_status == "NON_COMPLIANT"

    s = summarize([], [_run("trivy"), _run("checkov", status="skipped")])
    assert s.coverage_percentage == 20
    assert s.compliance_status == "NOT_EVALUATED"
    assert s.overall_status == "SECURE"


def test_trend_against_previous_baseline():
    kept, fixed = _f("HIGH"), _f("LOW")
    s = summarize([kept, _f("MEDIUM")], [], previous=[kept.id, fixed.id, "gone"])
    assert s.trend.new == 1
    assert s.trend.resolved == 2
    assert s.trend.improvement_percentage == 33


def test_threshold_gate():
    s = summarize([_f("MEDIUM")], [])
    assert not exceeds_threshold(s, "HIGH")
    assert exceeds_threshold(s, "MEDIUM")


def test_recommendations_prioritise_critical():
    recs = recommendations(summarize([_f("CRITICAL")], [_run("trivy")]))
    assert recs[0]["priority"] == "IMMEDIATE"
    assert recs[0]["timeline"] == "0-7 days"

    quiet = recommendations(summarize([], [_run(t) for t in ("trivy", "bandit", "gitleaks", "dockle", "checkov")]))
    assert [r["category"] for r in quiet] == ["Monitoring"]


def test_trivy_misconfigurations_count_as_compliance_coverage():
    misconfig = _f("HIGH", tool="trivy", ftype="COMPLIANCE", msg="Root user in Dockerfile")
    s = summarize([misconfig], [_run("trivy")])

    compliance = s.categories["compliance"]
    assert compliance.findings == 1
    assert compliance.status == "NEEDS_ATTENTION"
    assert compliance.tools == ["trivy"]
    assert s.compliance_status == "NON_COMPLIANT"
    assert s.coverage_percentage == 40


def test_findings_from_a_skipped_tool_do_not_mark_category_scanned():
    s = summarize([_f("HIGH", tool="trivy", ftype="SECRET")], [_run("trivy", status="skipped")])
    assert s.categories["secrets_detection"].status == "NOT_SCANNED"
