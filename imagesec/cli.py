"""Command-line entry point.

Human-readable output goes to stdout; JSON logs go to stderr. Every command
returns 0 when nothing needs attention and 1 for a blocking result.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date
from pathlib import Path

from imagesec.core.config import settings
from imagesec.core.containers import build_normalizer_registry, build_scanner_registry
from imagesec.core.errors import ImagesecError, NoSarifInputsError
from imagesec.core.logging import setup_logging
from imagesec.domain.models import SEVERITIES, ReportSummary
from imagesec.domain.schemas import ScanConfig
from imagesec.reports.summary import exceeds_threshold
from imagesec.services.audit_service import AuditService, ensure_docker
from imagesec.services.dockerfile_service import check_deprecated_commands
from imagesec.services.layout import ResultsLayout
from imagesec.services.pipeline_service import PipelineService
from imagesec.services.report_service import ReportService
from imagesec.services.sarif_service import SarifService
from imagesec.services.scan_service import ScanService
from imagesec.services.status_service import StatusService
from imagesec.services.verify_service import VerifyService
from imagesec.services.workflow_service import WorkflowService

logger = logging.getLogger("imagesec.cli")


def _layout(args: argparse.Namespace) -> ResultsLayout:
    return ResultsLayout(Path(args.results_dir)) if args.results_dir else ResultsLayout.default()


def _print_summary(summary: ReportSummary) -> None:
    counts = ", ".join(f"{sev}={summary.by_severity.get(sev, 0)}" for sev in SEVERITIES)
    print(f"Findings: {summary.total} ({counts})")
    print(f"Risk level: {summary.risk_level}")
    print(f"Overall status: {summary.overall_status}")


def _gate(summary: ReportSummary, fail_on: str) -> int:
    if exceeds_threshold(summary, fail_on):
        print(f"Findings at or above {fail_on} severity: failing")
        return 1
    return 0


# ---------- scan pipeline ----------


def cmd_scan(args: argparse.Namespace) -> int:
    cfg = ScanConfig(target_path=args.target, advanced=args.advanced)
    if args.image:
        cfg.images = args.image
    if args.dockerfile:
        cfg.dockerfiles = args.dockerfile
    if args.tools:
        cfg.tools = [t.strip() for t in args.tools.split(",") if t.strip()]

    pipeline = PipelineService(ScanService(build_scanner_registry()), SarifService(build_normalizer_registry()))
    result = pipeline.run(cfg, _layout(args))

    counts = {}
    for r in result.tool_runs:
        counts[r.status] = counts.get(r.status, 0) + 1
    print(f"Tools: {len(result.tool_runs)} run ({', '.join(f'{k}={v}' for k, v in sorted(counts.items()))})")
    _print_summary(result.summary)
    for name, p in result.reports.items():
        print(f"  {name}: {p}")
    return _gate(result.summary, args.fail_on)


def cmd_normalize(args: argparse.Namespace) -> int:
    src = Path(args.input)
    if not src.is_file():
        print(f"Input file not found: {src}", file=sys.stderr)
        return 1

    out = Path(args.output) if args.output else None
    report = SarifService(build_normalizer_registry()).normalize(args.tool, src, out)
    if report is None:
        return 1
    if out is None:
        print(report.to_json())
    else:
        print(f"Wrote {out} ({sum(len(r.results) for r in report.runs)} results)")
    return 0


def cmd_sarif(args: argparse.Namespace) -> int:
    layout = _layout(args)
    sarif = SarifService(build_normalizer_registry())
    sarif.convert_results(layout)
    try:
        result = sarif.aggregate(layout)
    except NoSarifInputsError as e:
        logger.warning("%s", e)
        sarif.write_summary(layout, None)
        print(str(e))
        return 1

    sarif.write_summary(layout, result)
    print(f"Unified SARIF: {result.output} ({result.run_count} runs, {len(result.skipped)} skipped)")
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    summary, paths = ReportService(_layout(args)).render(advanced=args.advanced)
    _print_summary(summary)
    for name, p in paths.items():
        print(f"  {name}: {p}")
    return _gate(summary, args.fail_on)


# ---------- operational checks ----------


def cmd_audit(args: argparse.Namespace) -> int:
    ensure_docker()
    today = date.today()
    service = AuditService()
    facts = service.gather(today=today)
    result = service.analyze_changes(facts, today)

    out = Path(args.output)
    out.write_text(service.render_audit_report(result, facts), encoding="utf-8")

    for key, value in result.as_env().items():
        print(f"{key}={value}")

    gh_output = os.getenv("GITHUB_OUTPUT")
    if gh_output:
        service.write_github_output(result, Path(gh_output))
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    ensure_docker()
    report = StatusService().check()
    for check in (report.builder, report.dev):
        state = "available" if check.pullable else "not available"
        print(f"{check.image}: {state}")
    if report.service_ok is not None:
        print(f"Service test: {'passed' if report.service_ok else 'failed'}")
    print(f"Overall status: {report.verdict}")
    return 0 if report.ok else 1


def cmd_verify_images(args: argparse.Namespace) -> int:
    ensure_docker()
    report = VerifyService().check()
    print(f"Workflow status: {report.workflow_status}")
    for check in report.images:
        if not check.pullable:
            print(f"{check.image}: pull failed")
        elif not check.runs:
            print(f"{check.image}: pulled, but --version failed")
        else:
            print(f"{check.image}: OK ({check.version or 'version unknown'})")
    return 0 if report.ok else 1


def cmd_validate_workflows(args: argparse.Namespace) -> int:
    wf_dir = Path(args.workflows_dir) if args.workflows_dir else None
    result = WorkflowService().validate(wf_dir, check_remote=args.check_remote)

    print(f"Local workflow files: {len(result.files)}")
    for f in result.files:
        name = result.names.get(f)
        suffix = " (invalid YAML)" if f in result.invalid else f" ({name})" if name else ""
        print(f"  - {f}{suffix}")
    print(f"Local check: {result.local_status}")
    if args.check_remote:
        print(f"Active build workflows on GitHub: {', '.join(result.remote_workflows) or 'none'}")
        print(f"GitHub check: {result.remote_status}")

    if result.local_status == "FAIL":
        print("Exactly one workflow file is expected; extra workflows trigger duplicate builds")
    return 0 if result.ok else 1


def cmd_check_dockerfiles(args: argparse.Namespace) -> int:
    check = check_deprecated_commands(Path(args.root))
    for hit in check.deprecated_hits:
        print(f"Deprecated PlatformIO command: {hit}")
    for hit in check.modern_hits:
        print(f"Modern PlatformIO command: {hit}")
    if not check.modern_hits:
        print("No 'pio pkg install' found in any Dockerfile")
    print("PASS" if check.ok else "FAIL")
    return 0 if check.ok else 1


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("imagesec.main:app", host=args.host, port=args.port)
    return 0


# ---------- parser ----------


def _severity(value: str) -> str:
    sev = value.strip().upper()
    if sev not in SEVERITIES:
        raise argparse.ArgumentTypeError(f"invalid severity: {value} (choose from {', '.join(SEVERITIES)})")
    return sev


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="imagesec", description="Security scanning for the PlatformIO Docker images.")
    ap.add_argument("--version", action="version", version=f"%(prog)s {settings.VERSION}")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("scan", help="run scanners, build SARIF and render reports")
    p.add_argument("--target", default=".", help="directory to scan (default: .)")
    p.add_argument("--results-dir", default=None, help=f"results tree (default: {settings.SCAN_RESULTS_DIR})")
    p.add_argument("--advanced", action="store_true", default=settings.ADVANCED_MODE)
    p.add_argument("--image", action="append", help="image to scan (repeatable)")
    p.add_argument("--dockerfile", action="append", help="Dockerfile to lint (repeatable)")
    p.add_argument("--tools", default=None, help="comma-separated scanner names")
    p.add_argument("--fail-on", type=_severity, default=settings.FAIL_ON_SEVERITY)
    p.set_defaults(func=cmd_scan)

    p = sub.add_parser("normalize", help="convert one tool output to SARIF")
    p.add_argument("tool")
    p.add_argument("input")
    p.add_argument("-o", "--output", default=None)
    p.set_defaults(func=cmd_normalize)

    p = sub.add_parser("sarif", help="convert and aggregate existing tool outputs")
    p.add_argument("--results-dir", default=None)
    p.set_defaults(func=cmd_sarif)

    p = sub.add_parser("report", help="render reports from an existing results tree")
    p.add_argument("--results-dir", default=None)
    p.add_argument("--advanced", action="store_true", default=settings.ADVANCED_MODE)
    p.add_argument("--fail-on", type=_severity, default=settings.FAIL_ON_SEVERITY)
    p.set_defaults(func=cmd_report)

    p = sub.add_parser("audit", help="decide whether the development image needs a rebuild")
    p.add_argument("--output", default="audit-report.md")
    p.set_defaults(func=cmd_audit)

    p = sub.add_parser("status", help="check that the published images are pullable")
    p.set_defaults(func=cmd_status)

    p = sub.add_parser("verify-images", help="pull and run the published images")
    p.set_defaults(func=cmd_verify_images)

    p = sub.add_parser("validate-workflows", help="ensure exactly one build workflow exists")
    p.add_argument("--workflows-dir", default=None, help=f"(default: {settings.WORKFLOWS_DIR})")
    p.add_argument("--check-remote", action="store_true", help="also check active workflows on GitHub")
    p.set_defaults(func=cmd_validate_workflows)

    p = sub.add_parser("check-dockerfiles", help="find deprecated PlatformIO commands")
    p.add_argument("--root", default=".")
    p.set_defaults(func=cmd_check_dockerfiles)

    p = sub.add_parser("serve", help="run the HTTP API")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.set_defaults(func=cmd_serve)

    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(sys.stderr)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    except ImagesecError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
