import httpx

from imagesec.services.github_client import GitHubClient
from imagesec.services.workflow_service import WorkflowService


def _github(workflows: list[dict] | None = None, status_code: int = 200) -> GitHubClient:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/actions/workflows")
        return httpx.Response(status_code, json={"workflows": workflows or []})

    return GitHubClient(http=httpx.Client(transport=httpx.MockTransport(handler)))


def _workflows(tmp_path, *files: tuple[str, str]):
    d = tmp_path / ".github" / "workflows"
    d.mkdir(parents=True)
    for name, body in files:
        (d / name).write_text(body)
    return d


def test_exactly_one_workflow_passes(tmp_path):
    d = _workflows(tmp_path, ("build-and-publish.yml", "name: Build and Publish Docker Images\non: push\n"))
    result = WorkflowService.validate_local(d)
    assert result.local_status == "PASS"
    assert result.names == {"build-and-publish.yml": "Build and Publish Docker Images"}
    assert result.ok


def test_two_workflows_fail(tmp_path):
    d = _workflows(tmp_path, ("a.yml", "name: A\n"), ("b.yaml", "name: B\n"))
    result = WorkflowService.validate_local(d)
    assert result.local_status == "FAIL"
    assert result.files == ["a.yml", "b.yaml"]
    assert not result.ok


def test_no_workflows_fail(tmp_path):
    assert WorkflowService.validate_local(tmp_path / "missing").local_status == "FAIL"


def test_invalid_yaml_is_still_counted(tmp_path):
    d = _workflows(tmp_path, ("broken.yml", "name: [unclosed\n"))
    result = WorkflowService.validate_local(d)
    assert result.invalid == ["broken.yml"]
    assert result.local_status == "PASS"


def test_remote_ignores_copilot_and_disabled(tmp_path):
    d = _workflows(tmp_path, ("build.yml", "name: Build\n"))
    gh = _github([
        {"name": "Build", "state": "active"},
        {"name": "Copilot", "state": "active"},
        {"name": "Old build", "state": "disabled_manually"},
    ])
    result = WorkflowService(github=gh).validate(d, check_remote=True)
    assert result.remote_status == "PASS"
    assert result.remote_workflows == ["Build"]
    assert result.ok


def test_remote_duplicate_build_workflows_fail(tmp_path):
    d = _workflows(tmp_path, ("build.yml", "name: Build\n"))
    gh = _github([{"name": "Build", "state": "active"}, {"name": "Legacy", "state": "active"}])
    result = WorkflowService(github=gh).validate(d, check_remote=True)
    assert result.remote_status == "FAIL"
    assert not result.ok


def test_remote_error_is_unknown_and_does_not_block(tmp_path):
    d = _workflows(tmp_path, ("build.yml", "name: Build\n"))
    result = WorkflowService(github=_github(status_code=404)).validate(d, check_remote=True)
    assert result.remote_status == "UNKNOWN"
    assert result.ok


def test_remote_skipped_by_default(tmp_path):
    d = _workflows(tmp_path, ("build.yml", "name: Build\n"))
    assert WorkflowService(github=_github()).validate(d).remote_status == "SKIPPED"
