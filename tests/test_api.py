import json

from imagesec.core.util import CmdResult
from imagesec.services.scan_store import ScanStore


def test_list_tools(client):
    tools = client.get("/api/tools").json()
    assert tools[0] == "trivy"
    assert {"hadolint", "dockle", "gitleaks", "checkov", "syft"} <= set(tools)


def test_unknown_scan_is_404(client):
    assert client.get("/api/scans/does-not-exist").status_code == 404
    assert client.get("/api/scans/does-not-exist/sarif").status_code == 404


def test_bad_target_is_400(client, tmp_path):
    res = client.post("/api/scans", json={"target_path": str(tmp_path / "missing")})
    assert res.status_code == 400


def test_unknown_tool_is_400(client, tmp_path):
    res = client.post("/api/scans", json={"target_path": str(tmp_path), "tools": ["nmap"]})
    assert res.status_code == 400
    assert "nmap" in res.json()["detail"]


def test_scan_round_trip(client, tmp_path, monkeypatch, trivy_report):
    monkeypatch.setattr("imagesec.scanners.base.shutil.which", lambda name: f"/usr/bin/{name}")

    def fake_run(cmd, cwd=None, timeout_sec=60):
        out = cmd[cmd.index("--output") + 1]
        with open(out, "w", encoding="utf-8") as fh:
            json.dump(trivy_report, fh)
        return CmdResult(0, "", "")

    monkeypatch.setattr("imagesec.scanners.base.run_cmd", fake_run)

    res = client.post("/api/scans", json={"target_path": str(tmp_path), "tools": ["trivy"]})
    assert res.status_code == 200
    body = res.json()
    sid = body["scan_id"]
    assert body["summary"]["by_severity"]["CRITICAL"] == 2
    assert body["summary"]["risk_level"] == "HIGH RISK"
    assert "reports/json/security-api-response.json" in body["artifacts"]

    doc = client.get(f"/api/scans/{sid}").json()
    assert doc["summary"]["total_findings"] == 4

    sarif = client.get(f"/api/scans/{sid}/sarif").json()
    assert len(sarif["runs"]) == 2


def test_scan_without_sarif_returns_404_for_sarif(client, tmp_path, monkeypatch):
    monkeypatch.setattr("imagesec.scanners.base.shutil.which", lambda name: None)

    sid = client.post("/api/scans", json={"target_path": str(tmp_path), "tools": ["trivy"]}).json()["scan_id"]
    assert client.get(f"/api/scans/{sid}").status_code == 200
    assert client.get(f"/api/scans/{sid}/sarif").status_code == 404


def test_scan_ids_must_be_uuids(client, tmp_path):
    data_dir = tmp_path / "data"
    (data_dir / "not-a-uuid").mkdir(parents=True, exist_ok=True)
    (data_dir / "not-a-uuid" / "scan.json").write_text("{}")
    (data_dir.parent / "scan.json").write_text("{}")

    assert client.get("/api/scans/not-a-uuid").status_code == 404
    assert client.get("/api/scans/not-a-uuid/sarif").status_code == 404
    assert not ScanStore.scan_exists("..")
    assert ScanStore.get_scan_info("..") is None
