import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from imagesec.core.config import settings
from imagesec.main import app


@pytest.fixture(autouse=True)
def _use_tmp_data(tmp_path, monkeypatch):
    """Redirect all scan data to a temp directory so tests never touch real data."""
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setattr(settings, "SCAN_RESULTS_DIR", str(tmp_path / "results"))
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def write_json():
    def _write(path: Path, data) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def trivy_report() -> dict:
    """A Trivy fs report with one vulnerability per severity we care about."""
    return {
        "SchemaVersion": 2,
        "Results": [
            {
                "Target": "requirements.txt",
                "Vulnerabilities": [
                    {
                        "VulnerabilityID": "CVE-2023-0001",
                        "PkgName": "requests",
                        "InstalledVersion": "2.19.0",
                        "FixedVersion": "2.31.0",
                        "Severity": "HIGH",
                        "Title": "Proxy-Authorization header leak",
                        "CweIDs": ["CWE-200"],
                        "CVSS": {"nvd": {"V3Score": 7.5}},
                    },
                    {
                        "VulnerabilityID": "CVE-2023-0002",
                        "PkgName": "urllib3",
                        "InstalledVersion": "1.24.0",
                        "Severity": "CRITICAL",
                        "Title": "CRLF injection",
                    },
                ],
            }
        ],
    }
