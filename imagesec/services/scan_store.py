from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from imagesec.core.config import settings
from imagesec.domain.schemas import ScanConfig
from imagesec.services.layout import ResultsLayout


class ScanStore:
    """
    Owns the on-disk layout of scans started through the HTTP API.
    """

    @staticmethod
    def _base_dir() -> Path:
        return Path(settings.DATA_DIR)

    @staticmethod
    def scan_dir(scan_id: str) -> Path:
        return ScanStore._base_dir() / scan_id

    @staticmethod
    def layout(scan_id: str) -> ResultsLayout:
        return ResultsLayout(ScanStore.scan_dir(scan_id) / "results")

    @staticmethod
    def scan_json_path(scan_id: str) -> Path:
        return ScanStore.scan_dir(scan_id) / "scan.json"

    @staticmethod
    def is_valid_id(scan_id: str) -> bool:
        try:
            uuid.UUID(scan_id)
        except ValueError:
            return False
        return True

    @staticmethod
    def scan_exists(scan_id: str) -> bool:
        # ids are path segments under DATA_DIR
        return ScanStore.is_valid_id(scan_id) and ScanStore.scan_json_path(scan_id).exists()

    @staticmethod
    def create_scan(config: ScanConfig) -> str:
        sid = str(uuid.uuid4())
        ScanStore.scan_dir(sid).mkdir(parents=True, exist_ok=True)
        ScanStore.layout(sid).ensure()

        payload = {
            "scan_id": sid,
            "created_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "config": config.model_dump(),
        }
        ScanStore.scan_json_path(sid).write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return sid

    @staticmethod
    def get_scan_info(scan_id: str) -> dict[str, Any] | None:
        if not ScanStore.scan_exists(scan_id):
            return None
        p = ScanStore.scan_json_path(scan_id)
        return json.loads(p.read_text(encoding="utf-8"))
