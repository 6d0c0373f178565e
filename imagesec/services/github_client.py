from __future__ import annotations

from typing import Any

import httpx

from imagesec.core.config import settings


class GitHubClient:
    """Minimal read-only client for the GitHub Actions REST endpoints we need."""

    def __init__(self, http: httpx.Client | None = None, timeout: float = 10.0):
        self._http = http
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if settings.GITHUB_TOKEN:
            headers["Authorization"] = f"Bearer {settings.GITHUB_TOKEN}"
        return headers

    def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{settings.GITHUB_API_URL.rstrip('/')}{path}"
        if self._http is not None:
            resp = self._http.get(url, headers=self._headers(), params=params)
        else:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.get(url, headers=self._headers(), params=params)
        resp.raise_for_status()
        return resp.json()

    def workflow_runs(self, repository: str, status: str | None = None) -> list[dict[str, Any]]:
        params = {"status": status} if status else None
        return self._get(f"/repos/{repository}/actions/runs", params).get("workflow_runs") or []

    def workflows(self, repository: str) -> list[dict[str, Any]]:
        return self._get(f"/repos/{repository}/actions/workflows").get("workflows") or []
