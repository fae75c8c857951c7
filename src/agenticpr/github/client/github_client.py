from __future__ import annotations

import os
from dataclasses import dataclass, field

import httpx

DEFAULT_API_URL = "https://api.github.com"


def default_api_url() -> str:
    return os.getenv("GITHUB_API_URL", DEFAULT_API_URL).rstrip("/")


@dataclass(frozen=True)
class GitHubClient:
    token: str
    api_url: str = field(default_factory=default_api_url)

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def repo_url(self, owner: str, repo: str) -> str:
        return f"{self.api_url}/repos/{owner}/{repo}"

    async def get_json(self, url: str, params: dict | None = None) -> dict:
        async with httpx.AsyncClient(timeout=30) as client:
            r = await client.get(url, headers=self.headers(), params=params)
            r.raise_for_status()
            return r.json()

    async def post_json(self, url: str, body: dict) -> dict:
        async with httpx.AsyncClient(timeout=30) as client:
            r = await client.post(url, headers=self.headers(), json=body)
            r.raise_for_status()
            return r.json()

    async def put_json(self, url: str, body: dict) -> dict:
        async with httpx.AsyncClient(timeout=30) as client:
            r = await client.put(url, headers=self.headers(), json=body)
            r.raise_for_status()
            return r.json()

    async def patch_json(self, url: str, body: dict) -> dict:
        async with httpx.AsyncClient(timeout=30) as client:
            r = await client.patch(url, headers=self.headers(), json=body)
            r.raise_for_status()
            return r.json()


def error_message(http_error: httpx.HTTPStatusError) -> str:
    """Best-effort `message` field from a GitHub error response."""
    try:
        payload = http_error.response.json()
    except ValueError:
        return http_error.response.text
    if isinstance(payload, dict):
        return str(payload.get("message") or "")
    return ""
