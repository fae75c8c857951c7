from __future__ import annotations

import os
import time

import httpx
import jwt

from agenticpr.core.errors import ConfigurationError
from agenticpr.github.client.github_client import default_api_url


def _read_private_key() -> str:
    """
    Read GitHub App private key from either:
    1. GITHUB_PRIVATE_KEY_PEM env var (direct PEM content, used in CI secrets)
    2. GITHUB_PRIVATE_KEY_PATH env var (file path, used in local dev)
    """
    pem_content = os.getenv("GITHUB_PRIVATE_KEY_PEM", "")
    if pem_content:
        return pem_content

    path = os.getenv("GITHUB_PRIVATE_KEY_PATH", "")
    if not path:
        raise ConfigurationError("Missing GITHUB_PRIVATE_KEY_PEM or GITHUB_PRIVATE_KEY_PATH")
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def create_app_jwt() -> str:
    app_id = os.getenv("GITHUB_APP_ID", "")
    if not app_id:
        raise ConfigurationError("Missing GITHUB_APP_ID")

    now = int(time.time())
    payload = {
        "iat": now - 60,
        "exp": now + 600,  # ~10 min
        "iss": app_id,
    }

    private_key = _read_private_key()
    return jwt.encode(payload, private_key, algorithm="RS256")


async def get_installation_token(installation_id: int) -> str:
    app_jwt = create_app_jwt()
    headers = {
        "Authorization": f"Bearer {app_jwt}",
        "Accept": "application/vnd.github+json",
    }
    url = f"{default_api_url()}/app/installations/{installation_id}/access_tokens"

    async with httpx.AsyncClient(timeout=30) as client:
        resp = await client.post(url, headers=headers)
        resp.raise_for_status()
        return resp.json()["token"]


async def resolve_token(installation_id: int | None = None) -> str:
    """
    Pick the repository credential for a run.

    GITHUB_TOKEN wins (the Actions token, or a PAT). Otherwise a GitHub App
    installation token is minted, using the given installation id or
    GITHUB_INSTALLATION_ID.
    """
    token = os.getenv("GITHUB_TOKEN", "")
    if token:
        return token

    if installation_id is None:
        raw_installation = os.getenv("GITHUB_INSTALLATION_ID", "")
        if not raw_installation:
            raise ConfigurationError("Missing GITHUB_TOKEN (or GitHub App installation credentials)")
        try:
            installation_id = int(raw_installation)
        except ValueError as parse_error:
            raise ConfigurationError(f"GITHUB_INSTALLATION_ID is not a number: {raw_installation!r}") from parse_error

    return await get_installation_token(installation_id)
