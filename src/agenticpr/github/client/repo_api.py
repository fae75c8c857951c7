"""
Repository-level GitHub API calls: default branch, file contents, branch refs.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from agenticpr.github.client.github_client import GitHubClient


@dataclass(frozen=True)
class RepoFile:
    """A file as it currently exists on some ref."""
    path: str
    sha: str
    text: str


def _contents_url(owner: str, repo: str, path: str, gh: GitHubClient) -> str:
    return f"{gh.repo_url(owner, repo)}/contents/{quote(path, safe='/')}"


async def fetch_default_branch(owner: str, repo: str, gh: GitHubClient) -> str:
    repo_data = await gh.get_json(gh.repo_url(owner, repo))
    return repo_data["default_branch"]


async def fetch_file(owner: str, repo: str, path: str, ref: str, gh: GitHubClient) -> RepoFile | None:
    """
    Fetch a file's blob sha and decoded text on `ref`.

    Returns None when the file does not exist on that ref (404). Any other
    API failure propagates as httpx.HTTPStatusError.
    """
    try:
        data = await gh.get_json(_contents_url(owner, repo, path, gh), params={"ref": ref})
    except httpx.HTTPStatusError as http_error:
        if http_error.response.status_code == 404:
            return None
        raise

    if isinstance(data, list) or data.get("type", "file") != "file":
        raise ValueError(f"{path} on {ref} is not a regular file")

    # GitHub returns content base64 encoded (empty for files over 1 MB)
    content_b64 = data.get("content") or ""
    text = base64.b64decode(content_b64).decode("utf-8", errors="replace") if content_b64 else ""
    return RepoFile(path=path, sha=data["sha"], text=text)


async def fetch_branch_sha(owner: str, repo: str, branch: str, gh: GitHubClient) -> str:
    """Commit sha the branch currently points at."""
    url = f"{gh.repo_url(owner, repo)}/git/ref/heads/{quote(branch, safe='/')}"
    ref_data = await gh.get_json(url)
    return ref_data["object"]["sha"]


async def create_branch(owner: str, repo: str, branch: str, sha: str, gh: GitHubClient) -> dict:
    url = f"{gh.repo_url(owner, repo)}/git/refs"
    return await gh.post_json(url, {"ref": f"refs/heads/{branch}", "sha": sha})


async def put_file(
    owner: str,
    repo: str,
    path: str,
    content_b64: str,
    branch: str,
    message: str,
    gh: GitHubClient,
    sha: str | None = None,
) -> dict:
    """
    Create or update a file on `branch`.

    `sha` must be the current blob sha when the file already exists on the
    branch's tree; GitHub rejects blind overwrites of existing files.
    """
    body = {
        "message": message,
        "content": content_b64,
        "branch": branch,
    }
    if sha:
        body["sha"] = sha
    return await gh.put_json(_contents_url(owner, repo, path, gh), body)
