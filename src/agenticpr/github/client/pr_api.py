from __future__ import annotations

from agenticpr.github.client.github_client import GitHubClient


async def fetch_pr(owner: str, repo: str, pr_number: int, gh: GitHubClient) -> dict:
    url = f"{gh.repo_url(owner, repo)}/pulls/{pr_number}"
    return await gh.get_json(url)


async def create_pr(
    owner: str,
    repo: str,
    title: str,
    head: str,
    base: str,
    body: str,
    gh: GitHubClient,
    draft: bool = True,
) -> dict:
    url = f"{gh.repo_url(owner, repo)}/pulls"
    return await gh.post_json(url, {
        "title": title,
        "head": head,
        "base": base,
        "body": body,
        "draft": draft,
    })


async def update_pr(
    owner: str,
    repo: str,
    pr_number: int,
    gh: GitHubClient,
    title: str | None = None,
    body: str | None = None,
) -> dict:
    """Update title and/or body of an existing PR. Omitted fields are left untouched."""
    changes: dict[str, str] = {}
    if title is not None:
        changes["title"] = title
    if body is not None:
        changes["body"] = body
    url = f"{gh.repo_url(owner, repo)}/pulls/{pr_number}"
    return await gh.patch_json(url, changes)


# =============================================================================
# ISSUE COMMENTS
# =============================================================================

async def post_issue_comment(
    owner: str,
    repo: str,
    issue_number: int,
    body: str,
    gh: GitHubClient,
) -> dict:
    """Post a comment on an issue or PR."""
    url = f"{gh.repo_url(owner, repo)}/issues/{issue_number}/comments"
    return await gh.post_json(url, {"body": body})
