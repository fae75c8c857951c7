from __future__ import annotations

import time

import httpx

from agenticpr.core import console
from agenticpr.core.run_models import RunContext, WorkingBranch
from agenticpr.github.client.github_client import GitHubClient, error_message
from agenticpr.github.client.repo_api import create_branch, fetch_branch_sha

REFERENCE_EXISTS_MESSAGE = "Reference already exists"


def new_branch_name(prefix: str, token: int | None = None) -> str:
    """`<prefix><epoch milliseconds>`, e.g. agentic/1714564800000."""
    if token is None:
        token = int(time.time() * 1000)
    return f"{prefix}{token}"


def is_reference_conflict(http_error: httpx.HTTPStatusError) -> bool:
    """True only for GitHub's "ref already exists" rejection, not for other 422s."""
    if http_error.response.status_code != 422:
        return False
    return REFERENCE_EXISTS_MESSAGE.lower() in error_message(http_error).lower()


async def ensure_branch(
    context: RunContext,
    branch_name: str,
    gh: GitHubClient,
) -> WorkingBranch:
    """
    Create `branch_name` from the tip of the default branch.

    A branch left behind by an earlier, partially failed run counts as
    success. Every other failure propagates.
    """
    base_sha = await fetch_branch_sha(context.owner, context.repo, context.default_branch, gh)

    try:
        await create_branch(context.owner, context.repo, branch_name, base_sha, gh)
    except httpx.HTTPStatusError as http_error:
        if not is_reference_conflict(http_error):
            raise
        console.info(f"🌿 Branch {branch_name} already exists, continuing with updates")
        return WorkingBranch(name=branch_name, outcome="already_existed")

    console.info(f"🌿 Created new branch: {branch_name}")
    return WorkingBranch(name=branch_name, outcome="created")


async def reconcile_branch(
    context: RunContext,
    gh: GitHubClient,
    token: int | None = None,
) -> WorkingBranch:
    """
    Decide which branch receives the proposal's files, making sure it exists.

    A resolved target PR already has a head branch, so it is reused as is.
    """
    target = context.target
    if target is not None:
        console.info(f"🌿 Using existing branch: {target.head_branch} from PR #{target.number}")
        return WorkingBranch(name=target.head_branch, outcome="reused")

    branch_name = new_branch_name(context.config.branch.prefix, token)
    return await ensure_branch(context, branch_name, gh)
