from __future__ import annotations

import httpx

from agenticpr.core import console
from agenticpr.core.parsing import parse_reference
from agenticpr.core.run_models import TargetReference
from agenticpr.github.client.github_client import GitHubClient
from agenticpr.github.client.pr_api import fetch_pr


async def resolve_reference(
    instruction: str,
    owner: str,
    repo: str,
    gh: GitHubClient,
) -> TargetReference | None:
    """
    Resolve the PR an instruction points at, if any.

    Never fails: a missing, malformed or unreachable reference only means the
    run creates a new branch and PR instead of updating one.
    """
    reference = parse_reference(instruction)

    if reference.kind == "absent":
        return None

    if reference.kind == "malformed":
        console.warning(f"Ignoring malformed PR reference {reference.raw!r} ({reference.reason}), creating new branch")
        return None

    pr_number = reference.number
    try:
        pr = await fetch_pr(owner, repo, pr_number, gh)
    except httpx.HTTPError as lookup_error:
        console.warning(f"Could not find PR #{pr_number}, creating new branch ({lookup_error})")
        return None

    head = pr.get("head") or {}
    head_repo = (head.get("repo") or {}).get("full_name")
    if head_repo and head_repo.lower() != f"{owner}/{repo}".lower():
        console.warning(f"PR #{pr_number} comes from fork {head_repo}, creating new branch")
        return None

    return TargetReference(
        number=pr_number,
        head_branch=head["ref"],
        current_title=pr.get("title") or "",
        current_body=pr.get("body") or "",
        html_url=pr.get("html_url") or "",
    )
