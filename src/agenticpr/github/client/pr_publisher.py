from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx

from agenticpr.core import console
from agenticpr.core.config_models import PullRequestConfig
from agenticpr.core.run_models import RunContext, TargetReference
from agenticpr.core.types import Proposal
from agenticpr.github.client.github_client import GitHubClient
from agenticpr.github.client.pr_api import create_pr, fetch_pr, post_issue_comment, update_pr


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_model_output(proposal: Proposal, label: str) -> str:
    payload = json.dumps(proposal.model_dump(mode="json"), indent=2)
    return (
        f"<details><summary>{label}</summary>\n\n"
        f"```json\n{payload}\n```\n\n"
        f"</details>"
    )


def format_update_section(proposal: Proposal, timestamp: str) -> str:
    """One timestamped entry of the PR body log. Starts with a blank-line separator."""
    return (
        f"\n\n### Update ({timestamp})\n\n"
        f"{proposal.summary}\n\n"
        f"{format_model_output(proposal, 'Model Output for this update')}"
    )


def format_initial_body(proposal: Proposal, section: str, settings: PullRequestConfig) -> str:
    return f"### {settings.attribution}\n\n{proposal.summary}{section}"


def format_human_review_comment(proposal: Proposal, timestamp: str) -> str:
    return (
        f"### Human Review Required ({timestamp})\n\n"
        f"{proposal.summary}\n\n"
        f"{format_model_output(proposal, 'Model Output')}"
    )


def compose_title(summary: str, settings: PullRequestConfig, current_title: str | None = None) -> str:
    """
    Title for a created or updated PR.

    An existing title that already carries the prefix keeps its descriptive
    suffix, so repeated runs do not rename the PR after every summary.
    """
    prefix = settings.title_prefix
    if current_title and prefix in current_title:
        suffix = current_title.split(prefix, 1)[1].strip()
        if suffix:
            return f"{prefix} {suffix}"
    return f"{prefix} {summary}"


async def publish_update(
    context: RunContext,
    target: TargetReference,
    gh: GitHubClient,
    timestamp: str | None = None,
) -> dict:
    """
    Append a new section to an existing PR.

    The PR is re-read right before writing so edits made since the run
    started are kept; nothing already in the body is ever replaced.
    """
    proposal = context.proposal
    settings = context.config.pull_request
    section = format_update_section(proposal, timestamp or utc_timestamp())

    current = await fetch_pr(context.owner, context.repo, target.number, gh)
    current_body = current.get("body") or ""
    current_title = current.get("title") or target.current_title

    updated = await update_pr(
        context.owner,
        context.repo,
        target.number,
        gh,
        title=compose_title(proposal.summary, settings, current_title),
        body=current_body + section,
    )
    console.notice(f"PR updated: {updated.get('html_url') or target.html_url}")
    return updated


async def publish_new(
    context: RunContext,
    branch: str,
    gh: GitHubClient,
    timestamp: str | None = None,
) -> dict:
    proposal = context.proposal
    settings = context.config.pull_request
    section = format_update_section(proposal, timestamp or utc_timestamp())

    created = await create_pr(
        context.owner,
        context.repo,
        title=compose_title(proposal.summary, settings),
        head=branch,
        base=context.default_branch,
        body=format_initial_body(proposal, section, settings),
        gh=gh,
        draft=settings.draft,
    )
    console.notice(f"PR created: {created.get('html_url')}")
    return created


async def publish_human_review(
    context: RunContext,
    gh: GitHubClient,
    timestamp: str | None = None,
) -> dict | None:
    """
    Report a HUMAN_REVIEW_REQUIRED verdict without touching branches, files or PRs.

    When the instruction referenced a PR, the summary is left there as a
    comment. A failure to comment is logged and does not fail the run.
    """
    proposal = context.proposal
    console.warning("Model requires human review")
    console.notice(proposal.summary)

    target = context.target
    if target is None:
        return None

    body = format_human_review_comment(proposal, timestamp or utc_timestamp())
    try:
        comment = await post_issue_comment(context.owner, context.repo, target.number, body, gh)
    except httpx.HTTPError as comment_error:
        console.warning(f"Failed to add review comment: {comment_error}")
        return None

    console.info(f"💬 Added review request comment to PR #{target.number}")
    return comment
