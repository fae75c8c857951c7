from __future__ import annotations

import base64

from agenticpr.core import console
from agenticpr.core.run_models import FileWriteIntent, RunContext
from agenticpr.core.types import ProposedFile
from agenticpr.github.client.github_client import GitHubClient
from agenticpr.github.client.repo_api import fetch_file, put_file


def encode_content(content: str) -> str:
    return base64.b64encode(content.encode("utf-8")).decode("ascii")


async def resolve_prior_sha(
    context: RunContext,
    path: str,
    branch: str,
    gh: GitHubClient,
) -> str | None:
    """
    Blob sha GitHub needs to update `path` in place, or None for a new file.

    The working branch is checked first. A fresh branch may not have the file
    yet while the default branch does, so that is checked next.
    """
    existing = await fetch_file(context.owner, context.repo, path, branch, gh)
    if existing is None and branch != context.default_branch:
        existing = await fetch_file(context.owner, context.repo, path, context.default_branch, gh)
    return existing.sha if existing is not None else None


async def build_write_intent(
    context: RunContext,
    proposed: ProposedFile,
    branch: str,
    gh: GitHubClient,
) -> FileWriteIntent:
    return FileWriteIntent(
        path=proposed.path,
        content_base64=encode_content(proposed.content),
        prior_sha=await resolve_prior_sha(context, proposed.path, branch, gh),
    )


async def materialize_files(
    context: RunContext,
    branch: str,
    gh: GitHubClient,
) -> list[str]:
    """
    Write every proposed file to `branch`, one at a time, in proposal order.

    The first failing write aborts the rest. Files already written stay
    written; there is no rollback and no retry.
    """
    proposal = context.proposal
    message = f"{context.config.commit.message_prefix} {proposal.summary}"
    written: list[str] = []

    for proposed in proposal.files:
        intent = await build_write_intent(context, proposed, branch, gh)
        state = f"SHA: {intent.prior_sha}" if intent.is_update else "new file"
        console.info(f"📝 Updating file {intent.path} in branch {branch} ({state})")
        await put_file(
            context.owner,
            context.repo,
            intent.path,
            intent.content_base64,
            branch,
            message,
            gh,
            sha=intent.prior_sha,
        )
        written.append(intent.path)

    return written
