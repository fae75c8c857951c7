from __future__ import annotations

from langchain_core.language_models import BaseChatModel

from agenticpr.agents.proposer import build_llm, request_proposal, sample_context
from agenticpr.core import console
from agenticpr.core.config_models import AgenticConfig
from agenticpr.core.run_models import RunContext, RunResult
from agenticpr.github.client.config_api import load_agentic_config
from agenticpr.github.client.github_client import GitHubClient
from agenticpr.github.client.pr_publisher import publish_human_review, publish_new, publish_update
from agenticpr.github.client.repo_api import fetch_default_branch
from agenticpr.reconcile.branches import reconcile_branch
from agenticpr.reconcile.materializer import materialize_files
from agenticpr.reconcile.resolver import resolve_reference


async def run_agent(
    instruction: str,
    owner: str,
    repo: str,
    gh: GitHubClient,
    llm: BaseChatModel | None = None,
    config: AgenticConfig | None = None,
) -> RunResult:
    """
    Turn one instruction into a branch, file commits and a PR (or a PR update).

    Steps run strictly in order, each consuming what the previous one
    resolved. Recoverable conditions are handled inside the steps; anything
    else propagates to the caller and stops the run where it is.
    """
    if llm is None:
        llm = build_llm()

    default_branch = await fetch_default_branch(owner, repo, gh)
    if config is None:
        config = await load_agentic_config(owner, repo, default_branch, gh)

    context = RunContext(
        owner=owner,
        repo=repo,
        default_branch=default_branch,
        instruction=instruction,
        config=config,
    )
    console.info(f"🔎 {context.full_name}: {instruction!r} (default branch {default_branch})")

    files = await sample_context(owner, repo, default_branch, config.context, gh)
    context.proposal = await request_proposal(instruction, files, llm)
    context.target = await resolve_reference(instruction, owner, repo, gh)

    if context.proposal.needs_human_review:
        comment = await publish_human_review(context, gh)
        return RunResult(
            status="human_review",
            summary=context.proposal.summary,
            pr_number=context.target.number if context.target else None,
            pr_url=context.target.html_url if context.target else None,
            comment_url=(comment or {}).get("html_url"),
        )

    context.branch = await reconcile_branch(context, gh)
    written = await materialize_files(context, context.branch.name, gh)

    if context.target is not None:
        pr = await publish_update(context, context.target, gh)
        status = "updated"
    else:
        pr = await publish_new(context, context.branch.name, gh)
        status = "created"

    return RunResult(
        status=status,
        summary=context.proposal.summary,
        branch=context.branch.name,
        files_written=written,
        pr_number=pr.get("number"),
        pr_url=pr.get("html_url"),
    )
