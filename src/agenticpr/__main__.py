import argparse
import asyncio
import os
import sys
import traceback

import uvicorn
from dotenv import load_dotenv

from agenticpr.agents.proposer import build_llm
from agenticpr.core import console
from agenticpr.core.config_models import DEFAULT_INSTRUCTION
from agenticpr.core.errors import ConfigurationError
from agenticpr.github.auth import resolve_token
from agenticpr.github.client.github_client import GitHubClient
from agenticpr.reconcile.engine import run_agent


def _split_repo(full_name: str) -> tuple[str, str]:
    owner, sep, name = full_name.partition("/")
    if not owner or not name or sep != "/":
        raise ConfigurationError(f"Repository must be in owner/name format: {full_name!r}")
    return owner, name


async def _run(repo_full: str, instruction: str) -> int:
    owner, repo = _split_repo(repo_full)

    # Resolve both credentials before touching the repository
    llm = build_llm()
    gh = GitHubClient(await resolve_token())

    result = await run_agent(instruction, owner, repo, gh, llm=llm)
    console.info(f"✅ Run finished: {result.status} {result.pr_url or ''}".rstrip())
    return 0


def run_command(args: argparse.Namespace) -> int:
    repo_full = args.repo or os.getenv("GITHUB_REPOSITORY", "")
    instruction = args.instruction or os.getenv("INPUT_COMMENT_BODY", "").strip() or DEFAULT_INSTRUCTION

    try:
        if not repo_full:
            raise ConfigurationError("Missing --repo (or GITHUB_REPOSITORY)")
        return asyncio.run(_run(repo_full, instruction))
    except Exception as error:
        console.error(str(error))
        traceback.print_exc()
        return 1


def serve_command(args: argparse.Namespace) -> int:
    port = args.port or int(os.getenv("PORT", "8000"))
    uvicorn.run(
        "agenticpr.github.webhooks.app:app",
        host="0.0.0.0",
        port=port,
        reload=args.reload,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agenticpr", description="Turn an instruction into a pull request.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run once (GitHub Action / local)")
    run_parser.add_argument("--repo", help="owner/name (default: GITHUB_REPOSITORY)")
    run_parser.add_argument("--instruction", help="Instruction text (default: INPUT_COMMENT_BODY)")
    run_parser.set_defaults(handler=run_command)

    serve_parser = subparsers.add_parser("serve", help="Serve the GitHub webhook app")
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.add_argument("--reload", action="store_true")
    serve_parser.set_defaults(handler=serve_command)

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
