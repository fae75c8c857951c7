from __future__ import annotations

import os

import httpx
from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI

from agenticpr.core import console
from agenticpr.core.config_models import ContextConfig
from agenticpr.core.errors import ConfigurationError, ProposalError
from agenticpr.core.parsing import parse_proposal
from agenticpr.core.types import Proposal
from agenticpr.github.client.github_client import GitHubClient
from agenticpr.github.client.repo_api import fetch_file
from agenticpr.prompts.system import SYSTEM_PROMPT, USER_PROMPT

DEFAULT_BASE_URL = "https://ollama.com/v1"
DEFAULT_MODEL = "qwen3-coder:480b-cloud"

_prompt = ChatPromptTemplate.from_messages([
    ("system", SYSTEM_PROMPT),
    ("user", USER_PROMPT),
])


def build_llm() -> BaseChatModel:
    """
    Chat model for the Ollama Cloud OpenAI-compatible endpoint.

    Raises ConfigurationError when OLLAMA_API_KEY is not set.
    """
    api_key = os.getenv("OLLAMA_API_KEY", "")
    if not api_key:
        raise ConfigurationError("Missing OLLAMA_API_KEY")

    return ChatOpenAI(
        model=os.getenv("AGENTIC_MODEL", DEFAULT_MODEL),
        temperature=float(os.getenv("AGENTIC_TEMPERATURE", "0")),
        base_url=os.getenv("OLLAMA_BASE_URL", DEFAULT_BASE_URL),
        api_key=api_key,
    )


async def sample_context(
    owner: str,
    repo: str,
    ref: str,
    settings: ContextConfig,
    gh: GitHubClient,
) -> dict[str, str]:
    """
    Read the configured context files from `ref`, truncated to settings.max_chars.

    Files that are missing or cannot be read show up as empty strings; the
    model still sees which files were asked for.
    """
    sampled: dict[str, str] = {}
    for path in settings.files:
        try:
            repo_file = await fetch_file(owner, repo, path, ref, gh)
        except (httpx.HTTPError, ValueError) as read_error:
            console.warning(f"Could not read context file {path}: {read_error}")
            repo_file = None
        sampled[path] = repo_file.text[:settings.max_chars] if repo_file is not None else ""
    return sampled


def format_context(files: dict[str, str]) -> str:
    return "\n".join(f"{path}:\n{text}\n" for path, text in files.items())


async def request_proposal_text(
    instruction: str,
    files: dict[str, str],
    llm: BaseChatModel,
) -> str:
    chain = _prompt | llm
    message = await chain.ainvoke({
        "instruction": instruction,
        "files": format_context(files),
    })
    content = message.content
    if isinstance(content, list):
        # Some providers return content blocks instead of one string
        content = "".join(block if isinstance(block, str) else block.get("text", "") for block in content)
    return content or ""


async def request_proposal(
    instruction: str,
    files: dict[str, str],
    llm: BaseChatModel,
) -> Proposal:
    """
    Ask the model for a change proposal and parse it.

    Raises ProposalError when the answer holds no valid proposal.
    """
    console.info("🤖 Calling model...")
    text = await request_proposal_text(instruction, files, llm)

    console.info("🔎 Parsing model response...")
    parsed = parse_proposal(text)
    if not parsed.ok:
        raise ProposalError(parsed.error)

    proposal = parsed.proposal
    console.info(f"📊 Model verdict {proposal.verdict} with {len(proposal.files)} file(s): {proposal.summary}")
    return proposal
