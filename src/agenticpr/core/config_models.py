"""
Configuration models for .agenticpr.yml repo config files.

Every field has a default, so a repository without a config file behaves
exactly like one with an empty config.

Security considerations:
- All string fields have length limits
- The branch prefix is restricted to characters git accepts in ref names
- List fields have max item limits
"""
from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

from agenticpr.core import console


# =============================================================================
# LIMITS
# =============================================================================

MAX_SHORT_STRING = 50       # For prefixes and headers
MAX_PATH = 200              # For context file paths
MAX_CONTEXT_FILES = 10      # Max files sampled into the prompt
MAX_CONTEXT_CHARS = 20_000  # Upper bound for the per-file truncation

DEFAULT_CONTEXT_FILES = ["README.md", ".github/workflows/ci.yml"]
DEFAULT_INSTRUCTION = "Improve CI reliability"

# Characters git rejects (or treats specially) inside a ref name
_UNSAFE_REF_CHARS = re.compile(r"[^A-Za-z0-9._/-]")


# =============================================================================
# SECTIONS
# =============================================================================


class ContextConfig(BaseModel):
    """Which files are sampled from the default branch as prompt context."""
    files: list[str] = Field(default_factory=lambda: list(DEFAULT_CONTEXT_FILES))
    max_chars: int = Field(default=1000, ge=0, le=MAX_CONTEXT_CHARS)

    @field_validator("files")
    @classmethod
    def limit_files(cls, files: list[str]) -> list[str]:
        cleaned = [path.strip()[:MAX_PATH] for path in files if path and path.strip()]
        if len(cleaned) > MAX_CONTEXT_FILES:
            console.warning(f"Too many context files ({len(cleaned)}), truncating to {MAX_CONTEXT_FILES}")
            cleaned = cleaned[:MAX_CONTEXT_FILES]
        return cleaned


class BranchConfig(BaseModel):
    prefix: str = Field(default="agentic/", max_length=MAX_SHORT_STRING)

    @field_validator("prefix")
    @classmethod
    def sanitize_prefix(cls, prefix: str) -> str:
        """Keep the prefix usable as the start of refs/heads/<name>."""
        sanitized = _UNSAFE_REF_CHARS.sub("-", prefix.strip()).lstrip("/")
        sanitized = re.sub(r"\.{2,}", ".", sanitized)
        return sanitized or "agentic/"


class PullRequestConfig(BaseModel):
    title_prefix: str = Field(default="Agentic PR:", max_length=MAX_SHORT_STRING)
    attribution: str = Field(default="Proposed by AgenticPR", max_length=MAX_SHORT_STRING)
    draft: bool = True

    @field_validator("title_prefix")
    @classmethod
    def require_title_prefix(cls, title_prefix: str) -> str:
        # An empty prefix would make every title look like an AgenticPR title
        title_prefix = title_prefix.strip()
        if not title_prefix:
            raise ValueError("title_prefix must not be empty")
        return title_prefix


class CommitConfig(BaseModel):
    message_prefix: str = Field(default="agentic:", max_length=MAX_SHORT_STRING)


# =============================================================================
# ROOT CONFIG
# =============================================================================


class AgenticConfig(BaseModel):
    """
    Root configuration model for .agenticpr.yml.

    Example YAML:

    version: 1

    context:
      files:
        - README.md
        - .github/workflows/ci.yml
        - pyproject.toml
      max_chars: 2000

    branch:
      prefix: "bot/agentic-"

    pull_request:
      title_prefix: "Agentic PR:"
      attribution: "Proposed by AgenticPR"
      draft: true

    commit:
      message_prefix: "agentic:"
    """
    version: int = Field(default=1, ge=1, le=10)
    context: ContextConfig = Field(default_factory=ContextConfig)
    branch: BranchConfig = Field(default_factory=BranchConfig)
    pull_request: PullRequestConfig = Field(default_factory=PullRequestConfig)
    commit: CommitConfig = Field(default_factory=CommitConfig)
