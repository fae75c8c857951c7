"""
GitHub API functions for fetching .agenticpr.yml config files.
"""
from __future__ import annotations

import httpx
import yaml
from pydantic import ValidationError

from agenticpr.core import console
from agenticpr.core.config_models import AgenticConfig
from agenticpr.github.client.github_client import GitHubClient
from agenticpr.github.client.repo_api import fetch_file


# Config file locations to try (in order)
CONFIG_PATHS = [
    ".agenticpr.yml",
    ".github/.agenticpr.yml",
]


async def fetch_agentic_config(
    owner: str,
    repo: str,
    ref: str,
    gh: GitHubClient,
) -> AgenticConfig | None:
    """
    Fetch and parse .agenticpr.yml from the repository.

    Attempts to load from:
    1. .agenticpr.yml (repo root)
    2. .github/.agenticpr.yml

    Args:
        owner: Repository owner
        repo: Repository name
        ref: Git ref to read from - the default branch, so a PR cannot change
             the rules it is built with
        gh: Authenticated GitHub client

    Returns:
        Parsed AgenticConfig if found and valid, None otherwise.
    """
    for config_path in CONFIG_PATHS:
        config = await _try_fetch_config(owner, repo, ref, config_path, gh)
        if config is not None:
            return config

    return None


async def load_agentic_config(owner: str, repo: str, ref: str, gh: GitHubClient) -> AgenticConfig:
    """Like fetch_agentic_config, but falls back to defaults."""
    config = await fetch_agentic_config(owner, repo, ref, gh)
    if config is None:
        console.info(f"📋 No usable .agenticpr.yml on {ref}, using defaults")
        return AgenticConfig()
    return config


async def _try_fetch_config(
    owner: str,
    repo: str,
    ref: str,
    path: str,
    gh: GitHubClient,
) -> AgenticConfig | None:
    """
    Attempt to fetch and parse config from a specific path.

    Returns None if file not found, invalid YAML, or validation fails.
    """
    try:
        repo_file = await fetch_file(owner, repo, path, ref, gh)
    except (httpx.HTTPError, ValueError) as fetch_error:
        console.warning(f"Failed to fetch config from {path}: {fetch_error}")
        return None

    if repo_file is None:
        return None

    if not repo_file.text.strip():
        console.warning(f"Config file {path} has no content")
        return None

    try:
        yaml_data = yaml.safe_load(repo_file.text)
    except yaml.YAMLError as yaml_error:
        console.warning(f"Invalid YAML in {path}: {yaml_error}")
        return None

    if not isinstance(yaml_data, dict):
        console.warning(f"Config file {path} is empty or not a mapping")
        return None

    try:
        config = AgenticConfig.model_validate(yaml_data)
    except ValidationError as validation_error:
        console.warning(f"Invalid config structure in {path}: {validation_error}")
        return None

    console.info(f"📋 Loaded config from {path}")
    return config
