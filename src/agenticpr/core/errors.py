from __future__ import annotations


class AgenticError(Exception):
    """Base class for errors raised by AgenticPR itself (not by the GitHub API)."""


class ConfigurationError(AgenticError, RuntimeError):
    """A required credential or setting is missing. Raised before any mutation."""


class ProposalError(AgenticError, ValueError):
    """The model output could not be turned into a valid Proposal."""
