from agenticpr.agents.proposer import build_llm, request_proposal, sample_context

__all__ = [
    "build_llm",
    "request_proposal",
    "sample_context",
]
