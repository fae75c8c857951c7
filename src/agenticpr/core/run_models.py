from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

from pydantic import BaseModel

from agenticpr.core.config_models import AgenticConfig
from agenticpr.core.types import Proposal

BranchOutcome = Literal["reused", "created", "already_existed"]
RunStatus = Literal["created", "updated", "human_review"]


@dataclass(frozen=True)
class TargetReference:
    """An existing pull request the instruction points at (e.g. `#42`)."""
    number: int
    head_branch: str
    current_title: str
    current_body: str
    html_url: str = ""


@dataclass(frozen=True)
class WorkingBranch:
    """Branch receiving this run's file writes. Resolved once, never renamed."""
    name: str
    outcome: BranchOutcome

    @property
    def created_fresh(self) -> bool:
        return self.outcome == "created"


@dataclass(frozen=True)
class FileWriteIntent:
    path: str
    content_base64: str
    prior_sha: Optional[str] = None

    @property
    def is_update(self) -> bool:
        return self.prior_sha is not None


@dataclass
class RunContext:
    """
    State carried between the reconciliation steps of a single run.

    Each step fills in what it resolves (target, branch) and later steps read
    it back. Nothing here outlives the run.
    """
    owner: str
    repo: str
    default_branch: str
    instruction: str
    config: AgenticConfig = field(default_factory=AgenticConfig)
    proposal: Optional[Proposal] = None
    target: Optional[TargetReference] = None
    branch: Optional[WorkingBranch] = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class RunResult(BaseModel):
    """Outcome of one engine run, returned to the CLI and webhook callers."""
    status: RunStatus
    summary: str
    branch: Optional[str] = None
    files_written: list[str] = []
    pr_number: Optional[int] = None
    pr_url: Optional[str] = None
    comment_url: Optional[str] = None
