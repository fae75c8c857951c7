from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Verdict = Literal["PATCH", "HUMAN_REVIEW_REQUIRED"]


class ProposedFile(BaseModel):
    """One full-content file the model wants written."""
    model_config = ConfigDict(frozen=True)

    path: str
    content: str

    @field_validator("path")
    @classmethod
    def validate_path(cls, path: str) -> str:
        """Only relative, in-repo paths can be written through the contents API."""
        path = path.strip()
        if not path:
            raise ValueError("file path must not be empty")
        if path.startswith("/") or "\\" in path:
            raise ValueError(f"file path must be relative and use '/': {path!r}")
        if ".." in path.split("/"):
            raise ValueError(f"file path must not leave the repository: {path!r}")
        return path


class Proposal(BaseModel):
    """
    Structured change proposal returned by the model.

    Parsed once per run and never mutated afterwards.
    """
    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    files: list[ProposedFile] = Field(default_factory=list)
    summary: str

    @field_validator("summary")
    @classmethod
    def validate_summary(cls, summary: str) -> str:
        summary = summary.strip()
        if not summary:
            raise ValueError("summary must not be empty")
        return summary

    @field_validator("files", mode="before")
    @classmethod
    def null_files_as_empty(cls, files):
        return [] if files is None else files

    @model_validator(mode="after")
    def require_files_for_patch(self) -> "Proposal":
        if self.verdict == "PATCH" and not self.files:
            raise ValueError("a PATCH proposal must contain at least one file")
        return self

    @property
    def needs_human_review(self) -> bool:
        return self.verdict == "HUMAN_REVIEW_REQUIRED"
