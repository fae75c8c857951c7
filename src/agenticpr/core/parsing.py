"""
Parsers for the two free-text inputs of a run: the instruction (which may
point at an existing pull request) and the model output (which should carry
one JSON proposal).

Both return typed results instead of raising, so callers can tell "nothing
there" apart from "something there but unusable".
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Literal, Optional

from pydantic import ValidationError

from agenticpr.core.types import Proposal


# =============================================================================
# REFERENCE MARKERS
# =============================================================================

# "#" followed by digits; the trailing group catches things like "#12abc"
REFERENCE_RE = re.compile(r"#(\d+)(\w*)")

ReferenceKind = Literal["absent", "found", "malformed"]


@dataclass(frozen=True)
class ReferenceParse:
    kind: ReferenceKind
    number: Optional[int] = None
    raw: str = ""
    reason: str = ""

    @property
    def found(self) -> bool:
        return self.kind == "found"


def _classify_marker(match: re.Match) -> ReferenceParse:
    raw = match.group(0)
    digits, trailing = match.group(1), match.group(2)

    if trailing:
        return ReferenceParse(kind="malformed", raw=raw, reason="number is followed by other characters")

    number = int(digits)
    if number < 1:
        return ReferenceParse(kind="malformed", raw=raw, reason="reference numbers start at 1")

    return ReferenceParse(kind="found", number=number, raw=raw)


def parse_reference(text: str) -> ReferenceParse:
    """
    Find the first usable `#<number>` marker in an instruction.

    A `#` that is not directly followed by a digit (markdown headings, tags)
    is not a marker. A marker is malformed when the number is zero or when the
    digits run straight into letters (`#12abc`). Malformed markers are skipped
    in favour of a later usable one; the first malformed marker is reported
    only when no usable marker follows.
    """
    first_malformed: Optional[ReferenceParse] = None

    for match in REFERENCE_RE.finditer(text or ""):
        parsed = _classify_marker(match)
        if parsed.found:
            return parsed
        if first_malformed is None:
            first_malformed = parsed

    return first_malformed or ReferenceParse(kind="absent")


# =============================================================================
# JSON EXTRACTION
# =============================================================================

JsonErrorKind = Literal["no_json", "invalid_json"]


@dataclass(frozen=True)
class JsonParse:
    value: Optional[dict[str, Any]] = None
    error_kind: Optional[JsonErrorKind] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.value is not None


def extract_json_object(text: str) -> JsonParse:
    """
    Return the first top-level JSON object embedded in free text.

    Models wrap their answer in prose or ```json fences, so decoding is tried
    at each `{` that sits outside any object seen so far. Once a brace fails
    to decode, everything up to its matching `}` belongs to that broken
    object; a truncated wrapper never closes, so the objects nested inside it
    are never returned on their own.
    """
    if not text or "{" not in text:
        return JsonParse(error_kind="no_json", error="No JSON object found in model response")

    decoder = json.JSONDecoder()
    last_error = ""
    depth = 0
    in_string = False
    escaped = False

    for index, char in enumerate(text):
        if depth:
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            continue

        if char != "{":
            continue

        try:
            value, _ = decoder.raw_decode(text, index)
        except json.JSONDecodeError as decode_error:
            last_error = str(decode_error)
            depth = 1
            continue

        if isinstance(value, dict):
            return JsonParse(value=value)

    return JsonParse(error_kind="invalid_json", error=f"Model response contains no valid JSON object ({last_error})")


# =============================================================================
# PROPOSALS
# =============================================================================


@dataclass(frozen=True)
class ProposalParse:
    proposal: Optional[Proposal] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.proposal is not None


def _format_validation_error(validation_error: ValidationError) -> str:
    problems = []
    for problem in validation_error.errors():
        location = ".".join(str(part) for part in problem.get("loc", ())) or "proposal"
        problems.append(f"{location}: {problem.get('msg', 'invalid')}")
    return "; ".join(problems)


def parse_proposal(text: str) -> ProposalParse:
    """Extract and validate a Proposal from raw model output."""
    extracted = extract_json_object(text)
    if not extracted.ok:
        return ProposalParse(error=extracted.error)

    try:
        proposal = Proposal.model_validate(extracted.value)
    except ValidationError as validation_error:
        return ProposalParse(error=f"Model output is not a valid proposal: {_format_validation_error(validation_error)}")

    return ProposalParse(proposal=proposal)
