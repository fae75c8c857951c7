from __future__ import annotations

import json

import pytest

from agenticpr.core.parsing import extract_json_object, parse_proposal, parse_reference


# =============================================================================
# REFERENCE MARKERS
# =============================================================================


def test_instruction_without_marker_has_no_reference() -> None:
    result = parse_reference("Improve CI reliability")

    assert result.kind == "absent"
    assert result.number is None


@pytest.mark.parametrize(
    ("instruction", "number"),
    [
        ("please fix #42", 42),
        ("PR #7: add caching", 7),
        ("#13", 13),
        ("update #5 and also #9", 5),
        ("see #007", 7),
    ],
)
def test_first_marker_is_found(instruction: str, number: int) -> None:
    result = parse_reference(instruction)

    assert result.found
    assert result.number == number


@pytest.mark.parametrize("instruction", ["# Heading\nfix lint", "tag #ci please", "C# build", ""])
def test_hash_without_digits_is_not_a_marker(instruction: str) -> None:
    assert parse_reference(instruction).kind == "absent"


@pytest.mark.parametrize(
    ("instruction", "number"),
    [
        ("#1a2b3c, then fix #42", 42),
        ("fix #0 or rather #7", 7),
    ],
)
def test_malformed_marker_does_not_hide_later_marker(instruction: str, number: int) -> None:
    result = parse_reference(instruction)

    assert result.found
    assert result.number == number


@pytest.mark.parametrize("instruction", ["fix #0", "fix #12abc", "fix #000", "fix #0 and #12abc"])
def test_unusable_marker_is_malformed(instruction: str) -> None:
    result = parse_reference(instruction)

    assert result.kind == "malformed"
    assert result.number is None
    assert result.raw.startswith("#")
    assert result.reason


# =============================================================================
# JSON EXTRACTION
# =============================================================================


def test_extracts_object_surrounded_by_prose() -> None:
    text = 'Sure! Here is the change:\n```json\n{"verdict": "PATCH", "nested": {"a": 1}}\n```\nLet me know.'

    result = extract_json_object(text)

    assert result.ok
    assert result.value == {"verdict": "PATCH", "nested": {"a": 1}}


def test_skips_braces_that_do_not_start_valid_json() -> None:
    text = 'Use {placeholders} like this: {"summary": "ok"}'

    result = extract_json_object(text)

    assert result.value == {"summary": "ok"}


def test_returns_first_of_several_objects() -> None:
    result = extract_json_object('{"first": 1} and then {"second": 2}')

    assert result.value == {"first": 1}


def test_braces_inside_strings_do_not_confuse_extraction() -> None:
    result = extract_json_object('{"content": "fn() { return 1; }", "n": 2}')

    assert result.value == {"content": "fn() { return 1; }", "n": 2}


def test_text_without_braces_is_no_json() -> None:
    result = extract_json_object("I could not decide on a change.")

    assert not result.ok
    assert result.error_kind == "no_json"


def test_broken_object_is_invalid_json() -> None:
    result = extract_json_object('{"verdict": "PATCH", "files": [}')

    assert not result.ok
    assert result.error_kind == "invalid_json"


def test_objects_nested_in_truncated_wrapper_are_not_returned() -> None:
    inner = {"verdict": "PATCH", "files": [{"path": "a.txt", "content": "x"}], "summary": "s"}
    text = '{"analysis": "ok", "proposal": ' + json.dumps(inner)

    result = extract_json_object(text)

    assert not result.ok
    assert result.error_kind == "invalid_json"


def test_object_after_broken_one_is_still_found() -> None:
    result = extract_json_object('Draft: {"a": [} \nFinal: {"summary": "ok"}')

    assert result.value == {"summary": "ok"}


# =============================================================================
# PROPOSALS
# =============================================================================


def test_parses_patch_proposal() -> None:
    text = '{"verdict": "PATCH", "files": [{"path": "a.txt", "content": "x"}], "summary": " add a "}'

    result = parse_proposal(text)

    assert result.ok
    assert result.proposal.verdict == "PATCH"
    assert result.proposal.summary == "add a"
    assert [f.path for f in result.proposal.files] == ["a.txt"]


def test_human_review_proposal_may_omit_files() -> None:
    result = parse_proposal('{"verdict": "HUMAN_REVIEW_REQUIRED", "summary": "risky"}')

    assert result.ok
    assert result.proposal.needs_human_review
    assert result.proposal.files == []


def test_human_review_proposal_may_have_null_files() -> None:
    result = parse_proposal('{"verdict": "HUMAN_REVIEW_REQUIRED", "files": null, "summary": "risky"}')

    assert result.ok
    assert result.proposal.files == []


@pytest.mark.parametrize(
    "text",
    [
        '{"verdict": "PATCH", "files": [], "summary": "nothing"}',
        '{"verdict": "PATCH", "files": null, "summary": "nothing"}',
        '{"verdict": "PATCH", "summary": "nothing"}',
        '{"verdict": "PATCH", "files": "a.txt", "summary": "bad files"}',
        '{"verdict": "MAYBE", "files": [], "summary": "x"}',
        '{"verdict": "PATCH", "files": [{"path": "a.txt", "content": "x"}]}',
        '{"verdict": "PATCH", "files": [{"path": "../etc/passwd", "content": "x"}], "summary": "x"}',
        '{"verdict": "PATCH", "files": [{"path": "/abs.txt", "content": "x"}], "summary": "x"}',
        '{"verdict": "PATCH", "files": [{"path": "a.txt", "content": "x"}], "summary": "   "}',
    ],
)
def test_invalid_proposals_are_reported_not_raised(text: str) -> None:
    result = parse_proposal(text)

    assert not result.ok
    assert result.proposal is None
    assert "not a valid proposal" in result.error


def test_missing_json_reports_extraction_error() -> None:
    result = parse_proposal("no json here")

    assert not result.ok
    assert result.error == "No JSON object found in model response"
