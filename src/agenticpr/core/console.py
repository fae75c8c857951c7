"""
Console output for AgenticPR runs.

Every line is printed with the `[AgenticPR]` prefix. When running inside
GitHub Actions, warnings, notices and errors are also emitted as workflow
commands so they show up as annotations on the run.
"""
from __future__ import annotations

import os
import sys

PREFIX = "[AgenticPR]"


def _in_actions() -> bool:
    return os.getenv("GITHUB_ACTIONS", "").lower() == "true"


def _escape_command_data(message: str) -> str:
    # Workflow command payloads must not contain raw newlines or percent signs
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _annotate(command: str, message: str) -> None:
    if _in_actions():
        print(f"::{command}::{_escape_command_data(message)}")


def info(message: str) -> None:
    print(f"{PREFIX} {message}")


def warning(message: str) -> None:
    print(f"{PREFIX} ⚠️ {message}")
    _annotate("warning", message)


def notice(message: str) -> None:
    print(f"{PREFIX} 📣 {message}")
    _annotate("notice", message)


def error(message: str) -> None:
    print(f"{PREFIX} ❌ {message}", file=sys.stderr)
    _annotate("error", message)
