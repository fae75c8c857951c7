"""Shared fixtures for AgenticPR tests: a fake GitHub repository served by respx."""

from __future__ import annotations

import base64
import json

import httpx
import pytest
import respx

from agenticpr.core.config_models import AgenticConfig
from agenticpr.core.run_models import RunContext
from agenticpr.core.types import Proposal
from agenticpr.github.client.github_client import GitHubClient

API = "https://api.github.com"
OWNER = "octo"
REPO = "widgets"
REPO_PATH = f"/repos/{OWNER}/{REPO}"
TRUNK = "main"
TRUNK_SHA = "trunk-commit-sha"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GITHUB_API_URL",
        "GITHUB_ACTIONS",
        "GITHUB_TOKEN",
        "GITHUB_INSTALLATION_ID",
        "GITHUB_APP_ID",
        "GITHUB_PRIVATE_KEY_PEM",
        "GITHUB_PRIVATE_KEY_PATH",
        "OLLAMA_API_KEY",
        "GITHUB_REPOSITORY",
        "INPUT_COMMENT_BODY",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def gh() -> GitHubClient:
    return GitHubClient("test-token", api_url=API)


def make_proposal(**overrides) -> Proposal:
    data = {
        "verdict": "PATCH",
        "files": [{"path": ".github/workflows/ci.yml", "content": "name: ci\n"}],
        "summary": "add retry step",
    }
    data.update(overrides)
    return Proposal.model_validate(data)


def make_context(proposal: Proposal | None = None, **overrides) -> RunContext:
    values = {
        "owner": OWNER,
        "repo": REPO,
        "default_branch": TRUNK,
        "instruction": "Improve CI reliability",
        "config": AgenticConfig(),
        "proposal": proposal or make_proposal(),
    }
    values.update(overrides)
    return RunContext(**values)


def pr_payload(number: int, head_ref: str, title: str = "Agentic PR: tighten lint", body: str | None = "### Proposed by AgenticPR\n\ntighten lint") -> dict:
    return {
        "number": number,
        "title": title,
        "body": body,
        "html_url": f"https://github.com/{OWNER}/{REPO}/pull/{number}",
        "head": {"ref": head_ref, "repo": {"full_name": f"{OWNER}/{REPO}"}},
        "base": {"ref": TRUNK},
    }


def content_payload(path: str, sha: str, text: str = "") -> dict:
    return {
        "type": "file",
        "path": path,
        "sha": sha,
        "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
        "encoding": "base64",
    }


def request_json(route: respx.Route, index: int = 0) -> dict:
    return json.loads(route.calls[index].request.content)


class FakeRepo:
    """
    Minimal in-memory GitHub repository behind respx.

    Keeps branches, files per branch and pull requests, so several engine
    runs against the same PR can be chained.
    """

    def __init__(self, router: respx.MockRouter) -> None:
        self.router = router
        self.branches: dict[str, str] = {TRUNK: TRUNK_SHA}
        self.files: dict[str, dict[str, str]] = {TRUNK: {}}
        self.pulls: dict[int, dict] = {}
        self.comments: list[dict] = []
        self.created_refs: list[str] = []
        self.writes: list[dict] = []
        self.fail_writes: set[str] = set()
        self._next_pr = 100
        self._blob_counter = 0
        self._install()

    def add_file(self, branch: str, path: str, text: str) -> str:
        self._blob_counter += 1
        sha = f"blob-{self._blob_counter}"
        self.files.setdefault(branch, {})[path] = sha
        return sha

    def add_pull(self, number: int, head_ref: str, **kwargs) -> dict:
        self.branches.setdefault(head_ref, TRUNK_SHA)
        self.files.setdefault(head_ref, dict(self.files[TRUNK]))
        self.pulls[number] = pr_payload(number, head_ref, **kwargs)
        return self.pulls[number]

    # -- routes ---------------------------------------------------------------

    def _install(self) -> None:
        r = self.router
        r.get(f"{API}{REPO_PATH}").mock(return_value=httpx.Response(200, json={"default_branch": TRUNK}))
        r.get(path__regex=rf"^{REPO_PATH}/contents/(?P<path>.+)$").mock(side_effect=self._get_content)
        r.put(path__regex=rf"^{REPO_PATH}/contents/(?P<path>.+)$").mock(side_effect=self._put_content)
        r.get(path__regex=rf"^{REPO_PATH}/git/ref/heads/(?P<branch>.+)$").mock(side_effect=self._get_ref)
        r.post(f"{API}{REPO_PATH}/git/refs").mock(side_effect=self._create_ref)
        r.get(path__regex=rf"^{REPO_PATH}/pulls/(?P<number>\d+)$").mock(side_effect=self._get_pull)
        r.patch(path__regex=rf"^{REPO_PATH}/pulls/(?P<number>\d+)$").mock(side_effect=self._update_pull)
        r.post(f"{API}{REPO_PATH}/pulls").mock(side_effect=self._create_pull)
        r.post(path__regex=rf"^{REPO_PATH}/issues/(?P<number>\d+)/comments$").mock(side_effect=self._comment)

    def _get_content(self, request: httpx.Request, path: str) -> httpx.Response:
        ref = request.url.params.get("ref", TRUNK)
        sha = self.files.get(ref, {}).get(path)
        if sha is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json=content_payload(path, sha))

    def _put_content(self, request: httpx.Request, path: str) -> httpx.Response:
        body = json.loads(request.content)
        branch = body["branch"]
        if path in self.fail_writes:
            return httpx.Response(409, json={"message": f"{path} does not match"})
        existing = self.files.get(branch, {}).get(path)
        if existing is not None and body.get("sha") != existing:
            return httpx.Response(422, json={"message": "sha wasn't supplied."})
        self.writes.append({"path": path, **body})
        new_sha = self.add_file(branch, path, "")
        return httpx.Response(201 if existing is None else 200, json={"content": {"path": path, "sha": new_sha}})

    def _get_ref(self, request: httpx.Request, branch: str) -> httpx.Response:
        if branch not in self.branches:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json={"ref": f"refs/heads/{branch}", "object": {"sha": self.branches[branch]}})

    def _create_ref(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        branch = body["ref"].removeprefix("refs/heads/")
        if branch in self.branches:
            return httpx.Response(422, json={"message": "Reference already exists"})
        self.created_refs.append(branch)
        self.branches[branch] = body["sha"]
        self.files[branch] = dict(self.files.get(TRUNK, {}))
        return httpx.Response(201, json={"ref": body["ref"], "object": {"sha": body["sha"]}})

    def _get_pull(self, request: httpx.Request, number: str) -> httpx.Response:
        pull = self.pulls.get(int(number))
        if pull is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json=pull)

    def _update_pull(self, request: httpx.Request, number: str) -> httpx.Response:
        pull = self.pulls[int(number)]
        pull.update(json.loads(request.content))
        return httpx.Response(200, json=pull)

    def _create_pull(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        number = self._next_pr
        self._next_pr += 1
        pull = pr_payload(number, body["head"], title=body["title"], body=body["body"])
        pull["draft"] = body.get("draft", False)
        self.pulls[number] = pull
        return httpx.Response(201, json=pull)

    def _comment(self, request: httpx.Request, number: str) -> httpx.Response:
        body = json.loads(request.content)
        comment = {
            "id": len(self.comments) + 1,
            "issue": int(number),
            "body": body["body"],
            "html_url": f"https://github.com/{OWNER}/{REPO}/issues/{number}#issuecomment-{len(self.comments) + 1}",
        }
        self.comments.append(comment)
        return httpx.Response(201, json=comment)


@pytest.fixture
def fake_repo():
    with respx.mock(assert_all_called=False) as router:
        yield FakeRepo(router)
