import os
import hmac
import hashlib
import traceback

import httpx
from fastapi import FastAPI, Request, HTTPException
from dotenv import load_dotenv

from agenticpr.core import console
from agenticpr.core.config_models import DEFAULT_INSTRUCTION
from agenticpr.github.auth import resolve_token
from agenticpr.github.client.github_client import GitHubClient
from agenticpr.github.client.pr_api import post_issue_comment
from agenticpr.reconcile.engine import run_agent

load_dotenv()

COMMAND = "/agentic"

app = FastAPI()

@app.get("/health")
def health():
    return {"ok": True}

def _verify_github_signature(raw_body: bytes, signature_header: str | None) -> None:
    """Verify X-Hub-Signature-256 using your webhook secret."""
    secret = os.getenv("GITHUB_WEBHOOK_SECRET", "")
    if not secret:
        raise HTTPException(status_code=500, detail="Missing GITHUB_WEBHOOK_SECRET")

    if not signature_header or not signature_header.startswith("sha256="):
        raise HTTPException(status_code=401, detail="Missing/invalid signature header")

    expected = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
    received = signature_header.removeprefix("sha256=")

    if not hmac.compare_digest(expected, received):
        raise HTTPException(status_code=401, detail="Invalid signature")

def _command_instruction(payload: dict) -> str | None:
    """Instruction text after `/agentic`, or None when the comment is not a command."""
    comment = payload.get("comment") or {}
    body = (comment.get("body") or "").strip()
    if body != COMMAND and not body.startswith(COMMAND + " ") and not body.startswith(COMMAND + "\n"):
        return None
    return body[len(COMMAND):].strip() or DEFAULT_INSTRUCTION

@app.post("/github/webhook")
async def github_webhook(request: Request):
    raw = await request.body()
    event = request.headers.get("X-GitHub-Event", "")
    sig = request.headers.get("X-Hub-Signature-256")

    # Verify authenticity (do this before parsing)
    _verify_github_signature(raw, sig)

    payload = await request.json()

    if event == "ping":
        return {"ok": True, "msg": "pong"}

    if event != "issue_comment" or payload.get("action") != "created":
        return {"ok": True, "triggered": False}

    instruction = _command_instruction(payload)
    if instruction is None:
        return {"ok": True, "triggered": False}

    repo_full = payload["repository"]["full_name"]
    owner, repo_name = repo_full.split("/")
    issue_number = int(payload["issue"]["number"])
    installation = payload.get("installation") or {}
    installation_id = int(installation["id"]) if installation.get("id") else None

    gh = None
    try:
        console.info(f"🔔 Command on {owner}/{repo_name} #{issue_number}: {instruction!r}")
        token = await resolve_token(installation_id)
        gh = GitHubClient(token)

        result = await run_agent(instruction, owner, repo_name, gh)

        console.info(f"✅ Run finished: {result.status} {result.pr_url or ''}".rstrip())
        return {"ok": True, "triggered": True, **result.model_dump()}

    except Exception as error:
        console.error(f"ERROR: {error}")
        traceback.print_exc()

        # Post error feedback where the command was issued
        if gh is not None:
            try:
                error_message = (
                    f"AgenticPR run failed.\n\n"
                    f"```\n{str(error)}\n```\n\n"
                    f"_Partial changes (branch, file commits) are not rolled back._"
                )
                await post_issue_comment(owner, repo_name, issue_number, error_message, gh)
            except httpx.HTTPError as comment_error:
                console.warning(f"Failed to post error comment: {comment_error}")

        return {"ok": False, "triggered": True, "error": str(error)}
