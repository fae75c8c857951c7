from agenticpr.reconcile.branches import reconcile_branch
from agenticpr.reconcile.engine import run_agent
from agenticpr.reconcile.materializer import materialize_files
from agenticpr.reconcile.resolver import resolve_reference

__all__ = [
    "materialize_files",
    "reconcile_branch",
    "resolve_reference",
    "run_agent",
]
