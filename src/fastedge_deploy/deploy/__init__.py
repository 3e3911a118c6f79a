"""Deployment flows for FastEdge applications and secrets."""

from .app import deploy_app, run_deploy_app
from .reconcile import reconcile_secret_slots
from .reporter import GitHubActionsReporter, Reporter
from .secret import deploy_secret, run_deploy_secret

__all__ = [
    "GitHubActionsReporter",
    "Reporter",
    "deploy_app",
    "deploy_secret",
    "reconcile_secret_slots",
    "run_deploy_app",
    "run_deploy_secret",
]
