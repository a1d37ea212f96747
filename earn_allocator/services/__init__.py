"""Execution and notification collaborators."""

from .executor import DryRunExecutor, RebalanceExecutor, plan_moves
from .notifier import (
    LogNotifier,
    Notifier,
    RunNotification,
    WebhookNotifier,
    format_run_message,
)

__all__ = [
    "DryRunExecutor",
    "RebalanceExecutor",
    "plan_moves",
    "LogNotifier",
    "Notifier",
    "RunNotification",
    "WebhookNotifier",
    "format_run_message",
]
