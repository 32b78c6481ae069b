"""Inquiry lifecycle: metrics, checklists, state machine and engine."""

from eventdesk.lifecycle.engine import InquiryLifecycleEngine, ToggleResult
from eventdesk.lifecycle.leads import parse_leads_csv
from eventdesk.lifecycle.listing import filter_clients, filter_leads
from eventdesk.lifecycle.metrics import (
    DashboardSummary,
    compute_client_score,
    compute_progress,
    summarize_dashboard,
    update_running_average,
)
from eventdesk.lifecycle.state_machine import InquiryStateMachine
from eventdesk.lifecycle.tasks import build_event_tasks, event_task_names

__all__ = [
    "DashboardSummary",
    "InquiryLifecycleEngine",
    "InquiryStateMachine",
    "ToggleResult",
    "build_event_tasks",
    "compute_client_score",
    "compute_progress",
    "event_task_names",
    "filter_clients",
    "filter_leads",
    "parse_leads_csv",
    "summarize_dashboard",
    "update_running_average",
]
