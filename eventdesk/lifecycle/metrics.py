"""Progress and client metrics.

Pure functions; the lifecycle engine and the dashboard call them, nothing
here touches the store.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from eventdesk.models import Client, Event


def compute_progress(tasks: Sequence[Mapping[str, Any]]) -> float:
    """Percentage of completed tasks; an empty list is 0% done."""
    if not tasks:
        return 0
    completed = sum(1 for task in tasks if task.get("completed"))
    return completed / len(tasks) * 100


def compute_client_score(number_of_events: int, average_event_size: float) -> float:
    """Client score: events booked weighted by average budget, in thousands."""
    return number_of_events * average_event_size / 1000


def update_running_average(old_avg: float, old_count: int, new_value: float) -> float:
    """Fold one more value into a running mean.

    With `old_count == 0` the result is `new_value` whatever `old_avg` holds.
    """
    return (old_avg * old_count + new_value) / (old_count + 1)


@dataclass(frozen=True)
class DashboardSummary:
    """Headline numbers for the dashboard."""

    total_revenue: float
    events_this_year: int
    total_clients: int
    average_client_score: float


def summarize_dashboard(
    clients: Iterable[Client],
    events: Iterable[Event],
    today: date | None = None,
) -> DashboardSummary:
    """Compute the dashboard headline numbers from the loaded collections."""
    today = today or date.today()
    clients = list(clients)
    events = list(events)

    total_revenue = sum(event.budget for event in events)
    events_this_year = sum(1 for event in events if event.event_date.year == today.year)
    average_score = (
        sum(client.client_score for client in clients) / len(clients) if clients else 0
    )
    return DashboardSummary(
        total_revenue=total_revenue,
        events_this_year=events_this_year,
        total_clients=len(clients),
        average_client_score=average_score,
    )
