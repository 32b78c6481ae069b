"""Checklist generation for inquiries and events."""

import uuid
from datetime import date, datetime, time
from typing import Any

from eventdesk.models import Inquiry

DEFAULT_INQUIRY_TASKS = ("Rendering", "Contract", "Deposit")
PAID_IN_FULL_TASK = "Paid(Full)"
FALLBACK_EVENT_TASK = "Event Logistics"

# Power the client already has on site
POWER_NOT_SOURCED = ("None", "Provided")
HOUSE_AUDIO = "QSC Rig"
HOUSE_CDJS = 2


def new_task(name: str) -> dict[str, Any]:
    """Build a fresh, uncompleted checklist item."""
    return {"id": uuid.uuid4().hex, "name": name, "completed": False}


def default_inquiry_tasks() -> list[dict[str, Any]]:
    """Checklist every new inquiry starts with."""
    return [new_task(name) for name in DEFAULT_INQUIRY_TASKS]


def event_task_names(inquiry: Inquiry) -> list[str]:
    """Names of the sourcing tasks an inquiry implies, in display order.

    A task is generated for each piece of equipment the client does not
    already provide. "Paid(Full)" is always last.
    """
    names: list[str] = []
    if inquiry.power not in POWER_NOT_SOURCED:
        names.append(f"Source {inquiry.power}")
    if not inquiry.gates:
        names.append("Source Gates")
    if not inquiry.security:
        names.append("Source Security")
    if inquiry.co2_tanks > 0:
        names.append(f"Source {inquiry.co2_tanks} CO2 Tanks")
    if inquiry.cdjs > HOUSE_CDJS:
        names.append(f"Source {inquiry.cdjs} CDJs")
    if inquiry.audio != HOUSE_AUDIO:
        names.append(f"Source {inquiry.audio} Audio")

    if not names:
        names.append(FALLBACK_EVENT_TASK)
    names.append(PAID_IN_FULL_TASK)
    return names


def build_event_tasks(inquiry: Inquiry) -> list[dict[str, Any]]:
    """Event checklist for a completed inquiry."""
    return [new_task(name) for name in event_task_names(inquiry)]


def toggle_task(tasks: list[dict[str, Any]], task_id: str) -> list[dict[str, Any]] | None:
    """Return a copy of `tasks` with one item flipped, or None if it is absent."""
    if not any(task["id"] == task_id for task in tasks):
        return None
    return [
        {**task, "completed": not task["completed"]} if task["id"] == task_id else dict(task)
        for task in tasks
    ]


def combine_event_date(inquiry_date: date | datetime, inquiry_time: str | None) -> datetime:
    """Place the inquiry's wall-clock time on its calendar date.

    Any time already carried by `inquiry_date` is discarded. A missing or
    malformed time falls back to midnight.
    """
    day = inquiry_date.date() if isinstance(inquiry_date, datetime) else inquiry_date
    try:
        hours, minutes = (int(part) for part in (inquiry_time or "").split(":")[:2])
        clock = time(hour=hours, minute=minutes)
    except ValueError:
        clock = time()
    return datetime.combine(day, clock)
