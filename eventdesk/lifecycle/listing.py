"""Filtering and sorting for the client and lead lists."""

from collections.abc import Iterable
from enum import Enum
from typing import Literal

from eventdesk.models import Client, Lead

SortOrder = Literal["asc", "desc"]
ClientSortKey = Literal["none", "school", "average_event_size", "number_of_events", "client_score"]
LeadSortKey = Literal["none", "name", "school", "fraternity", "status"]


def _contains(value: str | None, needle: str | None) -> bool:
    if not needle:
        return True
    return needle.strip().lower() in (value or "").lower()


def _sort_value(row: object, key: str) -> object:
    value = getattr(row, key)
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str) or value is None:
        return (value or "").lower()
    return value


def filter_clients(
    clients: Iterable[Client],
    school: str | None = None,
    sort_by: ClientSortKey = "none",
    order: SortOrder = "asc",
) -> list[Client]:
    """Filter clients by school substring and sort by one column."""
    rows = [client for client in clients if _contains(client.school, school)]
    if sort_by != "none":
        rows.sort(key=lambda row: _sort_value(row, sort_by), reverse=order == "desc")
    return rows


def filter_leads(
    leads: Iterable[Lead],
    school: str | None = None,
    fraternity: str | None = None,
    sort_by: LeadSortKey = "none",
    order: SortOrder = "asc",
) -> list[Lead]:
    """Filter leads by school/fraternity substring and sort by one column."""
    rows = [
        lead
        for lead in leads
        if _contains(lead.school, school) and _contains(lead.fraternity, fraternity)
    ]
    if sort_by != "none":
        rows.sort(key=lambda row: _sort_value(row, sort_by), reverse=order == "desc")
    return rows
