"""Application state facade for one signed-in session.

`AppState` holds the user's four collections and exposes the lifecycle
operations the presentation layer calls. After every write the affected
collections are fetched again from the store, except leads, which are
patched in place. Failures never propagate to the caller: each operation
logs the error, records a `Notification`, and returns None.
"""

from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import date
from typing import Literal, TypeVar

from eventdesk.calendar_items import (
    CalendarItem,
    EventCalendarItem,
    ExternalCalendarItem,
    InquiryCalendarItem,
    external_items,
    items_on,
)
from eventdesk.core.errors import EventDeskError
from eventdesk.core.logging import get_logger
from eventdesk.integrations.docusign import (
    DocuSignClient,
    InquiryContractRequest,
    SendDocumentRequest,
)
from eventdesk.integrations.google_calendar import GoogleCalendarClient
from eventdesk.lifecycle import (
    DashboardSummary,
    InquiryLifecycleEngine,
    ToggleResult,
    summarize_dashboard,
)
from eventdesk.models import Client, Event, Inquiry, Lead
from eventdesk.schemas import (
    ClientDetails,
    EventUpdate,
    InquiryDetails,
    LeadConversion,
    LeadDetails,
    LeadUpdate,
)
from eventdesk.store import Store

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Notification:
    level: Literal["success", "info", "error"]
    message: str


@dataclass
class AppState:
    """Per-session state: collections, notifications, lifecycle operations."""

    engine: InquiryLifecycleEngine
    store: Store
    user_id: str
    calendar: GoogleCalendarClient | None = None
    docusign: DocuSignClient | None = None

    clients: list[Client] = field(default_factory=list)
    inquiries: list[Inquiry] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    leads: list[Lead] = field(default_factory=list)
    external_events: list[ExternalCalendarItem] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)

    def notify(self, level: Literal["success", "info", "error"], message: str) -> None:
        self.notifications.append(Notification(level, message))

    def drain_notifications(self) -> list[Notification]:
        """Return pending notifications and clear them."""
        pending, self.notifications = self.notifications, []
        return pending

    async def _guard(self, operation: str, call: Awaitable[T]) -> T | None:
        try:
            return await call
        except EventDeskError as exc:
            logger.error(
                "app_state_operation_failed",
                operation=operation,
                user_id=self.user_id,
                error=exc.message,
            )
            self.notify("error", exc.message)
            return None

    # Loading

    async def refresh(self) -> None:
        """Finish stalled promotions, then load every collection."""
        resumed = await self._guard(
            "resume_promotions", self.engine.resume_promotions(self.user_id)
        )
        for result in resumed or []:
            self.notify("info", f'Finished booking "{result.event.event_name}".')
        await self._guard("refresh", self._fetch_all())

    async def _fetch_all(self) -> None:
        await self._fetch_clients()
        await self._fetch_inquiries()
        await self._fetch_events()
        self.leads = await self.store.select(Lead, self.user_id)

    async def _fetch_clients(self) -> None:
        self.clients = await self.store.select(Client, self.user_id)

    async def _fetch_inquiries(self) -> None:
        self.inquiries = await self.store.select(Inquiry, self.user_id)

    async def _fetch_events(self) -> None:
        self.events = await self.store.select(
            Event, self.user_id, order_by=Event.event_date
        )

    # Clients

    async def add_client(self, details: ClientDetails) -> Client | None:
        client = await self._guard(
            "add_client", self.engine.add_client(self.user_id, details)
        )
        if client is not None:
            self.notify("success", "New client added successfully!")
            await self._guard("refresh", self._fetch_clients())
        return client

    async def update_client(self, client_id: int, details: ClientDetails) -> Client | None:
        client = await self._guard(
            "update_client", self.engine.update_client(self.user_id, client_id, details)
        )
        if client is not None:
            self.notify("success", "Client updated successfully!")
            await self._guard("refresh", self._fetch_clients())
        return client

    # Inquiries

    async def add_inquiry(
        self, details: InquiryDetails, existing_client_id: int | None = None
    ) -> Inquiry | None:
        known = {client.id for client in self.clients}
        inquiry = await self._guard(
            "add_inquiry",
            self.engine.add_inquiry(self.user_id, details, existing_client_id),
        )
        if inquiry is None:
            return None
        self.notify("success", "New inquiry added!")
        if inquiry.client_id not in known:
            self.notify(
                "success",
                f'New client "{details.fraternity} - {details.school}" added from inquiry!',
            )
        await self._guard("refresh", self._fetch_clients())
        await self._guard("refresh", self._fetch_inquiries())
        return inquiry

    async def update_inquiry(
        self, inquiry_id: int, details: InquiryDetails
    ) -> Inquiry | None:
        inquiry = await self._guard(
            "update_inquiry",
            self.engine.update_inquiry(self.user_id, inquiry_id, details),
        )
        if inquiry is not None:
            self.notify("success", "Inquiry updated successfully!")
            await self._guard("refresh", self._fetch_inquiries())
        return inquiry

    async def toggle_inquiry_task(
        self, inquiry_id: int, task_id: str
    ) -> ToggleResult | None:
        result = await self._guard(
            "toggle_inquiry_task",
            self.engine.toggle_inquiry_task(self.user_id, inquiry_id, task_id),
        )
        if result is not None and result.promoted:
            self.notify(
                "success",
                f'Inquiry "{result.event.fraternity}" completed! Moving to Events.',
            )
            if result.calendar_error:
                self.notify(
                    "error", f"Could not add event to Google Calendar: {result.calendar_error}"
                )
            elif result.calendar_synced:
                self.notify("success", "Event added to Google Calendar.")
        # A failed promotion may still have written some steps.
        await self._guard("refresh", self._fetch_all())
        return result

    # Events

    async def toggle_event_task(self, event_id: int, task_id: str) -> Event | None:
        event = await self._guard(
            "toggle_event_task",
            self.engine.toggle_event_task(self.user_id, event_id, task_id),
        )
        if event is not None:
            await self._guard("refresh", self._fetch_events())
        return event

    async def update_event(self, event_id: int, update: EventUpdate) -> Event | None:
        event = await self._guard(
            "update_event", self.engine.update_event(self.user_id, event_id, update)
        )
        if event is not None:
            self.notify("success", "Event updated successfully!")
            await self._guard("refresh", self._fetch_events())
        return event

    # Leads

    def _replace_lead(self, lead: Lead) -> None:
        self.leads = [lead if row.id == lead.id else row for row in self.leads]

    async def add_lead(self, details: LeadDetails) -> Lead | None:
        lead = await self._guard("add_lead", self.engine.add_lead(self.user_id, details))
        if lead is not None:
            self.leads.append(lead)
            self.notify("success", "Lead added successfully!")
        return lead

    async def update_lead(self, lead_id: int, update: LeadUpdate) -> Lead | None:
        lead = await self._guard(
            "update_lead", self.engine.update_lead(self.user_id, lead_id, update)
        )
        if lead is not None:
            self._replace_lead(lead)
            self.notify("success", "Lead updated successfully!")
        return lead

    async def delete_lead(self, lead_id: int) -> bool:
        deleted = await self._guard(
            "delete_lead", self._delete_lead(lead_id)
        )
        return bool(deleted)

    async def _delete_lead(self, lead_id: int) -> bool:
        await self.engine.delete_lead(self.user_id, lead_id)
        self.leads = [row for row in self.leads if row.id != lead_id]
        self.notify("success", "Lead deleted.")
        return True

    async def import_leads(self, content: str | bytes) -> list[Lead] | None:
        leads = await self._guard(
            "import_leads", self.engine.import_leads(self.user_id, content)
        )
        if leads is not None:
            self.leads.extend(leads)
            self.notify("success", f"Imported {len(leads)} leads.")
        return leads

    async def convert_lead(
        self, lead_id: int, conversion: LeadConversion
    ) -> Inquiry | None:
        inquiry = await self._guard(
            "convert_lead", self.engine.convert_lead(self.user_id, lead_id, conversion)
        )
        if inquiry is None:
            return None
        self.notify("success", "Lead converted to inquiry!")
        await self._guard("refresh", self._fetch_all())
        return inquiry

    # Integrations

    async def load_external_events(
        self, time_min: str | None = None, time_max: str | None = None
    ) -> list[ExternalCalendarItem] | None:
        """Pull upcoming Google Calendar entries into the calendar view."""
        if self.calendar is None:
            self.notify("error", "Google Calendar is not available")
            return None
        items = await self._guard(
            "load_external_events",
            self.calendar.list_events(self.user_id, time_min, time_max),
        )
        if items is None:
            return None
        self.external_events = external_items(items)
        return self.external_events

    async def send_contract(self, request: SendDocumentRequest) -> dict | None:
        if self.docusign is None:
            self.notify("error", "DocuSign is not available")
            return None
        result = await self._guard(
            "send_contract", self.docusign.send_document(self.user_id, request)
        )
        if result is not None:
            self.notify("success", f"Contract sent to {request.recipient_email}!")
        return result

    async def send_contract_for_inquiry(self, request: InquiryContractRequest) -> dict | None:
        """Send the default contract template filled from one of the inquiries."""
        if self.docusign is None:
            self.notify("error", "DocuSign is not available")
            return None
        result = await self._guard(
            "send_contract_for_inquiry",
            self.docusign.send_inquiry_contract(self.user_id, request),
        )
        if result is not None:
            self.notify("success", f"Contract sent to {request.recipient_email}!")
        return result

    # Views

    def calendar_items(self, on: date | None = None) -> list[CalendarItem]:
        """Inquiries, events and external entries, optionally for one day."""
        items: list[CalendarItem] = [
            *(InquiryCalendarItem.from_inquiry(inquiry) for inquiry in self.inquiries),
            *(EventCalendarItem.from_event(event) for event in self.events),
            *self.external_events,
        ]
        if on is None:
            return items
        return items_on(items, on)

    def dashboard(self, today: date | None = None) -> DashboardSummary:
        return summarize_dashboard(self.clients, self.events, today)
