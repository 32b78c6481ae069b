"""Inquiry lifecycle engine.

Owns the rules that move a sales inquiry through to a booked event:

- creating an inquiry resolves (or creates) its client by fraternity/school
- toggling inquiry tasks recomputes progress
- reaching 100% promotes the inquiry: an event is created with a sourcing
  checklist, the client's aggregates are updated, and the inquiry is deleted

Promotion is a sequence of independent store calls, not one transaction.
Before the first of them the inquiry is marked `promoting`, and every later
step is idempotent (the event is keyed by `source_inquiry_id`, the client
update by `client_stats_applied`), so `resume_promotions`, or the next
toggle on that inquiry, can finish one that a failure left half-promoted.
Marking the stage is a conditional update, so of two concurrent final
toggles only one promotes.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from eventdesk.core.errors import EventDeskError, InvalidState, NotFound, ValidationError
from eventdesk.core.logging import get_logger
from eventdesk.lifecycle.leads import parse_leads_csv
from eventdesk.lifecycle.metrics import (
    compute_client_score,
    compute_progress,
    update_running_average,
)
from eventdesk.lifecycle.state_machine import InquiryStateMachine
from eventdesk.lifecycle.tasks import (
    build_event_tasks,
    combine_event_date,
    default_inquiry_tasks,
    toggle_task,
)
from eventdesk.models import (
    Client,
    Event,
    EventStatus,
    Inquiry,
    InquiryStage,
    Lead,
    LeadStatus,
)
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

# Creates a calendar entry for a new event; returns False when the user has
# no calendar connected.
CalendarSync = Callable[[str, Event], Awaitable[bool]]


@dataclass
class ToggleResult:
    """Outcome of toggling an inquiry task."""

    inquiry: Inquiry | None
    event: Event | None = None
    calendar_synced: bool | None = None
    calendar_error: str | None = None

    @property
    def promoted(self) -> bool:
        """True when the toggle completed the inquiry and created an event."""
        return self.event is not None


class InquiryLifecycleEngine:
    """Inquiry, event, and client mutations for one store."""

    def __init__(self, store: Store, calendar_sync: CalendarSync | None = None):
        self.store = store
        self.calendar_sync = calendar_sync

    # Clients

    async def add_client(self, user_id: str, details: ClientDetails) -> Client:
        """Create a client explicitly; it starts with no events."""
        client = Client(
            user_id=user_id,
            **details.model_dump(),
            number_of_events=0,
            client_score=compute_client_score(0, details.average_event_size),
        )
        client = await self.store.insert(client)
        logger.info("client_created", client_id=client.id, source="manual")
        return client

    async def update_client(
        self, user_id: str, client_id: int, details: ClientDetails
    ) -> Client:
        """Apply a manual edit; the score follows the (possibly edited) average."""
        client = await self.store.get(Client, user_id, client_id)
        values = details.model_dump()
        values["client_score"] = compute_client_score(
            client.number_of_events, details.average_event_size
        )
        return await self.store.update(Client, user_id, client_id, values)

    async def _resolve_client(
        self,
        user_id: str,
        details: InquiryDetails,
        existing_client_id: int | None,
    ) -> Client:
        """Find the inquiry's client, refreshing its contact, or create one."""
        client: Client | None = None
        if existing_client_id is not None:
            try:
                client = await self.store.get(Client, user_id, existing_client_id)
            except NotFound:
                logger.warning(
                    "inquiry_client_not_found",
                    client_id=existing_client_id,
                    fallback="match_or_create",
                )
        if client is None:
            client = await self.store.find_client(
                user_id, details.fraternity, details.school
            )

        if client is not None:
            # Contact info always reflects the most recent inquiry.
            return await self.store.update(
                Client,
                user_id,
                client.id,
                {
                    "main_contact_name": details.main_contact,
                    "phone_number": details.phone_number,
                },
            )

        client = await self.store.insert(
            Client(
                user_id=user_id,
                fraternity=details.fraternity.strip(),
                school=details.school.strip(),
                main_contact_name=details.main_contact,
                phone_number=details.phone_number,
                instagram_handle="N/A",
                number_of_events=0,
                average_event_size=details.budget,
                client_score=compute_client_score(0, details.budget),
            )
        )
        logger.info("client_created", client_id=client.id, source="inquiry")
        return client

    # Inquiries

    async def add_inquiry(
        self,
        user_id: str,
        details: InquiryDetails,
        existing_client_id: int | None = None,
    ) -> Inquiry:
        """Create an inquiry with the default checklist, linked to its client."""
        client = await self._resolve_client(user_id, details, existing_client_id)
        inquiry = await self.store.insert(
            Inquiry(
                user_id=user_id,
                client_id=client.id,
                **details.model_dump(),
                tasks=default_inquiry_tasks(),
                progress=0,
                stage=InquiryStage.OPEN,
                client_stats_applied=False,
            )
        )
        logger.info("inquiry_created", inquiry_id=inquiry.id, client_id=client.id)
        return inquiry

    async def update_inquiry(
        self, user_id: str, inquiry_id: int, details: InquiryDetails
    ) -> Inquiry:
        """Edit inquiry fields, keeping its tasks and progress."""
        return await self.store.update(Inquiry, user_id, inquiry_id, details.model_dump())

    async def toggle_inquiry_task(
        self, user_id: str, inquiry_id: int, task_id: str
    ) -> ToggleResult:
        """Flip one inquiry task; completing the last one promotes the inquiry.

        On an inquiry stuck in the promoting stage the checklist is already
        complete, so the task is left alone and the promotion is finished.
        """
        inquiry = await self.store.get(Inquiry, user_id, inquiry_id)
        machine = InquiryStateMachine(inquiry)
        if machine.promoting.is_active:
            logger.warning("inquiry_promotion_resumed", inquiry_id=inquiry_id)
            return await self._promote(user_id, inquiry, machine)

        tasks = toggle_task(inquiry.tasks, task_id)
        if tasks is None:
            raise NotFound(f"Task {task_id} not found on inquiry {inquiry_id}")
        progress = compute_progress(tasks)

        if progress < 100:
            inquiry = await self.store.update(
                Inquiry, user_id, inquiry_id, {"tasks": tasks, "progress": progress}
            )
            return ToggleResult(inquiry=inquiry)

        inquiry.tasks = tasks
        inquiry.progress = progress
        return await self._promote(user_id, inquiry, machine)

    async def resume_promotions(self, user_id: str) -> list[ToggleResult]:
        """Finish every inquiry a failed promotion left in the promoting stage."""
        stuck = await self.store.select(
            Inquiry, user_id, Inquiry.stage == InquiryStage.PROMOTING
        )
        results = []
        for inquiry in stuck:
            logger.warning("inquiry_promotion_resumed", inquiry_id=inquiry.id)
            results.append(
                await self._promote(user_id, inquiry, InquiryStateMachine(inquiry))
            )
        return results

    async def _promote(
        self,
        user_id: str,
        inquiry: Inquiry,
        machine: InquiryStateMachine,
    ) -> ToggleResult:
        """Convert a completed inquiry into an event.

        Each step is its own store round trip; a failure propagates and
        leaves the inquiry in the promoting stage for `resume_promotions`.
        """
        if machine.open.is_active:
            claimed = await self.store.update_if(
                Inquiry,
                user_id,
                inquiry.id,
                Inquiry.stage == InquiryStage.OPEN,
                {
                    "tasks": inquiry.tasks,
                    "progress": inquiry.progress,
                    "stage": InquiryStage.PROMOTING,
                },
            )
            if not claimed:
                raise InvalidState(f"Inquiry {inquiry.id} is already being promoted")
            machine.begin_promotion()

        event = await self._ensure_event(user_id, inquiry)

        if not inquiry.client_stats_applied:
            await self._fold_into_client(user_id, inquiry)
            await self.store.update(
                Inquiry, user_id, inquiry.id, {"client_stats_applied": True}
            )
            inquiry.client_stats_applied = True

        await self.store.delete(Inquiry, user_id, inquiry.id)
        machine.complete_promotion()

        result = ToggleResult(inquiry=None, event=event)
        await self._sync_calendar(user_id, event, result)
        return result

    async def _ensure_event(self, user_id: str, inquiry: Inquiry) -> Event:
        """Insert the inquiry's event unless an earlier attempt already did."""
        existing = await self.store.select(
            Event, user_id, Event.source_inquiry_id == inquiry.id
        )
        if existing:
            return existing[0]

        event = await self.store.insert(
            Event(
                user_id=user_id,
                client_id=inquiry.client_id,
                source_inquiry_id=inquiry.id,
                fraternity=inquiry.fraternity,
                school=inquiry.school,
                event_name=f"{inquiry.fraternity} - {inquiry.school} Event",
                event_date=combine_event_date(inquiry.inquiry_date, inquiry.inquiry_time),
                address_of_event=inquiry.address_of_event,
                capacity=inquiry.capacity,
                budget=inquiry.budget,
                stage_build=inquiry.stage_build,
                status=EventStatus.PENDING,
                tasks=build_event_tasks(inquiry),
                progress=0,
            )
        )
        logger.info(
            "event_created",
            event_id=event.id,
            inquiry_id=inquiry.id,
            tasks=[task["name"] for task in event.tasks],
        )
        return event

    async def _fold_into_client(self, user_id: str, inquiry: Inquiry) -> None:
        """Count the new event and fold its budget into the client's average."""
        try:
            client = await self.store.get(Client, user_id, inquiry.client_id)
        except NotFound:
            logger.error(
                "promotion_client_missing",
                inquiry_id=inquiry.id,
                client_id=inquiry.client_id,
            )
            return

        number_of_events = client.number_of_events + 1
        average = update_running_average(
            client.average_event_size, client.number_of_events, inquiry.budget
        )
        await self.store.update(
            Client,
            user_id,
            client.id,
            {
                "number_of_events": number_of_events,
                "average_event_size": average,
                "client_score": compute_client_score(number_of_events, average),
            },
        )

    async def _sync_calendar(self, user_id: str, event: Event, result: ToggleResult) -> None:
        """Best-effort calendar entry; failure never undoes the promotion."""
        if self.calendar_sync is None:
            return
        try:
            result.calendar_synced = await self.calendar_sync(user_id, event)
        except EventDeskError as exc:
            logger.warning("calendar_sync_failed", event_id=event.id, error=exc.message)
            result.calendar_synced = False
            result.calendar_error = exc.message

    # Events

    async def toggle_event_task(self, user_id: str, event_id: int, task_id: str) -> Event:
        """Flip one event task and recompute the event's progress."""
        event = await self.store.get(Event, user_id, event_id)
        tasks = toggle_task(event.tasks, task_id)
        if tasks is None:
            raise NotFound(f"Task {task_id} not found on event {event_id}")
        return await self.store.update(
            Event,
            user_id,
            event_id,
            {"tasks": tasks, "progress": compute_progress(tasks)},
        )

    async def update_event(self, user_id: str, event_id: int, update: EventUpdate) -> Event:
        """Edit an event's name, date, venue, budget, stage or status."""
        values: dict[str, Any] = update.model_dump(exclude_unset=True, exclude_none=True)
        if not values:
            return await self.store.get(Event, user_id, event_id)
        return await self.store.update(Event, user_id, event_id, values)

    # Leads

    async def convert_lead(
        self, user_id: str, lead_id: int, conversion: LeadConversion
    ) -> Inquiry:
        """Turn a lead into an inquiry on the user's request."""
        lead = await self.store.get(Lead, user_id, lead_id)
        if not lead.school or not lead.fraternity:
            raise ValidationError(
                "Lead needs a school and fraternity before it can become an inquiry"
            )

        details = InquiryDetails(
            school=lead.school,
            fraternity=lead.fraternity,
            main_contact=lead.name,
            phone_number=lead.phone_number or "",
            **conversion.model_dump(),
        )
        inquiry = await self.add_inquiry(user_id, details)
        await self.store.update(Lead, user_id, lead_id, {"status": LeadStatus.INTERESTED})
        logger.info("lead_converted", lead_id=lead_id, inquiry_id=inquiry.id)
        return inquiry

    async def add_lead(self, user_id: str, details: LeadDetails) -> Lead:
        return await self.store.insert(Lead(user_id=user_id, **details.model_dump()))

    async def update_lead(self, user_id: str, lead_id: int, update: LeadUpdate) -> Lead:
        values = update.model_dump(exclude_unset=True)
        if not values:
            return await self.store.get(Lead, user_id, lead_id)
        return await self.store.update(Lead, user_id, lead_id, values)

    async def delete_lead(self, user_id: str, lead_id: int) -> None:
        await self.store.delete(Lead, user_id, lead_id)

    async def import_leads(self, user_id: str, content: str | bytes) -> list[Lead]:
        """Bulk-insert the valid rows of a lead CSV export."""
        rows = parse_leads_csv(content)
        leads = await self.store.insert_many(
            [Lead(user_id=user_id, **row.model_dump()) for row in rows]
        )
        logger.info("leads_imported", count=len(leads))
        return leads
