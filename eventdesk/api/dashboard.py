"""Dashboard summary endpoint."""

from fastapi import APIRouter, Depends

from eventdesk.api.deps import get_current_user, get_store
from eventdesk.lifecycle import summarize_dashboard
from eventdesk.models import Client, Event
from eventdesk.schemas import CamelModel
from eventdesk.store import Store

router = APIRouter(prefix="/api", tags=["dashboard"])


class DashboardResponse(CamelModel):
    """Headline numbers for the dashboard cards."""

    total_revenue: float
    events_this_year: int
    total_clients: int
    average_client_score: float


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user_id: str = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> DashboardResponse:
    clients = await store.select(Client, user_id)
    events = await store.select(Event, user_id)
    summary = summarize_dashboard(clients, events)
    return DashboardResponse(
        total_revenue=summary.total_revenue,
        events_this_year=summary.events_this_year,
        total_clients=summary.total_clients,
        average_client_score=summary.average_client_score,
    )
