"""API module exports."""

from eventdesk.api.clients import router as clients_router
from eventdesk.api.dashboard import router as dashboard_router
from eventdesk.api.deps import get_current_user, get_redis, get_store
from eventdesk.api.docusign import router as docusign_router
from eventdesk.api.events import router as events_router
from eventdesk.api.google_calendar import router as google_calendar_router
from eventdesk.api.health import router as health_router
from eventdesk.api.inquiries import router as inquiries_router
from eventdesk.api.leads import router as leads_router

__all__ = [
    "clients_router",
    "dashboard_router",
    "docusign_router",
    "events_router",
    "get_current_user",
    "get_redis",
    "get_store",
    "google_calendar_router",
    "health_router",
    "inquiries_router",
    "leads_router",
]
