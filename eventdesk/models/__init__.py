"""SQLAlchemy models for the EventDesk application."""

from eventdesk.models.base import Base
from eventdesk.models.client import Client
from eventdesk.models.event import Event, EventStatus
from eventdesk.models.inquiry import Inquiry, InquiryStage
from eventdesk.models.lead import Lead, LeadStatus
from eventdesk.models.oauth_token import OAuthProvider, OAuthToken

__all__ = [
    "Base",
    "Client",
    "Event",
    "EventStatus",
    "Inquiry",
    "InquiryStage",
    "Lead",
    "LeadStatus",
    "OAuthProvider",
    "OAuthToken",
]
