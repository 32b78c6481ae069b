"""Integrations with Google Calendar and DocuSign behind OAuth token brokers."""

from eventdesk.integrations.docusign import (
    DocuSignClient,
    DocuSignTokenBroker,
    InquiryContractRequest,
    SendDocumentRequest,
    build_contract_fields,
    build_envelope_definition,
    contract_for_inquiry,
)
from eventdesk.integrations.google_calendar import (
    GoogleCalendarClient,
    GoogleTokenBroker,
    build_calendar_event,
)
from eventdesk.integrations.oauth_state import OAuthState, OAuthStateCodec
from eventdesk.integrations.token_broker import OAuthTokenBroker

__all__ = [
    "DocuSignClient",
    "DocuSignTokenBroker",
    "GoogleCalendarClient",
    "GoogleTokenBroker",
    "InquiryContractRequest",
    "OAuthState",
    "OAuthStateCodec",
    "OAuthTokenBroker",
    "SendDocumentRequest",
    "build_calendar_event",
    "build_contract_fields",
    "build_envelope_definition",
    "contract_for_inquiry",
]
