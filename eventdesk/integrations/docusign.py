"""DocuSign: OAuth broker and template-based envelope sending."""

from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import Field

from eventdesk.core.errors import ProviderAPIError, ValidationError
from eventdesk.core.logging import get_logger
from eventdesk.integrations.token_broker import OAuthTokenBroker, error_description
from eventdesk.models import Inquiry, OAuthProvider
from eventdesk.schemas import CamelModel

logger = get_logger(__name__)

DOCUSIGN_SCOPES = ("signature", "extended")
SIGNER_ROLE = "Signer"
SIGNATURE_ANCHOR = "/sn1/"

REQUIRED_FIELDS = {
    "recipient_name": "recipientName",
    "recipient_email": "recipientEmail",
    "template_id": "templateId",
    "document_name": "documentName",
    "subject": "subject",
    "email_blurb": "emailBlurb",
}


class DocuSignTokenBroker(OAuthTokenBroker):
    """Authorization-code OAuth with HTTP Basic client credentials."""

    provider = OAuthProvider.DOCUSIGN
    display_name = "DocuSign"
    scopes = DOCUSIGN_SCOPES
    success_path = "/inquiries"

    @property
    def authorize_url(self) -> str:
        return self.config.docusign_auth_url

    @property
    def token_url(self) -> str:
        return self.config.docusign_token_url

    @property
    def redirect_uri(self) -> str:
        return self.config.docusign_redirect_uri or ""

    def missing_settings(self) -> list[str]:
        return self.config.missing_docusign_settings()

    def authorize_params(self, state: str) -> dict[str, str]:
        return {
            "client_id": self.config.docusign_client_id or "",
            "scope": " ".join(self.scopes),
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "state": state,
        }

    def token_request(self, form: dict[str, str]) -> dict[str, Any]:
        return {
            "data": form,
            "auth": httpx.BasicAuth(
                self.config.docusign_client_id or "",
                self.config.docusign_client_secret or "",
            ),
        }


class SendDocumentRequest(CamelModel):
    """Contract to send from a DocuSign template."""

    recipient_name: str = ""
    recipient_email: str = ""
    template_id: str = ""
    template_field_values: dict[str, Any] = Field(default_factory=dict)
    document_name: str = ""
    subject: str = ""
    email_blurb: str = ""

    def missing_fields(self) -> list[str]:
        """Wire names of required fields that are empty."""
        return [
            wire_name
            for field_name, wire_name in REQUIRED_FIELDS.items()
            if not str(getattr(self, field_name) or "").strip()
        ]


def build_contract_fields(
    fraternity: str,
    school: str,
    recipient_name: str,
    recipient_email: str,
    address: str,
    budget: float,
    event_date: str,
) -> dict[str, str]:
    """Default tab values for the contract template, keyed by tab label."""
    return {
        "Fraternity": fraternity,
        "School": school,
        "SchoolFraternity": f"{school} - {fraternity}",
        "MainContactName": recipient_name,
        "MainContactEmail": recipient_email,
        "EventLocation": address,
        "Budget": f"{budget:,.0f}",
        "EventDate": event_date,
    }


class InquiryContractRequest(CamelModel):
    """Contract for one inquiry; blank fields are filled from the inquiry."""

    inquiry_id: int
    recipient_email: str = ""
    recipient_name: str = ""
    document_name: str = ""
    subject: str = ""
    email_blurb: str = ""


def contract_for_inquiry(
    inquiry: Inquiry, request: InquiryContractRequest, template_id: str
) -> SendDocumentRequest:
    """Pre-fill the contract template from an inquiry's booking details."""
    recipient_name = request.recipient_name or inquiry.main_contact
    return SendDocumentRequest(
        recipient_name=recipient_name,
        recipient_email=request.recipient_email,
        template_id=template_id,
        template_field_values=build_contract_fields(
            fraternity=inquiry.fraternity,
            school=inquiry.school,
            recipient_name=recipient_name,
            recipient_email=request.recipient_email,
            address=inquiry.address_of_event,
            budget=inquiry.budget,
            event_date=inquiry.inquiry_date.isoformat(),
        ),
        document_name=request.document_name
        or f"{inquiry.fraternity} - {inquiry.school} Contract",
        subject=request.subject or f"Contract for {inquiry.fraternity} at {inquiry.school}",
        email_blurb=request.email_blurb
        or (
            f"Dear {recipient_name},\n\n"
            "Please find attached the contract for your review and signature."
        ),
    )


def build_envelope_definition(
    request: SendDocumentRequest, client_user_id: str
) -> dict[str, Any]:
    """Envelope built from a template with one signer role."""
    text_tabs = [
        {"tabLabel": label, "value": str(value)}
        for label, value in _items(request.template_field_values)
    ]
    return {
        "emailSubject": request.subject,
        "emailBlurb": request.email_blurb,
        "templateId": request.template_id,
        "templateRoles": [
            {
                "email": request.recipient_email,
                "name": request.recipient_name,
                "roleName": SIGNER_ROLE,
                "clientUserId": client_user_id,
                "tabs": {
                    "signHereTabs": [
                        {
                            "anchorString": SIGNATURE_ANCHOR,
                            "anchorUnits": "pixels",
                            "anchorXOffset": "20",
                            "anchorYOffset": "10",
                            "tabLabel": "SignHere1",
                        }
                    ],
                    "textTabs": text_tabs,
                },
            }
        ],
        "status": "sent",
    }


def _items(values: Mapping[str, Any]) -> list[tuple[str, Any]]:
    return [(label, "" if value is None else value) for label, value in values.items()]


class DocuSignClient:
    """eSignature REST calls made on behalf of a connected user."""

    def __init__(self, broker: DocuSignTokenBroker, http: httpx.AsyncClient):
        self.broker = broker
        self.http = http
        self.config = broker.config

    async def send_document(self, user_id: str, request: SendDocumentRequest) -> dict[str, Any]:
        """Send a template-based envelope for signature.

        Raises:
            ValidationError: If a required field is empty. Raised before any
                token lookup or network call.
            ProviderAPIError: If DocuSign rejects the envelope.
        """
        missing = request.missing_fields()
        if missing:
            raise ValidationError(
                "Missing required fields for sending document: " + ", ".join(missing)
            )
        self.broker.ensure_configured()

        envelope = build_envelope_definition(request, user_id)
        url = (
            f"{self.config.docusign_api_base_url}/accounts/"
            f"{self.config.docusign_account_id}/envelopes"
        )

        async def send(access_token: str) -> dict[str, Any]:
            try:
                response = await self.http.post(
                    url,
                    json=envelope,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
            except httpx.HTTPError as exc:
                raise ProviderAPIError(
                    "DocuSign", f"Failed to send DocuSign document: {exc}"
                ) from exc
            if response.is_error:
                reason = error_description(response)
                logger.error("docusign_send_failed", status_code=response.status_code, reason=reason)
                raise ProviderAPIError(
                    "DocuSign",
                    f"Failed to send DocuSign document: {reason}",
                    response.status_code,
                )
            return response.json()

        result = await self.broker.with_fresh_token(user_id, send)
        logger.info(
            "docusign_envelope_sent",
            envelope_id=result.get("envelopeId"),
            template_id=request.template_id,
        )
        return result

    async def send_inquiry_contract(
        self, user_id: str, request: InquiryContractRequest
    ) -> dict[str, Any]:
        """Send the default contract template, pre-filled from an inquiry."""
        inquiry = await self.broker.store.get(Inquiry, user_id, request.inquiry_id)
        document = contract_for_inquiry(inquiry, request, self.config.docusign_template_id)
        return await self.send_document(user_id, document)
