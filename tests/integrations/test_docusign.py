"""Tests for DocuSign envelope construction and sending."""

from datetime import date

import httpx
import orjson
import pytest

from eventdesk.core.errors import (
    NotFound,
    ProviderAPIError,
    ProviderNotConnected,
    ValidationError,
)
from eventdesk.integrations.docusign import (
    DocuSignClient,
    DocuSignTokenBroker,
    InquiryContractRequest,
    SendDocumentRequest,
    build_contract_fields,
    build_envelope_definition,
    contract_for_inquiry,
)
from eventdesk.lifecycle import InquiryLifecycleEngine
from eventdesk.models import Inquiry, OAuthProvider
from eventdesk.schemas import InquiryDetails
from tests.conftest import OTHER_USER_ID, USER_ID, ProviderStub

ENVELOPES_URL = "https://demo.docusign.net/restapi/v2.1/accounts/acct-123/envelopes"


def _request(**overrides) -> SendDocumentRequest:
    values = {
        "recipientName": "Jake Morrow",
        "recipientEmail": "jake@uga.edu",
        "templateId": "tmpl-1",
        "templateFieldValues": {"Fraternity": "Sigma Chi", "Budget": "5,000", "Notes": None},
        "documentName": "Sigma Chi Contract",
        "subject": "Please sign your event contract",
        "emailBlurb": "Looking forward to the show.",
    }
    values.update(overrides)
    return SendDocumentRequest.model_validate(values)


@pytest.fixture
def docusign(docusign_broker: DocuSignTokenBroker, http_client: httpx.AsyncClient) -> DocuSignClient:
    return DocuSignClient(docusign_broker, http_client)


def test_missing_fields_uses_wire_names() -> None:
    request = _request(recipientEmail="", subject="   ")

    assert request.missing_fields() == ["recipientEmail", "subject"]


def test_complete_request_has_no_missing_fields() -> None:
    assert _request().missing_fields() == []


def test_build_envelope_definition() -> None:
    envelope = build_envelope_definition(_request(), USER_ID)

    assert envelope["templateId"] == "tmpl-1"
    assert envelope["emailSubject"] == "Please sign your event contract"
    assert envelope["status"] == "sent"
    role = envelope["templateRoles"][0]
    assert role["roleName"] == "Signer"
    assert role["clientUserId"] == USER_ID
    assert role["email"] == "jake@uga.edu"
    assert role["tabs"]["signHereTabs"] == [
        {
            "anchorString": "/sn1/",
            "anchorUnits": "pixels",
            "anchorXOffset": "20",
            "anchorYOffset": "10",
            "tabLabel": "SignHere1",
        }
    ]
    assert role["tabs"]["textTabs"] == [
        {"tabLabel": "Fraternity", "value": "Sigma Chi"},
        {"tabLabel": "Budget", "value": "5,000"},
        {"tabLabel": "Notes", "value": ""},
    ]


def test_build_contract_fields() -> None:
    fields = build_contract_fields(
        fraternity="Sigma Chi",
        school="UGA",
        recipient_name="Jake Morrow",
        recipient_email="jake@uga.edu",
        address="1040 S Milledge Ave",
        budget=12500,
        event_date="2026-04-18",
    )

    assert fields["SchoolFraternity"] == "UGA - Sigma Chi"
    assert fields["Budget"] == "12,500"
    assert fields["EventDate"] == "2026-04-18"


def test_contract_for_inquiry_fills_defaults() -> None:
    inquiry = Inquiry(
        school="UGA",
        fraternity="Sigma Chi",
        main_contact="Jake Morrow",
        address_of_event="1040 S Milledge Ave",
        budget=12500,
        inquiry_date=date(2026, 4, 18),
    )
    request = InquiryContractRequest(inquiry_id=1, recipient_email="jake@uga.edu")

    document = contract_for_inquiry(inquiry, request, "tmpl-9")

    assert document.missing_fields() == []
    assert document.template_id == "tmpl-9"
    assert document.recipient_name == "Jake Morrow"
    assert document.document_name == "Sigma Chi - UGA Contract"
    assert document.subject == "Contract for Sigma Chi at UGA"
    assert document.email_blurb.startswith("Dear Jake Morrow,\n\n")
    assert document.template_field_values["EventDate"] == "2026-04-18"
    assert document.template_field_values["MainContactEmail"] == "jake@uga.edu"


def test_contract_for_inquiry_keeps_explicit_values() -> None:
    inquiry = Inquiry(
        school="UGA",
        fraternity="Sigma Chi",
        main_contact="Jake Morrow",
        address_of_event="",
        budget=0,
        inquiry_date=date(2026, 4, 18),
    )
    request = InquiryContractRequest.model_validate(
        {
            "inquiryId": 1,
            "recipientEmail": "treasurer@uga.edu",
            "recipientName": "Sam Ortiz",
            "subject": "Spring contract",
        }
    )

    document = contract_for_inquiry(inquiry, request, "tmpl-9")

    assert document.recipient_name == "Sam Ortiz"
    assert document.subject == "Spring contract"
    assert document.template_field_values["MainContactName"] == "Sam Ortiz"


@pytest.mark.asyncio
async def test_send_validates_before_any_call(
    docusign: DocuSignClient, provider: ProviderStub
) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await docusign.send_document(USER_ID, _request(templateId="", documentName=""))

    assert exc_info.value.message == (
        "Missing required fields for sending document: templateId, documentName"
    )
    assert provider.requests == []


@pytest.mark.asyncio
async def test_send_requires_connection(docusign: DocuSignClient) -> None:
    with pytest.raises(ProviderNotConnected, match="DocuSign account not connected"):
        await docusign.send_document(USER_ID, _request())


@pytest.mark.asyncio
async def test_send_document(
    docusign: DocuSignClient, provider: ProviderStub, connect
) -> None:
    await connect(OAuthProvider.DOCUSIGN)
    provider.add(
        "POST",
        ENVELOPES_URL,
        httpx.Response(201, json={"envelopeId": "env-42", "status": "sent"}),
    )

    result = await docusign.send_document(USER_ID, _request())

    assert result["envelopeId"] == "env-42"
    request = provider.calls_to(ENVELOPES_URL)[0]
    assert request.headers["Authorization"] == "Bearer access-current"
    body = orjson.loads(request.content)
    assert body["templateRoles"][0]["name"] == "Jake Morrow"


@pytest.mark.asyncio
async def test_send_document_surfaces_docusign_error(
    docusign: DocuSignClient, provider: ProviderStub, connect
) -> None:
    await connect(OAuthProvider.DOCUSIGN)
    provider.add(
        "POST",
        ENVELOPES_URL,
        httpx.Response(
            400,
            json={"errorCode": "TEMPLATE_ID_INVALID", "message": "Invalid template ID."},
        ),
    )

    with pytest.raises(ProviderAPIError) as exc_info:
        await docusign.send_document(USER_ID, _request())

    assert exc_info.value.message == "Failed to send DocuSign document: Invalid template ID."
    assert exc_info.value.provider == "DocuSign"


async def _inquiry(engine: InquiryLifecycleEngine, user_id: str = USER_ID) -> Inquiry:
    return await engine.add_inquiry(
        user_id,
        InquiryDetails(
            school="UGA",
            fraternity="Sigma Chi",
            main_contact="Jake Morrow",
            address_of_event="1040 S Milledge Ave",
            budget=12500,
            inquiry_date=date(2026, 4, 18),
        ),
    )


@pytest.mark.asyncio
async def test_send_inquiry_contract(
    docusign: DocuSignClient,
    engine: InquiryLifecycleEngine,
    provider: ProviderStub,
    connect,
) -> None:
    inquiry = await _inquiry(engine)
    await connect(OAuthProvider.DOCUSIGN)
    provider.add("POST", ENVELOPES_URL, httpx.Response(201, json={"envelopeId": "env-7"}))

    result = await docusign.send_inquiry_contract(
        USER_ID, InquiryContractRequest(inquiry_id=inquiry.id, recipient_email="jake@uga.edu")
    )

    assert result == {"envelopeId": "env-7"}
    body = orjson.loads(provider.calls_to(ENVELOPES_URL)[0].content)
    assert body["templateId"] == docusign.config.docusign_template_id
    assert body["emailSubject"] == "Contract for Sigma Chi at UGA"
    tabs = {tab["tabLabel"]: tab["value"] for tab in body["templateRoles"][0]["tabs"]["textTabs"]}
    assert tabs["SchoolFraternity"] == "UGA - Sigma Chi"
    assert tabs["Budget"] == "12,500"


@pytest.mark.asyncio
async def test_send_inquiry_contract_for_someone_elses_inquiry(
    docusign: DocuSignClient,
    engine: InquiryLifecycleEngine,
    provider: ProviderStub,
    connect,
) -> None:
    inquiry = await _inquiry(engine, OTHER_USER_ID)
    await connect(OAuthProvider.DOCUSIGN)

    with pytest.raises(NotFound):
        await docusign.send_inquiry_contract(
            USER_ID, InquiryContractRequest(inquiry_id=inquiry.id, recipient_email="x@uga.edu")
        )

    assert provider.requests == []
