"""DocuSign OAuth and envelope endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import RedirectResponse

from eventdesk.api.deps import (
    get_current_user,
    get_docusign_broker,
    get_docusign_client,
    get_optional_user,
)
from eventdesk.core.logging import provider_ctx
from eventdesk.integrations.docusign import (
    DocuSignClient,
    DocuSignTokenBroker,
    InquiryContractRequest,
    SendDocumentRequest,
)
from eventdesk.schemas import OAuthStartRequest, OAuthStartResponse


def _tag_provider() -> None:
    provider_ctx.set("docusign")


router = APIRouter(
    prefix="/docusign",
    tags=["docusign"],
    dependencies=[Depends(_tag_provider)],
)


@router.options("/{path:path}")
async def preflight(path: str) -> Response:
    return Response(status_code=200)


@router.post("/auth", response_model=OAuthStartResponse)
async def start_auth(
    payload: OAuthStartRequest,
    user_id: str | None = Depends(get_optional_user),
    broker: DocuSignTokenBroker = Depends(get_docusign_broker),
) -> OAuthStartResponse:
    """Return the DocuSign consent URL for the calling user."""
    url = await broker.initiate_auth(user_id, payload.client_origin)
    return OAuthStartResponse(authorize_url=url)


@router.get("/callback")
async def auth_callback(
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    broker: DocuSignTokenBroker = Depends(get_docusign_broker),
) -> RedirectResponse:
    redirect_url = await broker.handle_callback(code, state)
    return RedirectResponse(redirect_url, status_code=302)


@router.post("/send-document")
async def send_document(
    payload: SendDocumentRequest,
    user_id: str = Depends(get_current_user),
    client: DocuSignClient = Depends(get_docusign_client),
) -> dict[str, Any]:
    """Send a template envelope for signature; returns DocuSign's summary."""
    return await client.send_document(user_id, payload)


@router.post("/send-contract")
async def send_contract(
    payload: InquiryContractRequest,
    user_id: str = Depends(get_current_user),
    client: DocuSignClient = Depends(get_docusign_client),
) -> dict[str, Any]:
    """Send the default contract template pre-filled from an inquiry."""
    return await client.send_inquiry_contract(user_id, payload)
