"""Leads API endpoints."""

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from eventdesk.api.deps import get_current_user, get_engine, get_store
from eventdesk.lifecycle import InquiryLifecycleEngine, filter_leads
from eventdesk.lifecycle.listing import LeadSortKey, SortOrder
from eventdesk.models import Lead
from eventdesk.schemas import (
    CamelModel,
    InquiryOut,
    LeadConversion,
    LeadDetails,
    LeadOut,
    LeadUpdate,
)
from eventdesk.store import Store

router = APIRouter(prefix="/api/leads", tags=["leads"])


class LeadImportResponse(CamelModel):
    """Rows inserted by a CSV import."""

    imported: int
    items: list[LeadOut]


@router.get("", response_model=list[LeadOut])
async def list_leads(
    school: str | None = Query(default=None),
    fraternity: str | None = Query(default=None),
    sort_by: LeadSortKey = Query(default="none", alias="sortBy"),
    order: SortOrder = Query(default="asc"),
    user_id: str = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> list[LeadOut]:
    """List leads with optional school/fraternity filters and sorting."""
    leads = await store.select(Lead, user_id)
    return [
        LeadOut.model_validate(lead)
        for lead in filter_leads(leads, school, fraternity, sort_by, order)
    ]


@router.post("", response_model=LeadOut, status_code=status.HTTP_201_CREATED)
async def create_lead(
    payload: LeadDetails,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> LeadOut:
    return LeadOut.model_validate(await engine.add_lead(user_id, payload))


@router.post("/import", response_model=LeadImportResponse, status_code=status.HTTP_201_CREATED)
async def import_leads(
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> LeadImportResponse:
    """Bulk-create leads from an uploaded CSV file."""
    leads = await engine.import_leads(user_id, await file.read())
    return LeadImportResponse(
        imported=len(leads), items=[LeadOut.model_validate(lead) for lead in leads]
    )


@router.get("/{lead_id}", response_model=LeadOut)
async def get_lead(
    lead_id: int,
    user_id: str = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> LeadOut:
    """Get lead by ID."""
    return LeadOut.model_validate(await store.get(Lead, user_id, lead_id))


@router.patch("/{lead_id}", response_model=LeadOut)
async def update_lead(
    lead_id: int,
    payload: LeadUpdate,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> LeadOut:
    """Partially update lead fields."""
    return LeadOut.model_validate(await engine.update_lead(user_id, lead_id, payload))


@router.delete("/{lead_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lead(
    lead_id: int,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> Response:
    await engine.delete_lead(user_id, lead_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{lead_id}/convert", response_model=InquiryOut, status_code=status.HTTP_201_CREATED)
async def convert_lead(
    lead_id: int,
    payload: LeadConversion,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> InquiryOut:
    """Open an inquiry for a lead and mark the lead Interested."""
    inquiry = await engine.convert_lead(user_id, lead_id, payload)
    return InquiryOut.model_validate(inquiry)
