"""Clients API endpoints."""

from fastapi import APIRouter, Depends, Query, status

from eventdesk.api.deps import get_current_user, get_engine, get_store
from eventdesk.lifecycle import InquiryLifecycleEngine, filter_clients
from eventdesk.lifecycle.listing import ClientSortKey, SortOrder
from eventdesk.models import Client
from eventdesk.schemas import ClientDetails, ClientOut
from eventdesk.store import Store

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=list[ClientOut])
async def list_clients(
    school: str | None = Query(default=None),
    sort_by: ClientSortKey = Query(default="none", alias="sortBy"),
    order: SortOrder = Query(default="asc"),
    user_id: str = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> list[ClientOut]:
    """List clients, optionally filtered by school and sorted by one column."""
    clients = await store.select(Client, user_id)
    return [
        ClientOut.model_validate(client)
        for client in filter_clients(clients, school, sort_by, order)
    ]


@router.post("", response_model=ClientOut, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientDetails,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> ClientOut:
    """Create a client with no events yet."""
    client = await engine.add_client(user_id, payload)
    return ClientOut.model_validate(client)


@router.get("/{client_id}", response_model=ClientOut)
async def get_client(
    client_id: int,
    user_id: str = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> ClientOut:
    """Get client by ID."""
    return ClientOut.model_validate(await store.get(Client, user_id, client_id))


@router.put("/{client_id}", response_model=ClientOut)
async def update_client(
    client_id: int,
    payload: ClientDetails,
    user_id: str = Depends(get_current_user),
    engine: InquiryLifecycleEngine = Depends(get_engine),
) -> ClientOut:
    """Replace a client's editable fields; the score is recomputed."""
    client = await engine.update_client(user_id, client_id, payload)
    return ClientOut.model_validate(client)
