"""
Binder API endpoints.

Provides CRUD operations for binders, plus read-only occupancy and page
geometry views.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from bindery.api.auth import get_caller_id
from bindery.db import (
    binder_to_model,
    create_binder,
    delete_binder,
    list_binders,
    load_occupancy,
    rename_binder,
    update_binder_settings,
)
from bindery.db.database import get_session
from bindery.models.binder import Binder
from bindery.models.failure import NotFoundError
from bindery.models.slot import DEFAULT_LAYOUT, BinderLayout
from bindery.services.binder_editor import get_owned_binder, read_occupancy
from bindery.slots.pages import derive, spread_pages, total_views

router = APIRouter(prefix="/binders", tags=["binders"])


class CardResponse(BaseModel):
    """A card placed in a binder."""

    id: str
    scryfall_id: str
    position_index: int
    name: str
    image_url: str = ""
    image_url_back: str | None = None
    set_code: str | None = None
    collector_number: str | None = None
    price_usd: float | None = None
    is_purchased: bool = True
    purchase_url: str | None = None


class BinderResponse(BaseModel):
    """Response model for a binder with its cards."""

    id: str
    user_id: str
    name: str
    layout: BinderLayout
    gray_out_unpurchased: bool
    cards: list[CardResponse] = Field(default_factory=list)
    total_cards: int = 0
    total_value_usd: float = 0.0


class BinderListResponse(BaseModel):
    binders: list[BinderResponse]
    count: int


class BinderCreateRequest(BaseModel):
    """Request model for creating a binder."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Foil Commanders"])
    layout: BinderLayout = Field(
        default=DEFAULT_LAYOUT,
        description="Page grid: GRID_2x2, GRID_3x3 or GRID_4x3",
    )


class BinderRenameRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class BinderSettingsRequest(BaseModel):
    gray_out_unpurchased: bool


class OccupancyResponse(BaseModel):
    """Slot index -> card id for one binder."""

    binder_id: str
    slots: dict[int, str] = Field(default_factory=dict)
    max_index: int | None = None


class SpreadResponse(BaseModel):
    view: int
    left_page: int | None
    right_page: int | None


class PageGeometryResponse(BaseModel):
    """How the binder's slots are cut into pages, with one spread view."""

    binder_id: str
    layout: BinderLayout
    columns: int
    rows: int
    slots_per_page: int
    total_pages: int
    total_slots: int
    total_views: int
    spread: SpreadResponse


def _binder_response(binder: Binder) -> BinderResponse:
    cards = [CardResponse.model_validate(card, from_attributes=True) for card in binder.cards]
    return BinderResponse(
        id=binder.id,
        user_id=binder.user_id,
        name=binder.name,
        layout=binder.layout,
        gray_out_unpurchased=binder.gray_out_unpurchased,
        cards=cards,
        total_cards=len(cards),
        total_value_usd=round(sum(c.price_usd or 0.0 for c in cards), 2),
    )


@router.get("", response_model=BinderListResponse)
async def get_binders(
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BinderListResponse:
    """List the caller's binders with their cards."""
    db_binders = await list_binders(session, caller_id)
    binders = [_binder_response(binder_to_model(b)) for b in db_binders]
    return BinderListResponse(binders=binders, count=len(binders))


@router.post("", response_model=BinderResponse, status_code=status.HTTP_201_CREATED)
async def post_binder(
    request: BinderCreateRequest,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BinderResponse:
    """Create an empty binder owned by the caller."""
    db_binder = await create_binder(session, caller_id, request.name.strip(), request.layout)
    return _binder_response(binder_to_model(db_binder))


@router.get("/{binder_id}", response_model=BinderResponse)
async def get_binder_by_id(
    binder_id: str,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BinderResponse:
    """
    Get a binder with all its cards.

    Returns 404 if the binder does not exist, 403 if it is not the caller's.
    """
    db_binder = await get_owned_binder(session, binder_id, caller_id, with_cards=True)
    return _binder_response(binder_to_model(db_binder))


@router.patch("/{binder_id}", response_model=BinderResponse)
async def patch_binder(
    binder_id: str,
    request: BinderRenameRequest,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BinderResponse:
    """Rename a binder."""
    db_binder = await get_owned_binder(session, binder_id, caller_id, with_cards=True)
    await rename_binder(session, db_binder, request.name.strip())
    return _binder_response(binder_to_model(db_binder))


@router.put("/{binder_id}/settings", response_model=BinderResponse)
async def put_binder_settings(
    binder_id: str,
    request: BinderSettingsRequest,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BinderResponse:
    """Update presentation settings."""
    db_binder = await get_owned_binder(session, binder_id, caller_id, with_cards=True)
    await update_binder_settings(session, db_binder, request.gray_out_unpurchased)
    return _binder_response(binder_to_model(db_binder))


@router.delete("/{binder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_binder(
    binder_id: str,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """Delete a binder and every card in it."""
    db_binder = await get_owned_binder(session, binder_id, caller_id, with_cards=True)
    await delete_binder(session, db_binder)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{binder_id}/occupancy", response_model=OccupancyResponse)
async def get_occupancy(
    binder_id: str,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OccupancyResponse:
    """Current slot -> card id map, the input every edit is planned against."""
    occupancy = await read_occupancy(session, binder_id, caller_id)
    return OccupancyResponse(
        binder_id=binder_id,
        slots=dict(occupancy.items()),
        max_index=occupancy.max_index,
    )


@router.get("/{binder_id}/pages", response_model=PageGeometryResponse)
async def get_pages(
    binder_id: str,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
    view: Annotated[int, Query(ge=0, description="Spread view to return")] = 0,
) -> PageGeometryResponse:
    """
    Page count derived from the binder's current cards, plus one spread view.

    Slots are unbounded, so views are served one at a time; `total_views`
    tells the client how far it can page. Returns 404 for a view past the end.
    """
    db_binder = await get_owned_binder(session, binder_id, caller_id)
    occupancy = await load_occupancy(session, binder_id)
    layout = BinderLayout(db_binder.layout)
    geometry = derive(layout, occupancy.max_index)
    if view >= total_views(geometry):
        raise NotFoundError("Spread view", view)
    spread = spread_pages(geometry, view)

    return PageGeometryResponse(
        binder_id=binder_id,
        layout=layout,
        columns=layout.columns,
        rows=layout.rows,
        slots_per_page=geometry.slots_per_page,
        total_pages=geometry.total_pages,
        total_slots=geometry.total_slots,
        total_views=total_views(geometry),
        spread=SpreadResponse(
            view=spread.view, left_page=spread.left_page, right_page=spread.right_page
        ),
    )
