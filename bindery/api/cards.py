"""
Card placement endpoints.

Adding, removing and updating the cards inside a binder. Removal and
shifted placement go through the slot engine; plain field updates do not.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from bindery.api.auth import get_caller_id
from bindery.api.binders import CardResponse
from bindery.api.reorder import EditResponse, edit_response
from bindery.db import card_to_model
from bindery.db.database import get_session
from bindery.models.binder import BinderCard
from bindery.models.db import BinderCardDB
from bindery.services.binder_editor import (
    mark_purchased,
    place_card,
    place_cards_sequentially,
    refresh_price,
    remove_card,
)
from bindery.services.scryfall import ScryfallClient, get_catalog_client

router = APIRouter(prefix="/binders/{binder_id}/cards", tags=["cards"])


class CatalogCardFields(BaseModel):
    """Catalog metadata copied onto a placed card."""

    scryfall_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, examples=["Lightning Bolt"])
    image_url: str = ""
    image_url_back: str | None = None
    set_code: str | None = Field(default=None, examples=["LEB"])
    collector_number: str | None = Field(default=None, examples=["161"])
    price_usd: float | None = None
    is_purchased: bool = True
    purchase_url: str | None = None

    def to_model(self, position_index: int) -> BinderCard:
        return BinderCard(
            id="",
            position_index=position_index,
            **self.model_dump(),
        )


class AddCardRequest(CatalogCardFields):
    """Place one card into a slot."""

    position_index: int = Field(..., ge=0)
    shift: bool = Field(
        default=False,
        description="If the slot is taken, push it and every later card up one slot",
    )


class BulkAddRequest(BaseModel):
    """Place several cards into the first free slots from start_slot on."""

    start_slot: int = Field(default=0, ge=0)
    cards: list[CatalogCardFields] = Field(..., min_length=1)


class AddCardResponse(BaseModel):
    card: CardResponse
    edit: EditResponse


class BulkAddResponse(BaseModel):
    cards: list[CardResponse]
    count: int


class PurchasedRequest(BaseModel):
    is_purchased: bool


def _card_response(db_card: BinderCardDB) -> CardResponse:
    return CardResponse.model_validate(card_to_model(db_card), from_attributes=True)


@router.post("", response_model=AddCardResponse, status_code=status.HTTP_201_CREATED)
async def add_card_to_slot(
    binder_id: str,
    request: AddCardRequest,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AddCardResponse:
    """
    Place a card into `position_index`.

    Returns 409 if the slot is taken and `shift` is false.
    """
    fields = CatalogCardFields.model_validate(
        request.model_dump(exclude={"position_index", "shift"})
    )
    card = fields.to_model(request.position_index)
    db_card, result = await place_card(session, caller_id, binder_id, card, shift=request.shift)
    return AddCardResponse(card=_card_response(db_card), edit=edit_response(result))


@router.post("/bulk", response_model=BulkAddResponse, status_code=status.HTTP_201_CREATED)
async def add_cards_sequentially(
    binder_id: str,
    request: BulkAddRequest,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BulkAddResponse:
    """Place cards one after another into free slots, never moving existing cards."""
    cards = [c.to_model(request.start_slot) for c in request.cards]
    placed = await place_cards_sequentially(
        session, caller_id, binder_id, cards, start_slot=request.start_slot
    )
    return BulkAddResponse(cards=[_card_response(c) for c in placed], count=len(placed))


@router.delete("/{card_id}", response_model=EditResponse)
async def delete_card(
    binder_id: str,
    card_id: str,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
    shift: Annotated[bool, Query(description="Close the gap by pulling later cards back")] = False,
) -> EditResponse:
    """Remove a card, optionally shifting every later card back one slot."""
    result = await remove_card(session, caller_id, binder_id, card_id, shift=shift)
    return edit_response(result)


@router.put("/{card_id}/purchased", response_model=CardResponse)
async def put_card_purchased(
    binder_id: str,
    card_id: str,
    request: PurchasedRequest,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    db_card = await mark_purchased(session, caller_id, binder_id, card_id, request.is_purchased)
    return _card_response(db_card)


@router.put("/{card_id}/refresh-price", response_model=CardResponse)
async def put_refresh_price(
    binder_id: str,
    card_id: str,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[ScryfallClient, Depends(get_catalog_client)],
) -> CardResponse:
    """Fetch the card's current price from the catalog and store it."""
    db_card = await refresh_price(session, caller_id, binder_id, card_id, catalog)
    return _card_response(db_card)
