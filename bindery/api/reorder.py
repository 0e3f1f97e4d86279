"""
Reordering endpoints.

Each endpoint is one edit intent. The response lists the final index
of every card the edit touched; cards not listed kept their slot.
On a 409 transaction_failure the client should reload the occupancy and
resubmit.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from bindery.api.auth import get_caller_id
from bindery.db.database import get_session
from bindery.services.binder_editor import (
    EditResult,
    insert_card,
    make_room,
    reorder_cards,
    swap_cards,
)

router = APIRouter(prefix="/binders/{binder_id}", tags=["reorder"])


class EditResponse(BaseModel):
    """Result of a committed edit."""

    binder_id: str
    positions: dict[str, int] = Field(
        default_factory=dict,
        description="Final slot of every card the edit moved or placed",
    )
    removed: list[str] = Field(default_factory=list)


class CardMoveRequest(BaseModel):
    """Drag a card onto a slot."""

    card_id: str
    target_slot: int = Field(..., ge=0)


class MakeRoomRequest(BaseModel):
    target_slot: int = Field(..., ge=0)


class MoveEntry(BaseModel):
    card_id: str = Field(..., alias="cardId")
    new_position: int = Field(..., alias="newPosition", ge=0)

    model_config = {"populate_by_name": True}


class ReorderRequest(BaseModel):
    """Raw batch of moves, applied atomically."""

    moves: list[MoveEntry] = Field(
        ...,
        examples=[[{"cardId": "a", "newPosition": 1}, {"cardId": "b", "newPosition": 0}]],
    )


def edit_response(result: EditResult) -> EditResponse:
    return EditResponse(
        binder_id=result.binder_id,
        positions=result.positions,
        removed=result.removed,
    )


@router.post("/swap", response_model=EditResponse)
async def post_swap(
    binder_id: str,
    request: CardMoveRequest,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> EditResponse:
    """Move a card onto a slot; a card already there takes the vacated slot."""
    result = await swap_cards(session, caller_id, binder_id, request.card_id, request.target_slot)
    return edit_response(result)


@router.post("/insert", response_model=EditResponse)
async def post_insert(
    binder_id: str,
    request: CardMoveRequest,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> EditResponse:
    """Move a card to a slot, shifting the cards in between by one."""
    result = await insert_card(session, caller_id, binder_id, request.card_id, request.target_slot)
    return edit_response(result)


@router.post("/make-room", response_model=EditResponse)
async def post_make_room(
    binder_id: str,
    request: MakeRoomRequest,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> EditResponse:
    """Push every card at or after a slot up by one, leaving the slot empty."""
    result = await make_room(session, caller_id, binder_id, request.target_slot)
    return edit_response(result)


@router.put("/reorder", response_model=EditResponse)
async def put_reorder(
    binder_id: str,
    request: ReorderRequest,
    caller_id: Annotated[str, Depends(get_caller_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> EditResponse:
    """
    Apply a raw batch of moves.

    The batch must account for every card it displaces; a batch whose
    result would put two cards in one slot is refused before any write.
    """
    moves = [(m.card_id, m.new_position) for m in request.moves]
    result = await reorder_cards(session, caller_id, binder_id, moves)
    return edit_response(result)
