"""
Binder edit service.

Runs one edit intent end to end inside the caller's session:
authorize -> read occupancy -> plan -> validate -> commit. Planning and
validation errors are raised before any write; commit errors leave the
session rolled back. There is no retry here: a retry against a stale
occupancy could apply the wrong plan.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bindery.db.operations import (
    add_card,
    get_binder,
    get_card,
    load_occupancy,
    set_card_price,
    set_card_purchased,
)
from bindery.models.binder import BinderCard, Occupancy
from bindery.models.db import BinderCardDB, BinderDB
from bindery.models.failure import (
    InvariantViolationError,
    NotFoundError,
    SlotOccupiedError,
    TransactionFailureError,
    UnauthorizedError,
)
from bindery.models.reassignment import ReassignmentSet
from bindery.services.scryfall import ScryfallClient
from bindery.slots.committer import apply_reassignment
from bindery.slots.planner import (
    plan_bulk_sequential_fill,
    plan_delete_keep_empty,
    plan_delete_shift,
    plan_insert_make_room,
    plan_insert_shift,
    plan_moves,
    plan_swap,
    validate_plan,
)

logger = logging.getLogger(__name__)


@dataclass
class EditResult:
    """Outcome of a committed edit."""

    binder_id: str
    positions: dict[str, int] = field(default_factory=dict)
    """Final index of every card the edit moved or placed."""

    removed: list[str] = field(default_factory=list)
    """Cards the edit deleted."""


async def get_owned_binder(
    session: AsyncSession,
    binder_id: str,
    caller_id: str,
    with_cards: bool = False,
    for_update: bool = False,
) -> BinderDB:
    """
    Load a binder the caller owns.

    Raises:
        NotFoundError: No such binder
        UnauthorizedError: Binder belongs to someone else
    """
    binder = await get_binder(session, binder_id, with_cards=with_cards, for_update=for_update)
    if binder is None:
        raise NotFoundError("Binder", binder_id)
    if binder.user_id != caller_id:
        logger.info("User %s denied access to binder %s", caller_id, binder_id)
        raise UnauthorizedError()
    return binder


async def get_owned_card(
    session: AsyncSession, binder_id: str, card_id: str, caller_id: str
) -> BinderCardDB:
    await get_owned_binder(session, binder_id, caller_id)
    card = await get_card(session, binder_id, card_id)
    if card is None:
        raise NotFoundError("Card", card_id)
    return card


async def read_occupancy(session: AsyncSession, binder_id: str, caller_id: str) -> Occupancy:
    await get_owned_binder(session, binder_id, caller_id)
    return await load_occupancy(session, binder_id)


async def commit_plan(
    session: AsyncSession,
    binder_id: str,
    occupancy: Occupancy,
    plan: ReassignmentSet,
) -> EditResult:
    """Validate `plan` against `occupancy` and apply it."""
    validate_plan(occupancy, plan)
    positions = await apply_reassignment(session, binder_id, plan)
    return EditResult(binder_id=binder_id, positions=positions, removed=list(plan.removals))


async def _run_intent(
    session: AsyncSession,
    binder_id: str,
    caller_id: str,
    planner: Callable[[Occupancy], ReassignmentSet],
) -> EditResult:
    await get_owned_binder(session, binder_id, caller_id, for_update=True)
    occupancy = await load_occupancy(session, binder_id)
    plan = planner(occupancy)
    return await commit_plan(session, binder_id, occupancy, plan)


# --- Reordering ---


async def swap_cards(
    session: AsyncSession, caller_id: str, binder_id: str, card_id: str, target_slot: int
) -> EditResult:
    return await _run_intent(
        session, binder_id, caller_id, lambda occ: plan_swap(occ, card_id, target_slot)
    )


async def insert_card(
    session: AsyncSession, caller_id: str, binder_id: str, card_id: str, target_slot: int
) -> EditResult:
    return await _run_intent(
        session, binder_id, caller_id, lambda occ: plan_insert_shift(occ, card_id, target_slot)
    )


async def make_room(
    session: AsyncSession, caller_id: str, binder_id: str, target_slot: int
) -> EditResult:
    return await _run_intent(
        session, binder_id, caller_id, lambda occ: plan_insert_make_room(occ, target_slot)
    )


async def reorder_cards(
    session: AsyncSession,
    caller_id: str,
    binder_id: str,
    moves: Iterable[tuple[str, int]],
) -> EditResult:
    """
    Apply a caller-built batch of moves.

    A batch that would stack two cards is the caller's mistake here, not
    a planning defect, so it is reported as a 400.
    """
    await get_owned_binder(session, binder_id, caller_id, for_update=True)
    occupancy = await load_occupancy(session, binder_id)
    plan = plan_moves(occupancy, moves)
    try:
        validate_plan(occupancy, plan)
    except InvariantViolationError as e:
        e.status_code = 400
        raise
    return await commit_plan(session, binder_id, occupancy, plan)


async def remove_card(
    session: AsyncSession, caller_id: str, binder_id: str, card_id: str, shift: bool = False
) -> EditResult:
    planner = plan_delete_shift if shift else plan_delete_keep_empty
    return await _run_intent(session, binder_id, caller_id, lambda occ: planner(occ, card_id))


# --- Placement ---


async def place_card(
    session: AsyncSession,
    caller_id: str,
    binder_id: str,
    card: BinderCard,
    shift: bool = False,
) -> tuple[BinderCardDB, EditResult]:
    """
    Put a new card into `card.position_index`.

    With `shift`, cards at and after the slot move up one first (same
    transaction). Without it an occupied slot is refused.

    Raises:
        SlotOccupiedError: Slot taken and no shift requested
    """
    await get_owned_binder(session, binder_id, caller_id, for_update=True)
    occupancy = await load_occupancy(session, binder_id)

    result = EditResult(binder_id=binder_id)
    occupant = occupancy.card_at(card.position_index)
    if occupant is not None:
        if not shift:
            raise SlotOccupiedError(card.position_index, occupant)
        plan = plan_insert_make_room(occupancy, card.position_index)
        result = await commit_plan(session, binder_id, occupancy, plan)

    db_card = await _insert(session, binder_id, card)
    result.positions[db_card.id] = db_card.position_index
    logger.info("Placed %s at slot %d in binder %s", card.name, card.position_index, binder_id)
    return db_card, result


async def place_cards_sequentially(
    session: AsyncSession,
    caller_id: str,
    binder_id: str,
    cards: list[BinderCard],
    start_slot: int = 0,
) -> list[BinderCardDB]:
    """
    Place several cards into the first free slots at or after `start_slot`.

    Existing cards never move; the incoming cards' own position_index is
    ignored.
    """
    await get_owned_binder(session, binder_id, caller_id, for_update=True)
    occupancy = await load_occupancy(session, binder_id)
    filler = plan_bulk_sequential_fill(occupancy, start_slot)

    placed: list[BinderCardDB] = []
    for card, slot in zip(cards, filler, strict=False):
        placed.append(await _insert(session, binder_id, replace(card, position_index=slot)))

    logger.info(
        "Placed %d cards in binder %s (slots %s)", len(placed), binder_id, filler.claimed
    )
    return placed


async def _insert(session: AsyncSession, binder_id: str, card: BinderCard) -> BinderCardDB:
    try:
        return await add_card(session, binder_id, card)
    except IntegrityError as e:
        await session.rollback()
        raise TransactionFailureError(
            "Slot was taken while placing the card; no changes were applied",
            detail=str(e.orig),
        ) from e


# --- Card updates ---


async def mark_purchased(
    session: AsyncSession, caller_id: str, binder_id: str, card_id: str, is_purchased: bool
) -> BinderCardDB:
    card = await get_owned_card(session, binder_id, card_id, caller_id)
    return await set_card_purchased(session, card, is_purchased)


async def refresh_price(
    session: AsyncSession,
    caller_id: str,
    binder_id: str,
    card_id: str,
    catalog: ScryfallClient,
) -> BinderCardDB:
    card = await get_owned_card(session, binder_id, card_id, caller_id)
    price = await catalog.fetch_price_usd(card.scryfall_id)
    logger.info("Refreshed price of %s: %s -> %s", card.name, card.price_usd, price)
    return await set_card_price(session, card, price)
