"""
Database CRUD operations.

Provides async functions for creating, reading, updating, and deleting
binders and the cards placed in them. Slot reassignment lives in
`bindery.slots.committer`; nothing here moves a card between slots.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from bindery.models.binder import Binder, BinderCard, Occupancy
from bindery.models.db import BinderCardDB, BinderDB
from bindery.models.slot import BinderLayout

# --- Binder Operations ---


async def get_binder(
    session: AsyncSession,
    binder_id: str,
    with_cards: bool = True,
    for_update: bool = False,
) -> BinderDB | None:
    """
    Get a binder by id.

    Args:
        with_cards: Eagerly load the binder's cards
        for_update: Lock the binder row until the transaction ends
            (SELECT ... FOR UPDATE; ignored by SQLite)

    Returns None if no binder exists with this id.
    """
    stmt = select(BinderDB).where(BinderDB.id == binder_id)
    if with_cards:
        stmt = stmt.options(selectinload(BinderDB.cards))
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_binders(session: AsyncSession, user_id: str) -> list[BinderDB]:
    """Get all binders owned by a user, oldest first."""
    result = await session.execute(
        select(BinderDB)
        .where(BinderDB.user_id == user_id)
        .options(selectinload(BinderDB.cards))
        .order_by(BinderDB.created_at, BinderDB.name)
    )
    return list(result.scalars().all())


async def create_binder(
    session: AsyncSession,
    user_id: str,
    name: str,
    layout: BinderLayout,
) -> BinderDB:
    """Create a new, empty binder for a user."""
    binder = BinderDB(
        user_id=user_id,
        name=name,
        layout=layout.value,
        gray_out_unpurchased=False,
        cards=[],
    )
    session.add(binder)
    await session.flush()
    return binder


async def rename_binder(session: AsyncSession, binder: BinderDB, name: str) -> BinderDB:
    binder.name = name
    await session.flush()
    return binder


async def update_binder_settings(
    session: AsyncSession, binder: BinderDB, gray_out_unpurchased: bool
) -> BinderDB:
    binder.gray_out_unpurchased = gray_out_unpurchased
    await session.flush()
    return binder


async def delete_binder(session: AsyncSession, binder: BinderDB) -> None:
    """
    Delete a binder and every card in it.

    The binder must have been loaded with its cards so the ORM cascade
    can remove them; the foreign key cascade covers raw deletes.
    """
    await session.delete(binder)
    await session.flush()


# --- Card Operations ---


async def get_card(session: AsyncSession, binder_id: str, card_id: str) -> BinderCardDB | None:
    """Get a card by id, only if it sits in the given binder."""
    result = await session.execute(
        select(BinderCardDB).where(
            BinderCardDB.id == card_id,
            BinderCardDB.binder_id == binder_id,
        )
    )
    return result.scalar_one_or_none()


async def load_occupancy(session: AsyncSession, binder_id: str) -> Occupancy:
    """
    Read the binder's current slot -> card id map straight from storage.

    Queries columns rather than ORM objects so the result reflects every
    statement already executed in this transaction.
    """
    result = await session.execute(
        select(BinderCardDB.position_index, BinderCardDB.id).where(
            BinderCardDB.binder_id == binder_id
        )
    )
    return Occupancy({index: card_id for index, card_id in result.all()})


async def add_card(
    session: AsyncSession,
    binder_id: str,
    card: BinderCard,
) -> BinderCardDB:
    """
    Insert a card at `card.position_index`.

    The caller checks the slot is free; a taken slot surfaces as
    IntegrityError from the unique constraint.
    """
    db_card = BinderCardDB(
        binder_id=binder_id,
        scryfall_id=card.scryfall_id,
        position_index=card.position_index,
        name=card.name,
        image_url=card.image_url,
        image_url_back=card.image_url_back,
        set_code=card.set_code,
        collector_number=card.collector_number,
        price_usd=card.price_usd,
        is_purchased=card.is_purchased,
        purchase_url=card.purchase_url,
    )
    session.add(db_card)
    await session.flush()
    return db_card


async def set_card_purchased(
    session: AsyncSession, card: BinderCardDB, is_purchased: bool
) -> BinderCardDB:
    card.is_purchased = is_purchased
    await session.flush()
    return card


async def set_card_price(
    session: AsyncSession, card: BinderCardDB, price_usd: float | None
) -> BinderCardDB:
    card.price_usd = price_usd
    await session.flush()
    return card


# --- Conversions ---


def card_to_model(db_card: BinderCardDB) -> BinderCard:
    """Convert a database card to a domain model."""
    return BinderCard(
        id=db_card.id,
        scryfall_id=db_card.scryfall_id,
        position_index=db_card.position_index,
        name=db_card.name,
        image_url=db_card.image_url,
        image_url_back=db_card.image_url_back,
        set_code=db_card.set_code,
        collector_number=db_card.collector_number,
        price_usd=db_card.price_usd,
        is_purchased=db_card.is_purchased,
        purchase_url=db_card.purchase_url,
    )


def binder_to_model(db_binder: BinderDB) -> Binder:
    """Convert a database binder (loaded with cards) to a domain model."""
    return Binder(
        id=db_binder.id,
        user_id=db_binder.user_id,
        name=db_binder.name,
        layout=BinderLayout(db_binder.layout),
        gray_out_unpurchased=db_binder.gray_out_unpurchased,
        cards=sorted(
            (card_to_model(c) for c in db_binder.cards),
            key=lambda c: c.position_index,
        ),
    )
