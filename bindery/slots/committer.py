"""
Two-phase application of reassignment sets.

Storage checks (binder_id, position_index) uniqueness after every
statement, so writing final indices one at a time can collide even when
the end state is valid (swap A:0, B:1 by writing A=1 first). Every plan
is therefore applied in two passes inside the caller's transaction:

1. Removals are deleted.
2. Phase 1: each moved card gets a distinct negative placeholder.
   Committed indices are never negative, so nothing can collide.
3. Phase 2: each moved card gets its real target. Targets are distinct
   and every card that had to move holds a placeholder, so nothing can
   collide unless the plan was wrong.

Any failure rolls the session back. The caller re-fetches and resubmits.
"""

import logging

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bindery.config import PLACEHOLDER_BASE
from bindery.models.db import BinderCardDB
from bindery.models.failure import (
    NotFoundError,
    PlaceholderCollisionError,
    TransactionFailureError,
)
from bindery.models.reassignment import ReassignmentSet

logger = logging.getLogger(__name__)


def placeholder_for(position: int) -> int:
    """Transient index for the card at `position` (0-based) in a batch."""
    return PLACEHOLDER_BASE - position


def two_phase_writes(plan: ReassignmentSet) -> list[tuple[str, int]]:
    """
    The exact ordered (card_id, index) writes used to apply `plan`.

    First every moved card's placeholder, then every real target.
    Removals are not writes of an index and are not listed.
    """
    phase_one = [(move.card_id, placeholder_for(k)) for k, move in enumerate(plan.moves)]
    phase_two = [(move.card_id, move.new_index) for move in plan.moves]
    return phase_one + phase_two


async def _write_index(session: AsyncSession, binder_id: str, card_id: str, index: int) -> None:
    result = await session.execute(
        update(BinderCardDB)
        .where(BinderCardDB.id == card_id, BinderCardDB.binder_id == binder_id)
        .values(position_index=index)
    )
    # rowcount is available on UPDATE results; type stubs incomplete for async
    if int(result.rowcount) == 0:  # type: ignore[attr-defined]
        raise NotFoundError("Card", card_id)


async def _remove(session: AsyncSession, binder_id: str, card_id: str) -> None:
    result = await session.execute(
        delete(BinderCardDB).where(BinderCardDB.id == card_id, BinderCardDB.binder_id == binder_id)
    )
    if int(result.rowcount) == 0:  # type: ignore[attr-defined]
        raise NotFoundError("Card", card_id)


async def apply_reassignment(
    session: AsyncSession,
    binder_id: str,
    plan: ReassignmentSet,
) -> dict[str, int]:
    """
    Apply a validated plan to storage.

    Does not commit; the session's transaction is the atomicity boundary.

    Returns:
        Final index of every moved card

    Raises:
        NotFoundError: A planned card no longer exists in the binder
        PlaceholderCollisionError: Phase 1 hit the unique constraint
        TransactionFailureError: Storage rejected a removal or final write
    """
    if plan.is_empty():
        return {}

    logger.debug(
        "Applying plan to binder %s: %d moves, %d removals",
        binder_id,
        len(plan.moves),
        len(plan.removals),
    )

    writes = two_phase_writes(plan)
    phase_one, phase_two = writes[: len(plan.moves)], writes[len(plan.moves) :]
    phase = "removal"

    try:
        for card_id in plan.removals:
            await _remove(session, binder_id, card_id)

        phase = "placeholder"
        for card_id, index in phase_one:
            await _write_index(session, binder_id, card_id, index)

        phase = "final"
        for card_id, index in phase_two:
            await _write_index(session, binder_id, card_id, index)

    except NotFoundError:
        await session.rollback()
        logger.warning("Card vanished from binder %s during %s writes", binder_id, phase)
        raise
    except IntegrityError as e:
        await session.rollback()
        if phase == "placeholder":
            logger.error("Placeholder collision in binder %s: %s", binder_id, e)
            raise PlaceholderCollisionError(
                "Transient slot collided during reassignment", detail=str(e.orig)
            ) from e
        logger.warning("Unique constraint rejected %s writes in binder %s", phase, binder_id)
        raise TransactionFailureError(
            "Storage rejected the reassignment; no changes were applied",
            detail=str(e.orig),
        ) from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.warning(
            "Reassignment aborted in binder %s during %s writes: %s", binder_id, phase, e
        )
        raise TransactionFailureError(
            "Storage aborted the reassignment; no changes were applied",
            detail=type(e).__name__,
        ) from e

    return dict(phase_two)
