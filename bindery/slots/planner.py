"""
Position planning for binder edits.

Every function here is pure: it reads an Occupancy and returns a
ReassignmentSet describing the full effect of one edit intent. Nothing
is written; the committer applies plans, and `validate_plan` is the gate
every plan passes before it gets there.

Cards that keep their index never appear in a plan.
"""

import logging
from collections.abc import Iterable, Iterator

from bindery.models.binder import Occupancy
from bindery.models.failure import InvalidSlotError, InvariantViolationError, NotFoundError
from bindery.models.reassignment import ReassignmentSet, SlotMove
from bindery.models.slot import SlotIndex

logger = logging.getLogger(__name__)


def _require_card(occupancy: Occupancy, card_id: str) -> int:
    index = occupancy.index_of(card_id)
    if index is None:
        raise NotFoundError("Card", card_id)
    return index


def _require_slot(value: object) -> int:
    try:
        return SlotIndex(value).value  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise InvalidSlotError(value) from e


# =============================================================================
# EDIT INTENTS
# =============================================================================


def plan_swap(occupancy: Occupancy, card_id: str, target_slot: int) -> ReassignmentSet:
    """
    Move a card onto `target_slot`, sending any occupant to the vacated slot.

    An empty target is a plain move. Dropping a card on its own slot is
    an empty plan.
    """
    source = _require_card(occupancy, card_id)
    target = _require_slot(target_slot)

    if source == target:
        return ReassignmentSet.empty()

    moves = [SlotMove(card_id, target)]
    occupant = occupancy.card_at(target)
    if occupant is not None:
        moves.append(SlotMove(occupant, source))

    return ReassignmentSet(moves=tuple(moves))


def plan_insert_shift(occupancy: Occupancy, card_id: str, target_slot: int) -> ReassignmentSet:
    """
    Rotate a card into `target_slot`, shifting the cards in between by one.

    Moving from i to j:
    - i < j: cards with i < index <= j move down one
    - i > j: cards with j <= index < i move up one

    Empty slots inside the range shift along with the cards, so the
    relative order of everything in the range is preserved and nothing
    outside [min(i, j), max(i, j)] changes.
    """
    source = _require_card(occupancy, card_id)
    target = _require_slot(target_slot)

    if source == target:
        return ReassignmentSet.empty()

    # walk occupied slots only; the gap between source and target is unbounded
    moves = [SlotMove(card_id, target)]
    if source < target:
        moves.extend(
            SlotMove(occupancy[index], index - 1)
            for index in occupancy
            if source < index <= target
        )
    else:
        moves.extend(
            SlotMove(occupancy[index], index + 1)
            for index in occupancy
            if target <= index < source
        )

    return ReassignmentSet(moves=tuple(moves))


def plan_delete_keep_empty(occupancy: Occupancy, card_id: str) -> ReassignmentSet:
    """Remove one card and leave its slot empty."""
    _require_card(occupancy, card_id)
    return ReassignmentSet(removals=(card_id,))


def plan_delete_shift(occupancy: Occupancy, card_id: str) -> ReassignmentSet:
    """Remove one card and pull every later card back by one slot."""
    removed_at = _require_card(occupancy, card_id)

    moves = tuple(
        SlotMove(occupancy[index], index - 1) for index in occupancy if index > removed_at
    )
    return ReassignmentSet(moves=moves, removals=(card_id,))


def plan_insert_make_room(occupancy: Occupancy, target_slot: int) -> ReassignmentSet:
    """
    Push every card at or after `target_slot` forward by one.

    Leaves `target_slot` empty for a following add.
    """
    target = _require_slot(target_slot)

    moves = tuple(SlotMove(occupancy[index], index + 1) for index in occupancy if index >= target)
    return ReassignmentSet(moves=moves)


def plan_moves(occupancy: Occupancy, pairs: Iterable[tuple[str, int]]) -> ReassignmentSet:
    """
    Turn a caller-supplied batch of (card_id, new_index) into a plan.

    Entries that leave a card where it already is are dropped. The result
    still has to pass `validate_plan`: a raw batch can easily forget a
    card that is in the way.
    """
    changed: list[tuple[str, int]] = []
    for card_id, new_index in pairs:
        current = _require_card(occupancy, card_id)
        target = _require_slot(new_index)
        if current != target:
            changed.append((card_id, target))
    return ReassignmentSet.from_pairs(changed)


# =============================================================================
# SEQUENTIAL FILL
# =============================================================================


class SlotFiller:
    """
    Lazy "next free slot" cursor for placing several cards in one session.

    Each slot handed out is claimed: it is never offered again, even
    though nothing has been written yet. Iterating is restartable in the
    sense that a new iterator continues from the current cursor without
    revisiting claimed slots. Growth past the last occupied slot is
    unbounded.
    """

    def __init__(self, occupancy: Occupancy, start_slot: int = 0) -> None:
        self._taken: set[int] = set(occupancy)
        self._cursor = _require_slot(start_slot)
        self.claimed: list[int] = []

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.next_slot()

    def next_slot(self) -> int:
        while self._cursor in self._taken:
            self._cursor += 1
        slot = self._cursor
        self._taken.add(slot)
        self.claimed.append(slot)
        self._cursor += 1
        return slot

    def claim(self, count: int) -> list[int]:
        """Claim the next `count` free slots."""
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        return [self.next_slot() for _ in range(count)]


def plan_bulk_sequential_fill(occupancy: Occupancy, start_slot: int = 0) -> SlotFiller:
    """Start a sequential fill session at `start_slot`."""
    return SlotFiller(occupancy, start_slot)


# =============================================================================
# VALIDATION
# =============================================================================


def apply_plan(occupancy: Occupancy, plan: ReassignmentSet) -> Occupancy:
    """
    Compute the occupancy after `plan` is fully applied.

    Raises:
        InvariantViolationError: If the post-state is not a valid occupancy
    """
    positions = occupancy.positions()
    for card_id in plan.removals:
        positions.pop(card_id, None)
    for move in plan.moves:
        positions[move.card_id] = move.new_index

    try:
        return Occupancy.from_positions(positions)
    except ValueError as e:
        raise InvariantViolationError(
            "Reassignment would place two cards in the same slot", detail=str(e)
        ) from e


def validate_plan(occupancy: Occupancy, plan: ReassignmentSet) -> Occupancy:
    """
    Check a plan against the current occupancy before it reaches storage.

    Returns the resulting occupancy.

    Raises:
        NotFoundError: A plan entry references a card not in the binder
        InvariantViolationError: The plan is malformed or its result
            would break slot uniqueness
    """
    removed = set(plan.removals)
    if len(removed) != len(plan.removals):
        raise InvariantViolationError("Reassignment removes the same card twice")

    seen: set[str] = set()
    for move in plan.moves:
        if move.card_id in seen:
            raise InvariantViolationError(
                "Reassignment moves the same card twice", detail=f"card={move.card_id}"
            )
        seen.add(move.card_id)
        if move.card_id in removed:
            raise InvariantViolationError(
                "Reassignment moves a card it also removes", detail=f"card={move.card_id}"
            )
        if move.new_index < 0:
            raise InvariantViolationError(
                "Reassignment targets a negative slot",
                detail=f"card={move.card_id} index={move.new_index}",
            )

    for card_id in (*plan.removals, *seen):
        _require_card(occupancy, card_id)

    result = apply_plan(occupancy, plan)
    logger.debug(
        "Validated plan: %d moves, %d removals, %d cards after",
        len(plan.moves),
        len(plan.removals),
        len(result),
    )
    return result
