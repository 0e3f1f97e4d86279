"""
Reassignment sets: the unit of work between planner and committer.

A plan lists every card whose index must change for one edit, in the
order the planner produced them, plus the cards the edit deletes.
Applying it never requires knowing how storage enforces uniqueness.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class SlotMove:
    """One card moving to a new committed slot."""

    card_id: str
    new_index: int


@dataclass(frozen=True, slots=True)
class ReassignmentSet:
    """
    Ordered batch of slot moves and removals for a single edit.

    Attributes:
        moves: Cards changing position, in planner order
        removals: Cards deleted by the same edit (applied before moves)
    """

    moves: tuple[SlotMove, ...] = field(default_factory=tuple)
    removals: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "ReassignmentSet":
        return cls()

    @classmethod
    def from_pairs(
        cls, pairs: list[tuple[str, int]], removals: tuple[str, ...] = ()
    ) -> "ReassignmentSet":
        """Build a plan from raw (card_id, new_index) pairs."""
        return cls(
            moves=tuple(SlotMove(card_id, new_index) for card_id, new_index in pairs),
            removals=tuple(removals),
        )

    def is_empty(self) -> bool:
        return not self.moves and not self.removals

    def targets(self) -> dict[str, int]:
        """Map of card id to the index it ends up at."""
        return {move.card_id: move.new_index for move in self.moves}

    def __len__(self) -> int:
        return len(self.moves) + len(self.removals)
