from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from bindery.models.slot import DEFAULT_LAYOUT, BinderLayout


@dataclass
class BinderCard:
    """
    A card placed in a binder slot.

    Distinct from catalog metadata: the same printing can sit in many
    binders, each placement being its own BinderCard.

    Attributes:
        id: Placement identity
        scryfall_id: Catalog reference
        position_index: Slot the card occupies
        name: Card name as shown in the catalog
        image_url: Front face image
        image_url_back: Back face image for double-faced cards
        set_code: Set code (e.g., "DMU")
        collector_number: Collector number within set
        price_usd: Last known price, if the catalog had one
        is_purchased: Whether the owner already has this card
        purchase_url: Optional external store link
    """

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


@dataclass
class Binder:
    """A named, fixed-geometry collection of card slots owned by one user."""

    id: str
    user_id: str
    name: str
    layout: BinderLayout = DEFAULT_LAYOUT
    gray_out_unpurchased: bool = False
    cards: list[BinderCard] = field(default_factory=list)


class Occupancy(Mapping[int, str]):
    """
    Binder-wide mapping from slot index to the card residing there.

    Immutable; planners read it and return plans, they never mutate it.
    """

    __slots__ = ("_by_slot", "_by_card")

    def __init__(self, slots: Mapping[int, str] | None = None) -> None:
        self._by_slot: dict[int, str] = dict(slots or {})
        self._by_card: dict[str, int] = {}
        for index, card_id in self._by_slot.items():
            if card_id in self._by_card:
                first = self._by_card[card_id]
                raise ValueError(f"Card {card_id} appears at slots {first} and {index}")
            self._by_card[card_id] = index

    @classmethod
    def from_positions(cls, positions: Mapping[str, int]) -> "Occupancy":
        """Build from a card id -> index mapping."""
        slots: dict[int, str] = {}
        for card_id, index in positions.items():
            if index in slots:
                raise ValueError(f"Slot {index} is held by more than one card")
            slots[index] = card_id
        return cls(slots)

    def __getitem__(self, index: int) -> str:
        return self._by_slot[index]

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._by_slot))

    def __len__(self) -> int:
        return len(self._by_slot)

    def __repr__(self) -> str:
        return f"Occupancy({dict(sorted(self._by_slot.items()))})"

    def card_at(self, index: int) -> str | None:
        return self._by_slot.get(index)

    def index_of(self, card_id: str) -> int | None:
        return self._by_card.get(card_id)

    def has_card(self, card_id: str) -> bool:
        return card_id in self._by_card

    def is_occupied(self, index: int) -> bool:
        return index in self._by_slot

    def positions(self) -> dict[str, int]:
        """Card id -> index."""
        return dict(self._by_card)

    @property
    def max_index(self) -> int | None:
        """Highest occupied slot, or None for an empty binder."""
        return max(self._by_slot) if self._by_slot else None
