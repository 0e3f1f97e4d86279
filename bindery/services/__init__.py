"""
Bindery services.

Binder edit orchestration and the card catalog client.
"""

from bindery.services.binder_editor import (
    EditResult,
    commit_plan,
    get_owned_binder,
    get_owned_card,
    insert_card,
    make_room,
    mark_purchased,
    place_card,
    place_cards_sequentially,
    read_occupancy,
    refresh_price,
    remove_card,
    reorder_cards,
    swap_cards,
)
from bindery.services.scryfall import ScryfallClient, extract_price_usd, get_catalog_client

__all__ = [
    "EditResult",
    "ScryfallClient",
    "commit_plan",
    "extract_price_usd",
    "get_catalog_client",
    "get_owned_binder",
    "get_owned_card",
    "insert_card",
    "make_room",
    "mark_purchased",
    "place_card",
    "place_cards_sequentially",
    "read_occupancy",
    "refresh_price",
    "remove_card",
    "reorder_cards",
    "swap_cards",
]
