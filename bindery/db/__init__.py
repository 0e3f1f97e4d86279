from bindery.db.database import get_session, init_db
from bindery.db.operations import (
    add_card,
    binder_to_model,
    card_to_model,
    create_binder,
    delete_binder,
    get_binder,
    get_card,
    list_binders,
    load_occupancy,
    rename_binder,
    set_card_price,
    set_card_purchased,
    update_binder_settings,
)

__all__ = [
    "add_card",
    "binder_to_model",
    "card_to_model",
    "create_binder",
    "delete_binder",
    "get_binder",
    "get_card",
    "get_session",
    "init_db",
    "list_binders",
    "load_occupancy",
    "rename_binder",
    "set_card_price",
    "set_card_purchased",
    "update_binder_settings",
]
