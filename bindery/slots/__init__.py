"""
Binder slot reordering engine.

Planner functions turn an edit intent into a ReassignmentSet, the
committer applies it with negative placeholders so the per-statement
uniqueness constraint never trips, and the page deriver maps slots to
pages for display.
"""

from bindery.slots.committer import apply_reassignment, placeholder_for, two_phase_writes
from bindery.slots.pages import PageGeometry, Spread, derive, spread_pages, total_views
from bindery.slots.planner import (
    SlotFiller,
    apply_plan,
    plan_bulk_sequential_fill,
    plan_delete_keep_empty,
    plan_delete_shift,
    plan_insert_make_room,
    plan_insert_shift,
    plan_moves,
    plan_swap,
    validate_plan,
)

__all__ = [
    # Planner
    "SlotFiller",
    "apply_plan",
    "plan_bulk_sequential_fill",
    "plan_delete_keep_empty",
    "plan_delete_shift",
    "plan_insert_make_room",
    "plan_insert_shift",
    "plan_moves",
    "plan_swap",
    "validate_plan",
    # Committer
    "apply_reassignment",
    "placeholder_for",
    "two_phase_writes",
    # Pages
    "PageGeometry",
    "Spread",
    "derive",
    "spread_pages",
    "total_views",
]
