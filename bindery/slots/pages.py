"""
Page geometry derived from a binder's layout and its highest occupied slot.

Pure and stateless: recomputed on every read, never stored.

Pages are numbered from 0 and shown as book spreads, the way a physical
binder opens. Page 0 is the inside of the front cover, a right-hand page
shown alone in view 0. View k (k >= 1) shows page 2k - 1 on the left and
page 2k on the right. Page counts are always even, so the last view holds
only a left-hand page (the inside of the back cover) and its right page
is None. Clients must not assume a plain (2k, 2k + 1) pairing: every
view after the first starts on an odd page.

Slots are unbounded, so callers ask for one view at a time through
`spread_pages` and use `total_views` for paging. Both are O(1).
"""

from dataclasses import dataclass

from bindery.config import PAGES_PER_SPREAD
from bindery.models.slot import BinderLayout

MIN_PAGES = 2


@dataclass(frozen=True, slots=True)
class PageGeometry:
    """How a binder's slots are cut into pages."""

    slots_per_page: int
    total_pages: int

    @property
    def total_slots(self) -> int:
        return self.slots_per_page * self.total_pages


@dataclass(frozen=True, slots=True)
class Spread:
    """One two-page view; either side may be absent."""

    view: int
    left_page: int | None
    right_page: int | None


def derive(layout: BinderLayout, max_occupied_index: int | None) -> PageGeometry:
    """
    Compute page size and page count for a binder.

    Page count is the smallest even number of pages (at least two) whose
    slots cover every index up to `max_occupied_index`. Pass None or -1
    for an empty binder.
    """
    slots_per_page = layout.slots_per_page
    needed_slots = 0 if max_occupied_index is None else max(max_occupied_index + 1, 0)

    pages = -(-needed_slots // slots_per_page)
    pages = max(pages, MIN_PAGES)
    if pages % PAGES_PER_SPREAD:
        pages += PAGES_PER_SPREAD - pages % PAGES_PER_SPREAD

    return PageGeometry(slots_per_page=slots_per_page, total_pages=pages)


def total_views(geometry: PageGeometry) -> int:
    """Number of spread views needed to show every page."""
    # view 0 holds page 0; pages 1..n-1 pair up and the last view is left-only
    return 1 + geometry.total_pages // 2


def spread_pages(geometry: PageGeometry, view: int) -> Spread:
    """Pages shown in spread view `view`."""
    if not 0 <= view < total_views(geometry):
        raise ValueError(f"View {view} out of range for {geometry.total_pages} pages")

    if view == 0:
        return Spread(view=0, left_page=None, right_page=0)

    left = 2 * view - 1
    right = 2 * view
    return Spread(
        view=view,
        left_page=left,
        right_page=right if right < geometry.total_pages else None,
    )

