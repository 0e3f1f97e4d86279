"""Tests for slot, occupancy and reassignment models."""

import pytest

from bindery.models.binder import Binder, Occupancy
from bindery.models.reassignment import ReassignmentSet, SlotMove
from bindery.models.slot import DEFAULT_LAYOUT, BinderLayout, SlotIndex


class TestBinderLayout:
    @pytest.mark.parametrize(
        ("layout", "columns", "rows", "per_page"),
        [
            (BinderLayout.GRID_2X2, 2, 2, 4),
            (BinderLayout.GRID_3X3, 3, 3, 9),
            (BinderLayout.GRID_4X3, 4, 3, 12),
        ],
    )
    def test_grid_dimensions(
        self, layout: BinderLayout, columns: int, rows: int, per_page: int
    ) -> None:
        assert layout.columns == columns
        assert layout.rows == rows
        assert layout.slots_per_page == per_page

    def test_values_match_stored_strings(self) -> None:
        assert BinderLayout("GRID_3x3") is BinderLayout.GRID_3X3
        assert BinderLayout.GRID_4X3.value == "GRID_4x3"

    def test_unknown_layout_rejected(self) -> None:
        with pytest.raises(ValueError):
            BinderLayout("GRID_5x5")

    def test_default_is_three_by_three(self) -> None:
        assert DEFAULT_LAYOUT is BinderLayout.GRID_3X3


class TestSlotIndex:
    def test_zero_is_valid(self) -> None:
        assert int(SlotIndex(0)) == 0

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            SlotIndex(-1)

    @pytest.mark.parametrize("value", [True, 1.0, "3", None])
    def test_non_int_rejected(self, value: object) -> None:
        with pytest.raises(TypeError):
            SlotIndex(value)  # type: ignore[arg-type]

    def test_ordering(self) -> None:
        assert SlotIndex(2) < SlotIndex(10)


class TestOccupancy:
    def test_iterates_in_slot_order(self) -> None:
        occ = Occupancy({7: "c", 0: "a", 3: "b"})

        assert list(occ) == [0, 3, 7]
        assert list(occ.values()) == ["a", "b", "c"]

    def test_lookups_both_ways(self) -> None:
        occ = Occupancy({0: "a", 5: "b"})

        assert occ.card_at(5) == "b"
        assert occ.card_at(1) is None
        assert occ.index_of("a") == 0
        assert occ.index_of("zzz") is None
        assert occ.has_card("b")
        assert occ.is_occupied(0)
        assert not occ.is_occupied(2)

    def test_same_card_twice_rejected(self) -> None:
        with pytest.raises(ValueError, match="appears at slots"):
            Occupancy({0: "a", 1: "a"})

    def test_from_positions_rejects_shared_slot(self) -> None:
        with pytest.raises(ValueError, match="more than one card"):
            Occupancy.from_positions({"a": 2, "b": 2})

    def test_max_index(self) -> None:
        assert Occupancy().max_index is None
        assert Occupancy({2: "a", 40: "b"}).max_index == 40

    def test_positions_is_a_copy(self) -> None:
        occ = Occupancy({0: "a"})
        occ.positions()["a"] = 9

        assert occ.index_of("a") == 0

    def test_binder_defaults(self, make_card) -> None:
        binder = Binder(id="b1", user_id="u", name="N", cards=[make_card("x", 3)])

        assert binder.gray_out_unpurchased is False
        assert binder.layout is DEFAULT_LAYOUT


class TestReassignmentSet:
    def test_empty(self) -> None:
        plan = ReassignmentSet.empty()

        assert plan.is_empty()
        assert len(plan) == 0

    def test_from_pairs_keeps_order(self) -> None:
        plan = ReassignmentSet.from_pairs([("b", 0), ("a", 1)], removals=("c",))

        assert plan.moves == (SlotMove("b", 0), SlotMove("a", 1))
        assert plan.removals == ("c",)
        assert len(plan) == 3
        assert not plan.is_empty()

    def test_targets(self) -> None:
        plan = ReassignmentSet.from_pairs([("a", 3), ("b", 4)])

        assert plan.targets() == {"a": 3, "b": 4}

    def test_removal_only_plan_is_not_empty(self) -> None:
        assert not ReassignmentSet(removals=("a",)).is_empty()
