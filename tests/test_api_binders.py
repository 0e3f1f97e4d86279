"""Tests for binder API endpoints."""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from bindery.services import binder_editor

OWNER = {"X-User-Id": "owner"}
STRANGER = {"X-User-Id": "stranger"}


class TestIdentity:
    async def test_missing_identity_is_401(self, client: AsyncClient) -> None:
        response = await client.get("/binders")

        assert response.status_code == 401
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "unauthorized"

    async def test_blank_identity_is_401(self, client: AsyncClient) -> None:
        response = await client.get("/binders", headers={"X-User-Id": "   "})

        assert response.status_code == 401


class TestBinderCrud:
    async def test_create_binder(self, client: AsyncClient) -> None:
        response = await client.post(
            "/binders", json={"name": "Foil Commanders", "layout": "GRID_4x3"}, headers=OWNER
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Foil Commanders"
        assert data["layout"] == "GRID_4x3"
        assert data["user_id"] == "owner"
        assert data["cards"] == []
        assert data["total_cards"] == 0

    async def test_create_uses_default_layout(self, client: AsyncClient) -> None:
        response = await client.post("/binders", json={"name": "Plain"}, headers=OWNER)

        assert response.json()["layout"] == "GRID_3x3"

    async def test_create_rejects_unknown_layout(self, client: AsyncClient) -> None:
        response = await client.post(
            "/binders", json={"name": "X", "layout": "GRID_9x9"}, headers=OWNER
        )

        assert response.status_code == 422

    async def test_create_rejects_empty_name(self, client: AsyncClient) -> None:
        response = await client.post("/binders", json={"name": ""}, headers=OWNER)

        assert response.status_code == 422

    async def test_list_only_callers_binders(self, client: AsyncClient) -> None:
        await client.post("/binders", json={"name": "Mine"}, headers=OWNER)
        await client.post("/binders", json={"name": "Theirs"}, headers=STRANGER)

        response = await client.get("/binders", headers=OWNER)

        data = response.json()
        assert data["count"] == 1
        assert data["binders"][0]["name"] == "Mine"

    async def test_get_binder_with_cards(
        self, client: AsyncClient, session: AsyncSession, seed_binder
    ) -> None:
        await seed_binder(session, {3: "c", 0: "a"})

        response = await client.get("/binders/binder-1", headers=OWNER)

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data["cards"]] == ["a", "c"]
        assert data["total_cards"] == 2

    async def test_missing_binder_is_404(self, client: AsyncClient) -> None:
        response = await client.get("/binders/nope", headers=OWNER)

        assert response.status_code == 404
        assert response.json()["failure"]["kind"] == "not_found"

    async def test_foreign_binder_is_403(
        self, client: AsyncClient, session: AsyncSession, seed_binder
    ) -> None:
        await seed_binder(session, {0: "a"})

        response = await client.get("/binders/binder-1", headers=STRANGER)

        assert response.status_code == 403
        failure = response.json()["failure"]
        assert failure["kind"] == "unauthorized"
        assert failure["retryable"] is False

    async def test_rename(self, client: AsyncClient, session: AsyncSession, seed_binder) -> None:
        await seed_binder(session, {})

        response = await client.patch(
            "/binders/binder-1", json={"name": "  Renamed  "}, headers=OWNER
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"

    async def test_settings(self, client: AsyncClient, session: AsyncSession, seed_binder) -> None:
        await seed_binder(session, {})

        response = await client.put(
            "/binders/binder-1/settings", json={"gray_out_unpurchased": True}, headers=OWNER
        )

        assert response.status_code == 200
        assert response.json()["gray_out_unpurchased"] is True

    async def test_delete(self, client: AsyncClient, session: AsyncSession, seed_binder) -> None:
        await seed_binder(session, {0: "a", 1: "b"})

        response = await client.delete("/binders/binder-1", headers=OWNER)
        assert response.status_code == 204

        response = await client.get("/binders/binder-1", headers=OWNER)
        assert response.status_code == 404

    async def test_stranger_cannot_delete(
        self, client: AsyncClient, session: AsyncSession, seed_binder
    ) -> None:
        await seed_binder(session, {0: "a"})

        response = await client.delete("/binders/binder-1", headers=STRANGER)
        assert response.status_code == 403

        response = await client.get("/binders/binder-1", headers=OWNER)
        assert response.status_code == 200


class TestOccupancyAndPages:
    async def test_occupancy(self, client: AsyncClient, session: AsyncSession, seed_binder) -> None:
        await seed_binder(session, {0: "a", 7: "b"})

        response = await client.get("/binders/binder-1/occupancy", headers=OWNER)

        assert response.status_code == 200
        data = response.json()
        assert data["slots"] == {"0": "a", "7": "b"}
        assert data["max_index"] == 7

    async def test_empty_binder_pages(
        self, client: AsyncClient, session: AsyncSession, seed_binder
    ) -> None:
        await seed_binder(session, {})

        response = await client.get("/binders/binder-1/pages", headers=OWNER)

        data = response.json()
        assert data["total_pages"] == 2
        assert data["slots_per_page"] == 9
        assert data["total_slots"] == 18
        assert data["total_views"] == 2
        assert data["spread"] == {"view": 0, "left_page": None, "right_page": 0}

    async def test_pages_grow_to_even_count(
        self, client: AsyncClient, session: AsyncSession, seed_binder
    ) -> None:
        # slot 20 is on page 2 of a 3x3 binder, so pages round up to 4
        await seed_binder(session, {20: "a"})

        response = await client.get("/binders/binder-1/pages", headers=OWNER)

        data = response.json()
        assert data["total_pages"] == 4
        assert data["columns"] == 3
        assert data["total_views"] == 3

    async def test_pages_view_query(
        self, client: AsyncClient, session: AsyncSession, seed_binder
    ) -> None:
        await seed_binder(session, {20: "a"})

        middle = await client.get("/binders/binder-1/pages?view=1", headers=OWNER)
        last = await client.get("/binders/binder-1/pages?view=2", headers=OWNER)

        assert middle.json()["spread"] == {"view": 1, "left_page": 1, "right_page": 2}
        assert last.json()["spread"] == {"view": 2, "left_page": 3, "right_page": None}

    async def test_pages_view_past_the_end(
        self, client: AsyncClient, session: AsyncSession, seed_binder
    ) -> None:
        await seed_binder(session, {})

        response = await client.get("/binders/binder-1/pages?view=2", headers=OWNER)

        assert response.status_code == 404
        assert response.json()["failure"]["kind"] == "not_found"

    async def test_pages_for_huge_slot_index(
        self, client: AsyncClient, session: AsyncSession, seed_binder
    ) -> None:
        await seed_binder(session, {20_000_000: "a"}, layout="GRID_2x2")

        response = await client.get("/binders/binder-1/pages?view=2500001", headers=OWNER)

        assert response.status_code == 200
        data = response.json()
        assert data["total_pages"] == 5_000_002
        assert data["total_views"] == 2_500_002
        assert data["spread"] == {"view": 2_500_001, "left_page": 5_000_001, "right_page": None}

    async def test_pages_use_binder_layout(
        self, client: AsyncClient, session: AsyncSession, seed_binder
    ) -> None:
        await seed_binder(session, {8: "a"}, layout="GRID_2x2")

        response = await client.get("/binders/binder-1/pages", headers=OWNER)

        data = response.json()
        assert data["slots_per_page"] == 4
        assert data["total_pages"] == 4

    async def test_pages_look_up_binder_once(
        self, client: AsyncClient, session: AsyncSession, seed_binder, monkeypatch
    ) -> None:
        await seed_binder(session, {3: "a"})
        lookups: list[str] = []
        real_get_binder = binder_editor.get_binder

        async def counting_get_binder(session, binder_id, **kwargs):
            lookups.append(binder_id)
            return await real_get_binder(session, binder_id, **kwargs)

        monkeypatch.setattr(binder_editor, "get_binder", counting_get_binder)

        response = await client.get("/binders/binder-1/pages", headers=OWNER)

        assert response.status_code == 200
        assert lookups == ["binder-1"]

    async def test_stranger_cannot_read_pages(
        self, client: AsyncClient, session: AsyncSession, seed_binder
    ) -> None:
        await seed_binder(session, {3: "a"})

        response = await client.get("/binders/binder-1/pages", headers=STRANGER)

        assert response.status_code == 403
