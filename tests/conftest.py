import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from bindery.db.database import get_session
from bindery.main import app
from bindery.models.binder import BinderCard
from bindery.models.db import Base, BinderCardDB, BinderDB


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def _make_card(card_id: str, position_index: int, name: str | None = None) -> BinderCard:
    """A placed card with throwaway catalog fields."""
    return BinderCard(
        id=card_id,
        scryfall_id=f"sf-{card_id}",
        position_index=position_index,
        name=name or f"Card {card_id}",
        set_code="LEB",
        collector_number=str(position_index + 1),
        price_usd=1.0,
    )


async def _seed_binder(
    session: AsyncSession,
    slots: dict[int, str],
    user_id: str = "owner",
    binder_id: str = "binder-1",
    layout: str = "GRID_3x3",
) -> BinderDB:
    """Insert a binder whose cards sit at the given slot -> card id map."""
    binder = BinderDB(id=binder_id, user_id=user_id, name="Test Binder", layout=layout)
    session.add(binder)
    for index, card_id in slots.items():
        session.add(
            BinderCardDB(
                id=card_id,
                binder_id=binder_id,
                scryfall_id=f"sf-{card_id}",
                position_index=index,
                name=f"Card {card_id}",
            )
        )
    await session.commit()
    return binder


@pytest.fixture
def make_card():
    return _make_card


@pytest.fixture
def seed_binder():
    """Async helper: seed_binder(session, {slot: card_id}, user_id=..., binder_id=...)."""
    return _seed_binder
