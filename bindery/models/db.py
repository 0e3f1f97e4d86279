"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
The (binder_id, position_index) unique constraint is the storage-side
guard of the slot uniqueness invariant; it is checked per statement.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from bindery.models.slot import DEFAULT_LAYOUT


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class BinderDB(Base):
    """
    A user's binder stored in the database.

    Owns its cards; deleting the binder deletes them.
    """

    __tablename__ = "binders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    layout: Mapped[str] = mapped_column(String(20), default=DEFAULT_LAYOUT.value)
    gray_out_unpurchased: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    cards: Mapped[list["BinderCardDB"]] = relationship(
        back_populates="binder",
        cascade="all, delete-orphan",
        order_by="BinderCardDB.position_index",
    )

    def __repr__(self) -> str:
        return f"<BinderDB(id={self.id}, user_id={self.user_id}, name={self.name})>"


class BinderCardDB(Base):
    """
    A card placed in a binder slot.

    At most one card per (binder, position_index).
    """

    __tablename__ = "binder_cards"
    __table_args__ = (
        UniqueConstraint("binder_id", "position_index", name="uq_binder_position"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    binder_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("binders.id", ondelete="CASCADE"), index=True
    )
    scryfall_id: Mapped[str] = mapped_column(String(64))
    position_index: Mapped[int] = mapped_column(Integer)

    # Display fields copied from the catalog at placement time
    name: Mapped[str] = mapped_column(String(255))
    image_url: Mapped[str] = mapped_column(Text, default="")
    image_url_back: Mapped[str | None] = mapped_column(Text, nullable=True)
    set_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    collector_number: Mapped[str | None] = mapped_column(String(16), nullable=True)

    price_usd: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_purchased: Mapped[bool] = mapped_column(Boolean, default=True)
    purchase_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    binder: Mapped["BinderDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<BinderCardDB(name={self.name}, slot={self.position_index})>"
