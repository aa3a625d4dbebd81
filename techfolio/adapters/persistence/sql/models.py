# techfolio/adapters/persistence/sql/models.py

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from techfolio.adapters.persistence.sql.session import Base

TREE_STATE_ID = 1


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class TreeStateRow(Base):
    """
    Single-row table holding the category tree version.

    Every structural commit bumps it with a conditional UPDATE, which is the
    compare-and-swap that serializes tree mutations across processes.
    """

    __tablename__ = "category_tree_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class CategoryRow(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(96), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True, index=True)
    parent_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("categories.id"),
        nullable=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<CategoryRow id={self.id!r} slug={self.slug!r}>"


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


class TagRow(Base):
    __tablename__ = "tags"

    # The normalized label is the key, so the primary key constraint is the
    # uniqueness constraint concurrent resolvers race against.
    label: Mapped[str] = mapped_column(String(64), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<TagRow {self.label!r}>"


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


class ContentTagRow(Base):
    """Association between a content item and a tag, with the tag's position."""

    __tablename__ = "content_item_tags"

    item_id: Mapped[str] = mapped_column(
        ForeignKey("content_items.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_label: Mapped[str] = mapped_column(
        ForeignKey("tags.label", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ContentItemRow(Base):
    """
    One table for every content kind.

    Kind-specific attributes (body, asset_ref, tech_stack, ...) live in the
    `attributes` JSON column; the shared fields are real columns so they can
    be filtered and constrained.
    """

    __tablename__ = "content_items"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    slug: Mapped[str] = mapped_column(String(120), nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    state: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    attributes: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    tag_links: Mapped[List[ContentTagRow]] = relationship(
        ContentTagRow,
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=ContentTagRow.position,
    )

    __table_args__ = (
        UniqueConstraint("kind", "slug", name="uq_content_kind_slug"),
    )

    def __repr__(self) -> str:
        return f"<ContentItemRow id={self.id!r} kind={self.kind!r} slug={self.slug!r}>"
