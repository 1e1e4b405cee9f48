"""
db/models/presentation.py

Catalog rows for discovered presentation documents and their title tags.
"""

from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin


class Presentation(Base, TimestampMixin):
    """
    One presentation file. ``url`` is unique across the catalog.
    """

    __tablename__ = "presentations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    company_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    company_symbol: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(
        Date,
        nullable=False,
        comment="Normalized publication date",
    )
    date_source: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="text",
        comment="text, url, fallback",
    )
    url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    file_type: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        comment="pdf, ppt, pptx",
    )
    file_size: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="Unknown",
    )
    slide_count_estimate: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=10,
    )

    tags: Mapped[list[PresentationTag]] = relationship(
        back_populates="presentation",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("url", name="uq_presentations_url"),
        Index("ix_presentations_company_id", "company_id"),
        Index("ix_presentations_date", "date"),
    )


class PresentationTag(Base):
    __tablename__ = "presentation_tags"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    presentation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("presentations.id", ondelete="CASCADE"),
        nullable=False,
    )
    tag: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )

    presentation: Mapped[Presentation] = relationship(back_populates="tags")

    __table_args__ = (Index("ix_presentation_tags_presentation_id", "presentation_id"),)
