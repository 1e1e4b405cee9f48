"""
db/models/company.py

Company Directory model: one listed company and its investor-relations URL.
"""

from __future__ import annotations

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class Company(Base, TimestampMixin):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    symbol: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )
    ir_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Investor relations landing page",
    )

    __table_args__ = (Index("ix_companies_symbol", "symbol"),)
