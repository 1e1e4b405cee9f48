"""create presentation catalog tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("symbol", sa.String(length=32), nullable=False),
        sa.Column("ir_url", sa.Text(), nullable=True, comment="Investor relations landing page"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_companies"),
    )
    op.create_index("ix_companies_symbol", "companies", ["symbol"], unique=False)

    op.create_table(
        "presentations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.String(length=64), nullable=False),
        sa.Column("company_symbol", sa.String(length=32), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False, comment="Normalized publication date"),
        sa.Column("date_source", sa.String(length=16), nullable=False, comment="text, url, fallback"),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("file_type", sa.String(length=8), nullable=False, comment="pdf, ppt, pptx"),
        sa.Column("file_size", sa.String(length=32), nullable=False),
        sa.Column("slide_count_estimate", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_presentations"),
        sa.UniqueConstraint("url", name="uq_presentations_url"),
    )
    op.create_index("ix_presentations_company_id", "presentations", ["company_id"], unique=False)
    op.create_index("ix_presentations_date", "presentations", ["date"], unique=False)

    op.create_table(
        "presentation_tags",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("presentation_id", sa.Uuid(), nullable=False),
        sa.Column("tag", sa.String(length=64), nullable=False),
        sa.ForeignKeyConstraint(
            ["presentation_id"],
            ["presentations.id"],
            name="fk_presentation_tags_presentation_id_presentations",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_presentation_tags"),
    )
    op.create_index(
        "ix_presentation_tags_presentation_id",
        "presentation_tags",
        ["presentation_id"],
        unique=False,
    )

    op.create_table(
        "scraping_jobs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "presentations_found",
            sa.Integer(),
            nullable=False,
            comment="Running total of presentations found for the company",
        ),
        sa.Column("next_scheduled", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("skipped_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_scraping_jobs"),
        sa.UniqueConstraint("company_id", name="uq_scraping_jobs_company_id"),
    )
    op.create_index("ix_scraping_jobs_status", "scraping_jobs", ["status"], unique=False)
    op.create_index(
        "ix_scraping_jobs_next_scheduled",
        "scraping_jobs",
        ["next_scheduled"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_scraping_jobs_next_scheduled", table_name="scraping_jobs")
    op.drop_index("ix_scraping_jobs_status", table_name="scraping_jobs")
    op.drop_table("scraping_jobs")
    op.drop_index("ix_presentation_tags_presentation_id", table_name="presentation_tags")
    op.drop_table("presentation_tags")
    op.drop_index("ix_presentations_date", table_name="presentations")
    op.drop_index("ix_presentations_company_id", table_name="presentations")
    op.drop_table("presentations")
    op.drop_index("ix_companies_symbol", table_name="companies")
    op.drop_table("companies")
