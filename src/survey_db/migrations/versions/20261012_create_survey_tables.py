"""Create surveys, questions, responses and response_items tables.

Revision ID: 20261012_initial
Revises:
Create Date: 2026-10-12
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# revision identifiers, used by Alembic.
revision = "20261012_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "surveys",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("slug", sa.Text, nullable=False, unique=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("version", sa.Integer, nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "status IN ('draft', 'active', 'paused', 'archived')",
            name="ck_survey_status",
        ),
    )

    op.create_table(
        "questions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "survey_id",
            UUID(as_uuid=True),
            sa.ForeignKey("surveys.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("question_key", sa.Text, nullable=False),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("text", sa.Text, nullable=False, server_default=sa.text("''")),
        sa.Column("required", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("position", sa.Integer, nullable=False, server_default=sa.text("0")),
        # Kind-specific
        sa.Column("scale_min", sa.Integer, nullable=True),
        sa.Column("scale_max", sa.Integer, nullable=True),
        sa.Column("scale_min_label", sa.Text, nullable=True),
        sa.Column("scale_max_label", sa.Text, nullable=True),
        sa.Column("options", JSONB, nullable=True),
        sa.Column("branching_rules", JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.UniqueConstraint("survey_id", "question_key", name="uq_survey_question_key"),
        sa.CheckConstraint(
            "kind IN ('scale', 'text', 'choice', 'multi_select', 'rating')",
            name="ck_question_kind",
        ),
    )
    op.create_index("ix_questions_survey_position", "questions", ["survey_id", "position"])

    op.create_table(
        "responses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "survey_id",
            UUID(as_uuid=True),
            sa.ForeignKey("surveys.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("consent_given", sa.Boolean, nullable=False),
        sa.Column("consent_text", sa.Text, nullable=False),
        sa.Column("consented_at", TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'in_progress'")),
        sa.Column("created_at", TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("completed_at", TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status != 'completed' OR completed_at IS NOT NULL",
            name="ck_completed_has_timestamp",
        ),
    )
    op.create_index("ix_responses_survey_id", "responses", ["survey_id"])
    op.create_index("ix_responses_status", "responses", ["status"])

    op.create_table(
        "response_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "response_id",
            UUID(as_uuid=True),
            sa.ForeignKey("responses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("question_key", sa.Text, nullable=False),
        sa.Column("value", JSONB, nullable=False),
        sa.Column("answered_at", TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("response_id", "question_key", name="uq_response_question"),
    )
    op.create_index("ix_response_items_response", "response_items", ["response_id"])


def downgrade() -> None:
    op.drop_index("ix_response_items_response", table_name="response_items")
    op.drop_table("response_items")
    op.drop_index("ix_responses_status", table_name="responses")
    op.drop_index("ix_responses_survey_id", table_name="responses")
    op.drop_table("responses")
    op.drop_index("ix_questions_survey_position", table_name="questions")
    op.drop_table("questions")
    op.drop_table("surveys")
