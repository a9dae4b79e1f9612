"""Survey and SurveyQuestion ORM models.

Questions are stored one row per question with kind-specific columns left
null when they do not apply.  Branching rules live in a JSONB column on the
question they belong to, in evaluation order.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text as sql_text,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from survey_db.models.base import Base
from survey_db.models.enums import SurveyStatus


class Survey(Base):
    """One row per survey."""

    __tablename__ = "surveys"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    # Stable external identifier used in runtime links (e.g. "customer-pulse")
    slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[SurveyStatus] = mapped_column(
        String(20), nullable=False, default=SurveyStatus.DRAFT,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'active', 'paused', 'archived')",
            name="ck_survey_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Survey(slug={self.slug!r}, status={self.status!r})>"


class SurveyQuestion(Base):
    """One row per question; ``question_key`` is the id the navigator sees."""

    __tablename__ = "questions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    survey_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("surveys.id", ondelete="CASCADE"),
        nullable=False,
    )
    question_key: Mapped[str] = mapped_column(Text, nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # --- Kind-specific ---
    scale_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    scale_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    scale_min_label: Mapped[str | None] = mapped_column(Text, nullable=True)
    scale_max_label: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Ordered option labels for choice / multi_select
    options: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    # Ordered list of {condition, comparison_value, target}
    branching_rules: Mapped[list] = mapped_column(
        JSONB, nullable=False, server_default=sql_text("'[]'::jsonb"), default=list,
    )

    __table_args__ = (
        UniqueConstraint("survey_id", "question_key", name="uq_survey_question_key"),
        CheckConstraint(
            "kind IN ('scale', 'text', 'choice', 'multi_select', 'rating')",
            name="ck_question_kind",
        ),
        Index("ix_questions_survey_position", "survey_id", "position"),
    )

    def __repr__(self) -> str:
        return f"<SurveyQuestion(key={self.question_key!r}, kind={self.kind!r})>"
