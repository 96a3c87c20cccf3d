"""Assessment engine schema.

Revision ID: 001
Revises:
Create Date: 2024-10-01 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create questionnaire, assessment and audit tables."""

    op.create_table(
        "questionnaires",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("kind", sa.String(50), nullable=False),
        sa.Column("version", sa.String(50), nullable=False),
        sa.Column("title_en", sa.String(255), nullable=False),
        sa.Column("title_fr", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("definition_hash", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_questionnaires"),
        sa.UniqueConstraint("code", "version", name="uq_questionnaires_code"),
    )
    op.create_index("ix_questionnaires_code", "questionnaires", ["code"])

    op.create_table(
        "questions",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("questionnaire_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("external_id", sa.String(50), nullable=False),
        sa.Column("text_en", sa.Text(), nullable=False),
        sa.Column("text_fr", sa.Text(), nullable=True),
        sa.Column("audit_area", sa.String(20), nullable=True),
        sa.Column("critical_element", sa.String(20), nullable=True),
        sa.Column("maturity_component", sa.String(50), nullable=True),
        sa.Column("study_area", sa.String(20), nullable=True),
        sa.Column("is_priority", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "requires_on_site_evidence", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("weight", sa.Float(), nullable=False, server_default="1.0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["questionnaire_id"],
            ["questionnaires.id"],
            name="fk_questions_questionnaire_id_questionnaires",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_questions"),
        sa.UniqueConstraint("questionnaire_id", "external_id", name="uq_questions_questionnaire_id"),
    )
    op.create_index("ix_questions_questionnaire_id", "questions", ["questionnaire_id"])
    op.create_index("ix_questions_audit_area", "questions", ["audit_area"])

    op.create_table(
        "assessments",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("questionnaire_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("kind", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("reference_number", sa.String(64), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="DRAFT"),
        sa.Column("selected_audit_areas", postgresql.JSON(), nullable=False),
        sa.Column("in_scope_question_ids", postgresql.JSON(), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("overall_score", sa.Float(), nullable=True),
        sa.Column("ei_score", sa.Float(), nullable=True),
        sa.Column("maturity_level", sa.String(1), nullable=True),
        sa.Column("category_scores", postgresql.JSON(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["questionnaire_id"],
            ["questionnaires.id"],
            name="fk_assessments_questionnaire_id_questionnaires",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_assessments"),
        sa.UniqueConstraint("reference_number", name="uq_assessments_reference_number"),
    )
    op.create_index("ix_assessments_questionnaire_id", "assessments", ["questionnaire_id"])
    op.create_index("ix_assessments_organization_id", "assessments", ["organization_id"])
    op.create_index("ix_assessments_status", "assessments", ["status"])

    op.create_table(
        "assessment_responses",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("assessment_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("question_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("compliance_value", sa.String(50), nullable=True),
        sa.Column("maturity_level", sa.String(1), nullable=True),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("evidence_urls", postgresql.JSON(), nullable=False),
        sa.Column("responded_by", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["assessment_id"],
            ["assessments.id"],
            name="fk_assessment_responses_assessment_id_assessments",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["question_id"],
            ["questions.id"],
            name="fk_assessment_responses_question_id_questions",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_assessment_responses"),
        sa.UniqueConstraint(
            "assessment_id", "question_id", name="uq_assessment_responses_assessment_id"
        ),
    )
    op.create_index(
        "ix_assessment_responses_assessment_id", "assessment_responses", ["assessment_id"]
    )

    op.create_table(
        "audit_events",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("actor_type", sa.String(50), nullable=False),
        sa.Column("actor_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("actor_email", sa.String(255), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("action_category", sa.String(50), nullable=True),
        sa.Column("entity_type", sa.String(100), nullable=False),
        sa.Column("entity_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("from_status", sa.String(50), nullable=True),
        sa.Column("to_status", sa.String(50), nullable=True),
        sa.Column("metadata", postgresql.JSON(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("request_id", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_audit_events"),
    )
    op.create_index("ix_audit_events_action", "audit_events", ["action"])
    op.create_index("ix_audit_events_entity_id", "audit_events", ["entity_id"])


def downgrade() -> None:
    """Drop all assessment engine tables."""
    op.drop_table("audit_events")
    op.drop_table("assessment_responses")
    op.drop_table("assessments")
    op.drop_table("questions")
    op.drop_table("questionnaires")
