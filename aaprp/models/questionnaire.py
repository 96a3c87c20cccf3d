"""Versioned regulator questionnaires and their questions."""

from enum import Enum

from sqlalchemy import Boolean, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from aaprp.db.base import Base, TimestampMixin


class QuestionnaireKind(str, Enum):
    """Questionnaire family, which selects the scoring algorithm."""

    AUDIT_AREA_BASED = "AUDIT_AREA_BASED"  # ICAO USOAP protocol questions
    MATURITY_BASED = "MATURITY_BASED"  # CANSO SoE maturity questions


class Questionnaire(Base, TimestampMixin):
    """Versioned questionnaire template.

    Questionnaires are immutable once imported. A revised edition is a new
    row with the same code and a new version.
    """

    __tablename__ = "questionnaires"
    __table_args__ = (UniqueConstraint("code", "version"),)

    code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )
    kind: Mapped[QuestionnaireKind] = mapped_column(
        String(50),
        nullable=False,
    )
    version: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    title_en: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    title_fr: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    # SHA256 of the imported definition file
    definition_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )

    questions: Mapped[list["Question"]] = relationship(
        back_populates="questionnaire",
        order_by="Question.sort_order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Questionnaire {self.code} v{self.version}>"


class Question(Base, TimestampMixin):
    """A single question, classified according to its questionnaire's kind."""

    __tablename__ = "questions"
    __table_args__ = (UniqueConstraint("questionnaire_id", "external_id"),)

    questionnaire_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("questionnaires.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Regulator's reference, e.g. protocol question number "ANS 7.001"
    external_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    text_en: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    text_fr: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Classification
    audit_area: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        index=True,
    )
    critical_element: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )
    maturity_component: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    study_area: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    is_priority: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    requires_on_site_evidence: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    weight: Mapped[float] = mapped_column(
        Float,
        default=1.0,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    sort_order: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    questionnaire: Mapped[Questionnaire] = relationship(back_populates="questions")

    def __repr__(self) -> str:
        return f"<Question {self.external_id}>"
