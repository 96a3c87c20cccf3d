"""YAML questionnaire loader with integrity hashing.

A definition file describes one immutable questionnaire version:

    code: ANS_USOAP_CMA
    kind: AUDIT_AREA_BASED
    version: "2024.1"
    title_en: ANS Protocol Questions
    questions:
      - external_id: ANS 7.001
        text_en: Has the State established ...
        audit_area: ATS
        critical_element: CE_1
        is_priority: true
"""

import hashlib
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from aaprp.core.config import settings
from aaprp.core.exceptions import InvalidInputError
from aaprp.models.questionnaire import QuestionnaireKind
from aaprp.scoring.classification import classification_fields_for


class QuestionDefinition(BaseModel):
    """One question as written in a definition file."""

    external_id: str = Field(..., min_length=1, max_length=50)
    text_en: str = Field(..., min_length=1)
    text_fr: str | None = None
    audit_area: str | None = None
    critical_element: str | None = None
    maturity_component: str | None = None
    study_area: str | None = None
    is_priority: bool = False
    requires_on_site_evidence: bool = False
    weight: float = Field(default=1.0, gt=0)
    is_active: bool = True


class QuestionnaireDefinition(BaseModel):
    """A complete questionnaire version."""

    code: str = Field(..., min_length=1, max_length=50)
    kind: QuestionnaireKind
    version: str = Field(..., min_length=1, max_length=50)
    title_en: str
    title_fr: str | None = None
    description: str | None = None
    questions: list[QuestionDefinition] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_classification(self) -> "QuestionnaireDefinition":
        required, forbidden = classification_fields_for(self.kind)
        seen: set[str] = set()

        for question in self.questions:
            if question.external_id in seen:
                raise ValueError(f"Duplicate question id {question.external_id}")
            seen.add(question.external_id)

            for name in required:
                if not getattr(question, name):
                    raise ValueError(
                        f"Question {question.external_id} is missing {name} "
                        f"required for {self.kind.value} questionnaires"
                    )
            for name in forbidden:
                if getattr(question, name):
                    raise ValueError(
                        f"Question {question.external_id} sets {name}, which "
                        f"{self.kind.value} questionnaires do not use"
                    )
        return self


def compute_definition_hash(content: str) -> str:
    """SHA256 hex digest of the raw definition text."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def parse_questionnaire(data: dict[str, Any]) -> QuestionnaireDefinition:
    """Validate parsed YAML.

    Raises:
        InvalidInputError: If the definition is malformed
    """
    try:
        return QuestionnaireDefinition.model_validate(data)
    except ValidationError as e:
        raise InvalidInputError(
            f"Invalid questionnaire definition: {e.errors()[0]['msg']}",
            errors=[err["msg"] for err in e.errors()],
        ) from e


def load_questionnaire(path: Path) -> tuple[QuestionnaireDefinition, str]:
    """Load and validate a definition file.

    Returns:
        Tuple of (definition, SHA256 hash of the file)

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML is invalid
        InvalidInputError: If the definition is malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Questionnaire definition not found: {path}")

    content = path.read_text(encoding="utf-8")
    definition = parse_questionnaire(yaml.safe_load(content) or {})
    return definition, compute_definition_hash(content)


class QuestionnaireLoader:
    """Loader for the definitions directory, with caching."""

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = directory or settings.questionnaires_dir
        self._cache: dict[str, tuple[QuestionnaireDefinition, str]] = {}

    def load(self, filename: str, use_cache: bool = True) -> tuple[QuestionnaireDefinition, str]:
        if use_cache and filename in self._cache:
            return self._cache[filename]

        loaded = load_questionnaire(self.directory / filename)
        self._cache[filename] = loaded
        return loaded

    def clear_cache(self) -> None:
        self._cache.clear()

    def list_definitions(self) -> list[str]:
        """Definition filenames in the directory."""
        return sorted(f.name for f in self.directory.glob("*.yaml"))
