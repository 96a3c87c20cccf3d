"""Questionnaire definition files and their loader."""

from aaprp.questionnaires.loader import (
    QuestionDefinition,
    QuestionnaireDefinition,
    QuestionnaireLoader,
    compute_definition_hash,
    load_questionnaire,
    parse_questionnaire,
)

__all__ = [
    "QuestionDefinition",
    "QuestionnaireDefinition",
    "QuestionnaireLoader",
    "compute_definition_hash",
    "load_questionnaire",
    "parse_questionnaire",
]
