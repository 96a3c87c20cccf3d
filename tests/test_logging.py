"""Tests for log formatting and the audit mirror logger."""

import logging

import pytest

from aaprp.core.logging import AuditLogger, StructuredFormatter


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="aaprp.services.lifecycle",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Assessment %s submitted",
        args=("AAPRP-EI-20241001-ABC123",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_renders_key_value_pairs(self) -> None:
        line = StructuredFormatter().format(make_record())

        assert "level=INFO" in line
        assert "logger=aaprp.services.lifecycle" in line
        assert "msg=Assessment AAPRP-EI-20241001-ABC123 submitted" in line

    def test_promotes_context_fields(self) -> None:
        line = StructuredFormatter().format(
            make_record(assessment_id="a-1", user_id="u-1", unrelated="x")
        )

        assert "assessment_id=a-1" in line
        assert "user_id=u-1" in line
        assert "unrelated" not in line


class TestAuditLogger:
    def test_transition_line(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="audit"):
            AuditLogger().log(
                action="assessment.submit",
                actor_type="user",
                actor_id="u-1",
                entity_type="assessment",
                entity_id="a-1",
                from_status="DRAFT",
                to_status="SUBMITTED",
            )

        assert caplog.messages == [
            "AUDIT: action=assessment.submit actor=user:u-1 entity=assessment:a-1 "
            "status=DRAFT->SUBMITTED metadata={}"
        ]

    def test_plain_event_has_no_status(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="audit"):
            AuditLogger().log(
                action="assessment.responses_saved",
                actor_type="user",
                actor_id="u-1",
                entity_type="assessment",
                entity_id="a-1",
                metadata={"count": 2},
            )

        assert "status=" not in caplog.messages[0]
        assert caplog.messages[0].endswith("metadata={'count': 2}")
