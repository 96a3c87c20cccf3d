"""Tests for role permissions and the organization access policy."""

from uuid import uuid4

import pytest

from aaprp.models.assessment import Assessment, AssessmentStatus
from aaprp.services.access import (
    Actor,
    OrganizationAccessPolicy,
    Permission,
    ROLE_PERMISSIONS,
    Role,
    has_permission,
)

ORG = str(uuid4())
OTHER_ORG = str(uuid4())


def assessment(status: AssessmentStatus = AssessmentStatus.DRAFT) -> Assessment:
    return Assessment(organization_id=ORG, status=status.value)


def actor(role: Role, organization_id: str | None = None) -> Actor:
    return Actor(id=str(uuid4()), role=role, organization_id=organization_id)


class TestRolePermissions:
    """Tests for the role permission table."""

    def test_every_role_has_permissions(self) -> None:
        assert set(ROLE_PERMISSIONS) == set(Role)

    def test_admin_has_all_permissions(self) -> None:
        for permission in Permission:
            assert has_permission(actor(Role.SUPER_ADMIN), permission)

    def test_reviewers_cannot_write(self) -> None:
        assert not has_permission(actor(Role.LEAD_REVIEWER), Permission.ASSESSMENT_WRITE)
        assert not has_permission(actor(Role.PEER_REVIEWER), Permission.ASSESSMENT_WRITE)

    def test_only_lead_reviewer_completes(self) -> None:
        assert has_permission(actor(Role.LEAD_REVIEWER), Permission.ASSESSMENT_COMPLETE)
        assert not has_permission(actor(Role.PEER_REVIEWER), Permission.ASSESSMENT_COMPLETE)

    def test_staff_is_read_only(self) -> None:
        assert ROLE_PERMISSIONS[Role.STAFF] == {
            Permission.ASSESSMENT_READ,
            Permission.QUESTIONNAIRE_READ,
        }


class TestOrganizationAccessPolicy:
    """Tests for OrganizationAccessPolicy."""

    policy = OrganizationAccessPolicy()

    @pytest.mark.parametrize(
        "role", [Role.ANSP_ADMIN, Role.SAFETY_MANAGER, Role.QUALITY_MANAGER]
    )
    def test_managers_write_own_organization(self, role: Role) -> None:
        assert self.policy.can_write(actor(role, ORG), assessment()) is True

    def test_manager_cannot_write_other_organization(self) -> None:
        assert self.policy.can_write(actor(Role.SAFETY_MANAGER, OTHER_ORG), assessment()) is False

    def test_programme_staff_write_anywhere(self) -> None:
        assert self.policy.can_write(actor(Role.PROGRAMME_COORDINATOR), assessment()) is True

    def test_staff_reads_but_cannot_write(self) -> None:
        member = actor(Role.STAFF, ORG)
        assert self.policy.can_read(member, assessment()) is True
        assert self.policy.can_write(member, assessment()) is False

    def test_reviewer_reads_only_once_submitted(self) -> None:
        reviewer = actor(Role.PEER_REVIEWER)
        assert self.policy.can_read(reviewer, assessment(AssessmentStatus.DRAFT)) is False
        assert self.policy.can_read(reviewer, assessment(AssessmentStatus.SUBMITTED)) is True
        assert self.policy.can_read(reviewer, assessment(AssessmentStatus.UNDER_REVIEW)) is True

    def test_steering_committee_reads_completed_only(self) -> None:
        member = actor(Role.STEERING_COMMITTEE)
        assert self.policy.can_read(member, assessment(AssessmentStatus.SUBMITTED)) is False
        assert self.policy.can_read(member, assessment(AssessmentStatus.COMPLETED)) is True

    def test_other_organization_cannot_read_draft(self) -> None:
        assert self.policy.can_read(actor(Role.SAFETY_MANAGER, OTHER_ORG), assessment()) is False
