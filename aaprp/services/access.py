"""Role-based access to assessments.

Authorization beyond this predicate belongs to the surrounding platform.
The default policy is organization-scoped: managers write their own
organization's assessments and programme staff act across organizations.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from sqlalchemy import ColumnElement, false, or_, true

from aaprp.db.base import parse_id
from aaprp.models.assessment import Assessment, AssessmentStatus


class Role(str, Enum):
    """Programme roles carried in the bearer token."""

    SUPER_ADMIN = "super_admin"
    SYSTEM_ADMIN = "system_admin"
    PROGRAMME_COORDINATOR = "programme_coordinator"
    ANSP_ADMIN = "ansp_admin"
    SAFETY_MANAGER = "safety_manager"
    QUALITY_MANAGER = "quality_manager"
    LEAD_REVIEWER = "lead_reviewer"
    PEER_REVIEWER = "peer_reviewer"
    STEERING_COMMITTEE = "steering_committee"
    STAFF = "staff"


class Permission(str, Enum):
    """Actions gated by role."""

    ASSESSMENT_READ = "assessment:read"
    ASSESSMENT_WRITE = "assessment:write"
    ASSESSMENT_REVIEW = "assessment:review"
    ASSESSMENT_COMPLETE = "assessment:complete"
    QUESTIONNAIRE_READ = "questionnaire:read"
    AUDIT_READ = "audit:read"


PROGRAMME_ROLES = frozenset(
    {Role.SUPER_ADMIN, Role.SYSTEM_ADMIN, Role.PROGRAMME_COORDINATOR}
)

ORGANIZATION_MANAGER_ROLES = frozenset(
    {Role.ANSP_ADMIN, Role.SAFETY_MANAGER, Role.QUALITY_MANAGER}
)

ROLE_PERMISSIONS: dict[Role, set[Permission]] = {
    Role.SUPER_ADMIN: set(Permission),
    Role.SYSTEM_ADMIN: set(Permission),
    Role.PROGRAMME_COORDINATOR: set(Permission),
    Role.ANSP_ADMIN: {
        Permission.ASSESSMENT_READ,
        Permission.ASSESSMENT_WRITE,
        Permission.QUESTIONNAIRE_READ,
        Permission.AUDIT_READ,
    },
    Role.SAFETY_MANAGER: {
        Permission.ASSESSMENT_READ,
        Permission.ASSESSMENT_WRITE,
        Permission.QUESTIONNAIRE_READ,
        Permission.AUDIT_READ,
    },
    Role.QUALITY_MANAGER: {
        Permission.ASSESSMENT_READ,
        Permission.ASSESSMENT_WRITE,
        Permission.QUESTIONNAIRE_READ,
    },
    Role.LEAD_REVIEWER: {
        Permission.ASSESSMENT_READ,
        Permission.ASSESSMENT_REVIEW,
        Permission.ASSESSMENT_COMPLETE,
        Permission.QUESTIONNAIRE_READ,
        Permission.AUDIT_READ,
    },
    Role.PEER_REVIEWER: {
        Permission.ASSESSMENT_READ,
        Permission.ASSESSMENT_REVIEW,
        Permission.QUESTIONNAIRE_READ,
    },
    Role.STEERING_COMMITTEE: {
        Permission.ASSESSMENT_READ,
        Permission.QUESTIONNAIRE_READ,
    },
    Role.STAFF: {
        Permission.ASSESSMENT_READ,
        Permission.QUESTIONNAIRE_READ,
    },
}

REVIEWABLE_STATUSES = frozenset(
    {
        AssessmentStatus.SUBMITTED.value,
        AssessmentStatus.UNDER_REVIEW.value,
        AssessmentStatus.COMPLETED.value,
    }
)


@dataclass(frozen=True)
class Actor:
    """The authenticated caller."""
    id: str
    role: Role
    organization_id: str | None = None
    email: str | None = None

    @property
    def is_programme_staff(self) -> bool:
        return self.role in PROGRAMME_ROLES


def has_permission(actor: Actor, permission: Permission) -> bool:
    """Check whether the actor's role grants ``permission``."""
    return permission in ROLE_PERMISSIONS.get(actor.role, set())


class AccessPolicy(Protocol):
    """Predicate deciding who may read and write an assessment."""

    def can_read(self, actor: Actor, assessment: Assessment) -> bool: ...

    def can_write(self, actor: Actor, assessment: Assessment) -> bool: ...

    def read_filter(self, actor: Actor) -> ColumnElement[bool]:
        """SQL form of ``can_read``, for listing queries."""
        ...


class OrganizationAccessPolicy:
    """Default policy: writes stay within the owning organization."""

    def can_write(self, actor: Actor, assessment: Assessment) -> bool:
        if not has_permission(actor, Permission.ASSESSMENT_WRITE):
            return False
        if actor.is_programme_staff:
            return True
        return (
            actor.role in ORGANIZATION_MANAGER_ROLES
            and actor.organization_id == assessment.organization_id
        )

    def can_read(self, actor: Actor, assessment: Assessment) -> bool:
        if not has_permission(actor, Permission.ASSESSMENT_READ):
            return False
        if actor.is_programme_staff or actor.organization_id == assessment.organization_id:
            return True
        if actor.role in (Role.LEAD_REVIEWER, Role.PEER_REVIEWER):
            return assessment.status in REVIEWABLE_STATUSES
        if actor.role is Role.STEERING_COMMITTEE:
            return assessment.status == AssessmentStatus.COMPLETED.value
        return False

    def read_filter(self, actor: Actor) -> ColumnElement[bool]:
        if not has_permission(actor, Permission.ASSESSMENT_READ):
            return false()
        if actor.is_programme_staff:
            return true()

        clauses = []
        organization_id = parse_id(actor.organization_id)
        if organization_id:
            clauses.append(Assessment.organization_id == organization_id)
        if actor.role in (Role.LEAD_REVIEWER, Role.PEER_REVIEWER):
            clauses.append(Assessment.status.in_(sorted(REVIEWABLE_STATUSES)))
        elif actor.role is Role.STEERING_COMMITTEE:
            clauses.append(Assessment.status == AssessmentStatus.COMPLETED.value)

        return or_(*clauses) if clauses else false()
