"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from aaprp.core.security import decode_access_token
from aaprp.db.session import AsyncSessionLocal, get_db
from aaprp.services.access import (
    AccessPolicy,
    Actor,
    OrganizationAccessPolicy,
    Permission,
    Role,
    has_permission,
)
from aaprp.services.assessment import AssessmentService
from aaprp.services.audit import AuditSink

security = HTTPBearer(auto_error=False)

_default_policy = OrganizationAccessPolicy()


async def get_current_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict | None:
    """Extract and decode the bearer token, if any."""
    if not credentials:
        return None
    return decode_access_token(credentials.credentials)


async def get_current_actor(
    token: Annotated[dict | None, Depends(get_current_token)],
) -> Actor:
    """Build the calling actor from token claims.

    Raises:
        HTTPException: If not authenticated or the role is unknown
    """
    if not token or not token.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        role = Role(token.get("role"))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unknown role",
        )

    return Actor(
        id=token["sub"],
        role=role,
        organization_id=token.get("organization_id"),
        email=token.get("email"),
    )


def get_access_policy() -> AccessPolicy:
    """Access predicate; override to plug in the platform's own policy."""
    return _default_policy


def get_request_id(request: Request) -> str | None:
    """Extract request ID from headers."""
    return request.headers.get("X-Request-ID")


def get_audit_sink(
    request_id: Annotated[str | None, Depends(get_request_id)],
) -> AuditSink:
    """Audit sink on its own sessions, tagging events with the request id."""
    return AuditSink(AsyncSessionLocal, request_id=request_id)


def require_permissions(*permissions: Permission):
    """Create a dependency that requires every listed permission.

    Usage:
        @router.get("/", dependencies=[Depends(require_permissions(Permission.AUDIT_READ))])
    """

    async def permission_checker(
        actor: Annotated[Actor, Depends(get_current_actor)],
    ) -> Actor:
        if not all(has_permission(actor, p) for p in permissions):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return actor

    return permission_checker


DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]


def get_assessment_service(
    session: DbSession,
    access_policy: Annotated[AccessPolicy, Depends(get_access_policy)],
    audit_sink: Annotated[AuditSink, Depends(get_audit_sink)],
) -> AssessmentService:
    return AssessmentService(session, access_policy, audit_sink)


Assessments = Annotated[AssessmentService, Depends(get_assessment_service)]
