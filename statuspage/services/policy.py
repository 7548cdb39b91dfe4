"""Visibility and access policy.

Org-scoped checks require the actor to be an accepted team member of the
organization holding at least the required role. The public surface needs no
actor but only exposes records flagged public.
"""

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from statuspage.core.database import TeamMember
from statuspage.core.enums import Role
from statuspage.core.exceptions import ForbiddenError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as asserted by the identity provider."""

    id: str
    email: str = ""
    name: str = ""


def member_permits(member: TeamMember | None, actor: Actor, organization_id: str, required_role: Role) -> bool:
    if member is None:
        return False
    if member.organization_id != organization_id or member.user_id != actor.id:
        return False
    if not member.invite_accepted:
        return False
    return member.role.permits(required_role)


def is_publicly_visible(record: Any, parent: Any | None = None) -> bool:
    """A record is public only if its own flag is set (and its parent's, when given)."""
    if not getattr(record, "is_public", False):
        return False
    if parent is not None:
        return bool(getattr(parent, "is_public", False))
    return True


async def find_membership(session: AsyncSession, actor: Actor, organization_id: str) -> TeamMember | None:
    result = await session.execute(
        select(TeamMember).where(
            TeamMember.user_id == actor.id,
            TeamMember.organization_id == organization_id,
        )
    )
    return result.scalar_one_or_none()


async def can_access(session: AsyncSession, actor: Actor, organization_id: str, required_role: Role) -> bool:
    member = await find_membership(session, actor, organization_id)
    return member_permits(member, actor, organization_id, required_role)


_DENIED_MESSAGES = {
    Role.ADMIN: "Admin privileges required.",
    Role.EDITOR: "Editor privileges required.",
    Role.VIEWER: "You are not a member of this organization.",
}


async def require_role(
    session: AsyncSession, actor: Actor, organization_id: str, required_role: Role
) -> TeamMember:
    """Return the actor's membership or raise ForbiddenError."""
    member = await find_membership(session, actor, organization_id)
    if not member_permits(member, actor, organization_id, required_role):
        logger.info(
            "access_denied",
            actor_id=actor.id,
            organization_id=organization_id,
            required_role=required_role.value,
        )
        raise ForbiddenError(_DENIED_MESSAGES[required_role])
    return member
