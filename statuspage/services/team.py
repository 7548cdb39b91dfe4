import secrets

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

import statuspage.core.database as db_module
from statuspage.core.database import TeamMember, utcnow
from statuspage.core.enums import Role
from statuspage.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationFailedError
from statuspage.schemas.team import InviteAccepted, TeamInvite, TeamInviteOut, TeamMemberOut
from statuspage.services.organizations import get_organization_or_404
from statuspage.services.policy import Actor, find_membership, require_role

logger = structlog.get_logger()


def generate_invite_token() -> str:
    """Single-use invite token, 40 hex chars."""
    return secrets.token_hex(20)


def _member_out(member: TeamMember) -> TeamMemberOut:
    return TeamMemberOut(
        id=member.id,
        organization_id=member.organization_id,
        user_id=member.user_id,
        email=member.email,
        name=member.name,
        role=member.role,
        invite_accepted=member.invite_accepted,
        last_active=member.last_active,
        created_at=member.created_at,
    )


class TeamService:
    def __init__(self, session_factory: async_sessionmaker | None = None):
        self._session_factory_override = session_factory

    @property
    def _session_factory(self) -> async_sessionmaker:
        return self._session_factory_override or db_module.async_session

    async def list_members(self, actor: Actor, organization_id: str) -> list[TeamMemberOut]:
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, organization_id)
            await require_role(session, actor, org.id, Role.VIEWER)
            result = await session.execute(
                select(TeamMember)
                .where(TeamMember.organization_id == org.id)
                .order_by(TeamMember.created_at, TeamMember.email)
            )
            return [_member_out(m) for m in result.scalars().all()]

    async def invite(self, actor: Actor, organization_id: str, data: TeamInvite) -> TeamInviteOut:
        """Invite by email. A duplicate email fails before anything is written."""
        email = data.email.lower()
        async with self._session_factory() as session:
            org = await get_organization_or_404(session, organization_id)
            await require_role(session, actor, org.id, Role.ADMIN)

            existing = await session.scalar(
                select(TeamMember.id).where(
                    TeamMember.organization_id == org.id,
                    func.lower(TeamMember.email) == email,
                )
            )
            if existing is not None:
                raise ConflictError("This email is already a member of the organization.")

            now = utcnow()
            member = TeamMember(
                organization_id=org.id,
                email=email,
                name=data.name,
                role=data.role,
                invite_accepted=False,
                invite_token=generate_invite_token(),
                created_at=now,
                updated_at=now,
            )
            session.add(member)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConflictError("This email is already a member of the organization.") from exc

        logger.info("team_member_invited", organization_id=org.id, member_id=member.id, role=member.role.value)
        return TeamInviteOut(**_member_out(member).model_dump(), invite_token=member.invite_token)

    async def accept_invite(self, actor: Actor, token: str) -> InviteAccepted:
        async with self._session_factory() as session:
            result = await session.execute(select(TeamMember).where(TeamMember.invite_token == token))
            member = result.scalar_one_or_none()
            if member is None or member.invite_accepted:
                raise NotFoundError("Invite not found or already used.")
            if member.email.lower() != actor.email.lower():
                raise ForbiddenError("This invite was issued to a different email address.")
            if await find_membership(session, actor, member.organization_id) is not None:
                raise ConflictError("You are already a member of this organization.")

            now = utcnow()
            member.user_id = actor.id
            member.invite_accepted = True
            member.invite_token = None
            member.last_active = now
            member.updated_at = now
            await session.commit()

        logger.info("team_invite_accepted", organization_id=member.organization_id, member_id=member.id)
        return InviteAccepted(organization_id=member.organization_id, role=member.role)

    async def update_role(self, actor: Actor, organization_id: str, member_id: str, role: Role) -> TeamMemberOut:
        async with self._session_factory() as session:
            await get_organization_or_404(session, organization_id)
            admin = await require_role(session, actor, organization_id, Role.ADMIN)
            member = await session.get(TeamMember, member_id)
            if member is None or member.organization_id != organization_id:
                raise NotFoundError("Team member not found.")
            if member.id == admin.id:
                raise ValidationFailedError("You cannot change your own role.")

            member.role = role
            member.updated_at = utcnow()
            await session.commit()

        logger.info("team_member_role_changed", organization_id=organization_id, member_id=member.id, role=role.value)
        return _member_out(member)

    async def remove_member(self, actor: Actor, organization_id: str, member_id: str) -> None:
        async with self._session_factory() as session:
            await get_organization_or_404(session, organization_id)
            admin = await require_role(session, actor, organization_id, Role.ADMIN)
            member = await session.get(TeamMember, member_id)
            if member is None or member.organization_id != organization_id:
                raise NotFoundError("Team member not found.")
            if member.id == admin.id:
                raise ValidationFailedError("You cannot remove yourself from the organization.")

            await session.delete(member)
            await session.commit()

        logger.info("team_member_removed", organization_id=organization_id, member_id=member_id)
