"""Direct database writes for arranging test state."""

from statuspage.core.database import TeamMember, utcnow
from statuspage.core.enums import Role
from statuspage.services.policy import Actor


async def add_member(
    session_factory,
    organization_id: str,
    actor: Actor,
    role: Role,
    accepted: bool = True,
) -> TeamMember:
    now = utcnow()
    member = TeamMember(
        organization_id=organization_id,
        user_id=actor.id if accepted else None,
        email=actor.email,
        name=actor.name,
        role=role,
        invite_accepted=accepted,
        created_at=now,
        updated_at=now,
    )
    async with session_factory() as session:
        session.add(member)
        await session.commit()
    return member
