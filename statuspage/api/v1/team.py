from fastapi import APIRouter, Depends

from statuspage.dependencies import get_actor
from statuspage.schemas.common import ApiResponse, ok
from statuspage.schemas.team import InviteAccepted, TeamInvite, TeamInviteOut, TeamMemberOut, TeamRoleUpdate
from statuspage.services.policy import Actor
from statuspage.services.team import TeamService

router = APIRouter()

_service = TeamService()


@router.get("/api/organizations/{org_id}/team")
async def list_team(org_id: str, actor: Actor = Depends(get_actor)) -> ApiResponse[list[TeamMemberOut]]:
    return ok(await _service.list_members(actor, org_id))


@router.post("/api/organizations/{org_id}/team", status_code=201)
async def invite_member(
    org_id: str, body: TeamInvite, actor: Actor = Depends(get_actor)
) -> ApiResponse[TeamInviteOut]:
    """Invite someone by email. The token is returned once, for delivery to the invitee."""
    return ok(await _service.invite(actor, org_id, body), "Invitation created.")


@router.put("/api/organizations/{org_id}/team/{member_id}")
async def update_member_role(
    org_id: str, member_id: str, body: TeamRoleUpdate, actor: Actor = Depends(get_actor)
) -> ApiResponse[TeamMemberOut]:
    return ok(await _service.update_role(actor, org_id, member_id, body.role), "Role updated.")


@router.delete("/api/organizations/{org_id}/team/{member_id}")
async def remove_member(org_id: str, member_id: str, actor: Actor = Depends(get_actor)) -> ApiResponse[None]:
    await _service.remove_member(actor, org_id, member_id)
    return ok(message="Team member removed.")


@router.post("/api/invites/{token}/accept")
async def accept_invite(token: str, actor: Actor = Depends(get_actor)) -> ApiResponse[InviteAccepted]:
    return ok(await _service.accept_invite(actor, token), "Invitation accepted.")
