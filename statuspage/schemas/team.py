import datetime

from pydantic import BaseModel, EmailStr, Field

from statuspage.core.enums import Role


class TeamInvite(BaseModel):
    email: EmailStr
    name: str = Field(min_length=2, max_length=100)
    role: Role = Role.VIEWER


class TeamRoleUpdate(BaseModel):
    role: Role


class TeamMemberOut(BaseModel):
    id: str
    organization_id: str
    user_id: str | None = None
    email: str
    name: str
    role: Role
    invite_accepted: bool
    last_active: datetime.datetime | None = None
    created_at: datetime.datetime


class TeamInviteOut(TeamMemberOut):
    invite_token: str


class InviteAccepted(BaseModel):
    organization_id: str
    role: Role
