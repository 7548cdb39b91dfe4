import datetime

from pydantic import BaseModel, EmailStr

from statuspage.core.enums import Impact, IncidentStatus, IncidentType, ServiceStatus
from statuspage.schemas.common import Pagination


class PublicOrganization(BaseModel):
    name: str
    domain: str
    logo: str | None = None
    brand_color: str


class PublicService(BaseModel):
    id: str
    name: str
    description: str | None = None
    status: ServiceStatus
    group: str
    order: int


class PublicServiceRef(BaseModel):
    id: str
    name: str
    status: ServiceStatus


class PublicIncident(BaseModel):
    id: str
    title: str
    description: str
    type: IncidentType
    status: IncidentStatus
    impact: Impact
    affected_services: list[PublicServiceRef]
    scheduled_for: datetime.datetime | None = None
    scheduled_until: datetime.datetime | None = None
    resolved_at: datetime.datetime | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class PublicIncidentUpdate(BaseModel):
    id: str
    message: str
    status: IncidentStatus
    created_at: datetime.datetime


class PublicStatus(BaseModel):
    organization: PublicOrganization
    overall_status: ServiceStatus
    service_groups: dict[str, list[PublicService]]
    active_incidents: list[PublicIncident]
    scheduled_maintenance: list[PublicIncident]


class PublicIncidentPage(BaseModel):
    incidents: list[PublicIncident]
    pagination: Pagination


class PublicIncidentDetail(BaseModel):
    incident: PublicIncident
    updates: list[PublicIncidentUpdate]


class SubscribeRequest(BaseModel):
    email: EmailStr
    all_services: bool = True
    specific_services: list[str] = []


class SubscriptionOut(BaseModel):
    email: str
    is_verified: bool
