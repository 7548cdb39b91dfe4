import datetime

from pydantic import BaseModel, Field, field_validator

from statuspage.core.enums import Impact, IncidentStatus, IncidentType, ServiceStatus
from statuspage.schemas.common import Pagination


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class IncidentCreate(BaseModel):
    organization_id: str
    title: str = Field(min_length=2, max_length=200)
    description: str = Field(min_length=1)
    type: IncidentType
    status: IncidentStatus = IncidentStatus.INVESTIGATING
    impact: Impact = Impact.MINOR
    affected_services: list[str] = []
    is_public: bool = True
    scheduled_for: datetime.datetime | None = None
    scheduled_until: datetime.datetime | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)


class IncidentPatch(BaseModel):
    title: str | None = Field(default=None, min_length=2, max_length=200)
    type: IncidentType | None = None
    impact: Impact | None = None
    affected_services: list[str] | None = None
    is_public: bool | None = None
    scheduled_for: datetime.datetime | None = None
    scheduled_until: datetime.datetime | None = None


class IncidentUpdateCreate(BaseModel):
    message: str = Field(min_length=1)
    status: IncidentStatus
    is_public: bool | None = None  # inherits the incident's visibility when omitted

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, value):
        return _strip(value)


class AffectedService(BaseModel):
    id: str
    name: str
    status: ServiceStatus


class IncidentOut(BaseModel):
    id: str
    organization_id: str
    title: str
    description: str
    type: IncidentType
    status: IncidentStatus
    impact: Impact
    affected_services: list[AffectedService]
    is_public: bool
    created_by: str
    scheduled_for: datetime.datetime | None = None
    scheduled_until: datetime.datetime | None = None
    resolved_at: datetime.datetime | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class IncidentUpdateOut(BaseModel):
    id: str
    incident_id: str
    message: str
    status: IncidentStatus
    created_by: str
    is_public: bool
    created_at: datetime.datetime


class IncidentDetail(BaseModel):
    incident: IncidentOut
    updates: list[IncidentUpdateOut]


class IncidentPage(BaseModel):
    incidents: list[IncidentOut]
    pagination: Pagination
