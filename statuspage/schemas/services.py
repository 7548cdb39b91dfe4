import datetime

from pydantic import BaseModel, Field

from statuspage.core.enums import ServiceStatus


class ServiceCreate(BaseModel):
    organization_id: str
    name: str = Field(min_length=2, max_length=100)
    description: str | None = None
    group: str | None = None
    is_public: bool = True


class ServiceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = None
    group: str | None = None
    is_public: bool | None = None
    order: int | None = None


class ServiceStatusUpdate(BaseModel):
    status: ServiceStatus


class ServiceOut(BaseModel):
    id: str
    organization_id: str
    name: str
    description: str | None = None
    status: ServiceStatus
    group: str
    order: int
    is_public: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime


class StatusHistoryEntry(BaseModel):
    status: ServiceStatus
    recorded_at: datetime.datetime
    duration: int


class ServiceDetail(ServiceOut):
    history: list[StatusHistoryEntry] = []


class ServiceUptime(BaseModel):
    service_id: str
    window_hours: int
    availability: float  # percent
    current_status: ServiceStatus
