import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from statuspage.core.enums import Role


class OrganizationSettings(BaseModel):
    timezone: str = "UTC"
    public_email: EmailStr | None = None
    notifications_enabled: bool = True


class OrganizationSettingsUpdate(BaseModel):
    timezone: str | None = None
    public_email: EmailStr | None = None
    notifications_enabled: bool | None = None


class OrganizationCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    domain: str = Field(min_length=2, max_length=100, pattern=r"^[a-zA-Z0-9-]+$")
    logo: str | None = None
    brand_color: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("domain", mode="before")
    @classmethod
    def normalize_domain(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class OrganizationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    logo: str | None = None
    brand_color: str | None = None
    settings: OrganizationSettingsUpdate | None = None


class OrganizationOut(BaseModel):
    id: str
    name: str
    domain: str
    logo: str | None = None
    brand_color: str
    settings: OrganizationSettings
    created_at: datetime.datetime
    updated_at: datetime.datetime


class MemberOrganization(BaseModel):
    """An organization as seen from one of its members."""

    id: str
    name: str
    domain: str
    logo: str | None = None
    brand_color: str
    role: Role
