import datetime

from pydantic import BaseModel


class SubscriberOut(BaseModel):
    id: str
    organization_id: str
    email: str
    is_verified: bool
    all_services: bool
    specific_services: list[str]
    created_at: datetime.datetime
