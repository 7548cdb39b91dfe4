from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str  # "ok" or "degraded"
    database: str
    fanout_running: bool
    fanout_pending: int
    fanout_dropped: int
    realtime_connections: int
    uptime_seconds: float
