from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    message: str
    upstream_status: bool
    upstream_url: str
