"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready when ready."""

    status: str = Field(default="ok", description="Readiness status")
    database: str = Field(default="ok", description="Relational store status")
    cache: str = Field(default="ok", description="Cache status: ok, unavailable or disabled")


class ReadinessErrorResponse(BaseModel):
    """Response for GET /health/ready when the database is down (503)."""

    status: str = Field(default="not_ready", description="Readiness status")
    message: str = Field(..., description="Reason")
    database: str = Field(default="unavailable", description="Relational store status")
    cache: str = Field(default="unavailable", description="Cache status")
