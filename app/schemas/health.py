"""Pydantic schema for the health check response."""

from typing import Literal

from pydantic import BaseModel, Field

from app.core.config import APP_VERSION


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    service: str = "helpdesk-api"
    version: str = APP_VERSION
    environment: Literal["dev", "prod"] = Field(description="Deployment mode")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Result of a SELECT 1 against the configured database",
    )
