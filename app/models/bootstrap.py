from __future__ import annotations

from pydantic import BaseModel, Field


class BootstrapResponse(BaseModel):
    message: str = Field(..., description="Readiness message for the provisioned database")
