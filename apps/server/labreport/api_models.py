"""Pydantic request/response models for the report HTTP API.

Field names follow the camelCase wire format the web client already sends.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1, max_length=128)


class ReportRequest(BaseModel):
    reportData: dict[str, Any]
    graphSpecs: list[dict[str, Any]] | None = None
    variant: str | None = Field(default=None, max_length=32)


class HtmlContentRequest(BaseModel):
    htmlContent: str = Field(min_length=1)
    variant: str | None = Field(default=None, max_length=32)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    id: int
    email: str


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


class ReportResponse(BaseModel):
    pdfBase64: str
    reportData: dict[str, Any]
    fileName: str | None = None
    msg: str | None = None


class AnalysisResponse(BaseModel):
    msg: str


class HealthResponse(BaseModel):
    status: str
    version: str
    variant: str
    temp_files: int
    worker_pool: dict[str, Any]
