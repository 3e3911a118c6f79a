"""Pydantic schemas for FastEdge application resources.

``App`` carries the binary as a numeric reference, as returned by the API.
``AppWithBinary`` is the hydrated form produced by ``include_binary()``.
Keeping them as separate types makes every hydration branch explicit.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .binaries import Binary
from .common import ApiType
from .secrets import AppSecretRef


class _AppFields(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int = Field(..., description="Unique application ID")
    api_type: ApiType | None = Field(None, description="Host API of the application")
    name: str | None = Field(None, description="Application name")
    status: int | None = Field(None, description="Application state code")
    env: dict[str, str] | None = Field(None, description="Environment variables")
    rsp_headers: dict[str, str] | None = Field(None, description="Response headers")
    secrets: dict[str, AppSecretRef] | None = None
    networks: list[str] | None = None
    plan: str | None = None
    plan_id: int | None = None
    url: str | None = Field(None, description="Public URL of the application")
    comment: str | None = None
    log: str | None = None
    template: int | None = None
    template_name: str | None = None


class App(_AppFields):
    """Application from GET /fastedge/v1/apps/{id} or a list item from GET /fastedge/v1/apps."""

    binary: int | None = Field(None, description="ID of the referenced binary")


class AppWithBinary(_AppFields):
    """Application with its binary reference replaced by the binary itself."""

    binary: Binary | None = None

    @classmethod
    def from_app(cls, app: App, binary: Binary | None) -> "AppWithBinary":
        data: dict[str, Any] = app.model_dump()
        data["binary"] = binary
        return cls.model_validate(data)


class AppResource(BaseModel):
    """Request body for creating (POST) or updating (PUT) an application."""

    id: int | None = None
    name: str | None = None
    api_type: ApiType | None = None
    status: int = 1
    binary: int | None = None
    env: dict[str, str] = Field(default_factory=dict)
    rsp_headers: dict[str, str] = Field(default_factory=dict)
    secrets: dict[str, AppSecretRef] = Field(default_factory=dict)
    comment: str = ""

    def payload(self) -> dict:
        return self.model_dump(exclude_none=True)


class AppsQuery(BaseModel):
    """Query parameters of GET /fastedge/v1/apps."""

    limit: int | None = None
    offset: int | None = None
    ordering: str | None = Field(None, examples=["name", "-id"])
    api_type: ApiType | None = None
    name: str | None = None
    binary: int | None = None
    status: int | None = None
    plan: int | None = None
    template: int | None = None

    def params(self) -> dict:
        return self.model_dump(exclude_none=True)
