"""Pydantic schemas for FastEdge binary resources.

A binary is an uploaded WASM artifact. It is immutable once uploaded and may
be referenced by any number of applications.
"""

from pydantic import BaseModel, ConfigDict, Field

from .common import ApiType


class Binary(BaseModel):
    """Binary from GET /fastedge/v1/binaries/{id} or POST /fastedge/v1/binaries/raw."""

    model_config = ConfigDict(extra="allow")

    id: int = Field(..., description="Unique binary ID")
    api_type: ApiType | None = Field(None, description="Host API the module was built for")
    checksum: str | None = Field(None, description="Hex-encoded MD5 of the uploaded bytes")
    status: int | None = Field(None, description="Binary state code")
    unref_since: str | None = Field(
        None, description="Timestamp since the binary is no longer referenced by any app"
    )
    source: int | None = Field(None, description="Source language code")
