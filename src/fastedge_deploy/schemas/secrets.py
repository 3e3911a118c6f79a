"""Pydantic schemas for FastEdge secret resources.

A slot entry with a ``value`` is an upsert; a slot entry without one is a
deletion marker. Payloads are dumped with ``exclude_none=True`` so that
markers go over the wire as ``{"slot": n}``.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator


class SecretSlot(BaseModel):
    slot: int = Field(..., description="Slot number")
    value: str | None = Field(None, description="Slot value, absent for a deletion marker")

    @property
    def is_deletion(self) -> bool:
        return self.value is None


class SecretSlotInput(BaseModel):
    """Strict shape of one entry of the ``secret_slots`` input."""

    slot: StrictInt
    value: StrictStr

    @field_validator("value")
    @classmethod
    def value_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("slot value must not be blank")
        return v


class SecretRefInput(BaseModel):
    """Strict shape of one entry of the ``secrets`` input. Other keys are ignored."""

    id: StrictInt


class Secret(BaseModel):
    """Secret from GET /fastedge/v1/secrets/{id} or a list item from GET /fastedge/v1/secrets.

    List items carry no ``secret_slots``.
    """

    model_config = ConfigDict(extra="allow")

    id: int = Field(..., description="Unique secret ID")
    name: str = Field("", description="Secret name")
    comment: str | None = Field(None, description="Free-form comment")
    app_count: int | None = Field(None, description="Number of applications using the secret")
    secret_slots: list[SecretSlot] = Field(default_factory=list)

    @property
    def slot_numbers(self) -> list[int]:
        return [slot.slot for slot in self.secret_slots]


class SecretResource(BaseModel):
    """Request body for creating (POST) or updating (PATCH) a secret."""

    id: int | None = None
    name: str
    comment: str = ""
    secret_slots: list[SecretSlot] = Field(default_factory=list)

    def payload(self) -> dict:
        return self.model_dump(exclude_none=True)


class SecretsQuery(BaseModel):
    """Query parameters of GET /fastedge/v1/secrets."""

    app_id: int | None = None
    secret_name: str | None = None

    def params(self) -> dict:
        return self.model_dump(exclude_none=True)


class AppSecretRef(BaseModel):
    """Secret reference stored on an application."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str | None = None
    comment: str | None = None
