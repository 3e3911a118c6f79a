"""Configuration with pydantic-settings.

Inputs are read once at the entry point and passed down as settings objects.
Each flow has its own settings class reading ``INPUT_<NAME>`` environment
variables, the way GitHub Actions exposes action inputs.

Usage:
    from fastedge_deploy.config import DeployAppSettings

    settings = DeployAppSettings(app_name="my-app")  # explicit values win over env
"""

from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Base settings shared by both deployment flows.

    Logging fields are optional with sensible defaults. Mandatory inputs
    default to "" so that the orchestrator can report every missing one at
    once instead of failing on the first.
    """

    model_config = SettingsConfigDict(
        env_prefix="INPUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # === Logging (not prefixed, see validation_alias) ===

    service_name: str = Field(
        default="fastedge-deploy",
        validation_alias="SERVICE_NAME",
        description="Service name for structured logging",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        validation_alias="LOG_FORMAT",
        description="Log output format",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # === API access ===

    api_key: str = Field(default="", description="FastEdge API key")
    api_url: str = Field(
        default="",
        description="FastEdge API base URL",
        examples=["https://api.gcore.com"],
    )
    comment: str = Field(default="", description="Free-form comment stored on the resource")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    def missing_inputs(self, *names: str) -> list[str]:
        """Return the names among ``names`` whose value is empty."""
        return [name for name in names if not str(getattr(self, name) or "").strip()]

    def api_config(self) -> "ApiConfig":
        return ApiConfig(api_url=self.api_url, api_key=self.api_key)


class DeployAppSettings(BaseSettings):
    """Inputs of the application deployment flow."""

    wasm_file: str = Field(default="", description="Path to the .wasm binary to deploy")
    app_name: str = Field(default="", description="Application name")
    app_id: str = Field(
        default="", description="Existing application id, '0' or empty to look up by name"
    )
    env: str = Field(default="", description="JSON object of environment variables")
    rsp_headers: str = Field(default="", description="JSON object of response headers")
    secrets: str = Field(default="", description="JSON object of secret references {name: {id}}")

    MANDATORY_INPUTS: ClassVar[tuple[str, ...]] = ("api_key", "api_url", "wasm_file", "app_name")


class DeploySecretSettings(BaseSettings):
    """Inputs of the secret deployment flow."""

    secret_name: str = Field(default="", description="Secret name")
    secret_id: str = Field(default="", description="Existing secret id, empty to look up by name")
    secret: str = Field(default="", description="Single secret value stored in slot 0")
    secret_slots: str = Field(default="", description="JSON array of {slot, value} objects")

    MANDATORY_INPUTS: ClassVar[tuple[str, ...]] = ("api_key", "api_url", "secret_name")


class ApiConfig(BaseModel):
    """Immutable API access settings carried by every client call."""

    model_config = ConfigDict(frozen=True)

    api_url: str
    api_key: str

    @property
    def auth_header(self) -> dict[str, str]:
        return {"Authorization": f"APIKey {self.api_key}"}
