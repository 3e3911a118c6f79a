from .apps import App, AppResource, AppsQuery, AppWithBinary
from .binaries import Binary
from .common import ApiType
from .secrets import (
    AppSecretRef,
    Secret,
    SecretRefInput,
    SecretResource,
    SecretSlot,
    SecretSlotInput,
    SecretsQuery,
)

__all__ = [
    "ApiType",
    "App",
    "AppResource",
    "AppSecretRef",
    "AppWithBinary",
    "AppsQuery",
    "Binary",
    "Secret",
    "SecretRefInput",
    "SecretResource",
    "SecretSlot",
    "SecretSlotInput",
    "SecretsQuery",
]
