"""Parsing of free-form JSON inputs into request resources.

Malformed input never fails a run: each parser logs a warning and falls back
to an empty default.
"""

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .config import DeployAppSettings, DeploySecretSettings
from .errors import InputValidationError
from .logging import get_logger
from .schemas import (
    AppResource,
    AppSecretRef,
    SecretRefInput,
    SecretResource,
    SecretSlot,
    SecretSlotInput,
)

logger = get_logger(__name__)

_slots_adapter = TypeAdapter(list[SecretSlotInput])
_secret_refs_adapter = TypeAdapter(dict[str, SecretRefInput])


def _load_json(input_name: str, raw: str, default: str) -> Any:
    try:
        return json.loads(raw.strip() or default)
    except json.JSONDecodeError as e:
        raise InputValidationError(f"Failed to parse input as JSON: {input_name}") from e


def _load_object(input_name: str, raw: str) -> dict[str, Any]:
    data = _load_json(input_name, raw, "{}")
    if not isinstance(data, dict):
        raise InputValidationError(f'Input "{input_name}" is not a valid JSON dictionary object.')
    return data


def parse_dictionary_input(input_name: str, raw: str) -> dict[str, str]:
    """Parse a JSON object of string values (``env``, ``rsp_headers``).

    Non-string values are replaced with "" and reported.
    """
    try:
        data = _load_object(input_name, raw)
    except InputValidationError as e:
        logger.warning("input_invalid", input=input_name, reason=str(e))
        return {}

    parsed: dict[str, str] = {}
    for key, value in data.items():
        if not isinstance(value, str):
            logger.warning("input_value_not_string", input=input_name, key=key)
            parsed[key] = ""
            continue
        parsed[key] = value
    return parsed


def parse_secrets_input(raw: str) -> dict[str, AppSecretRef]:
    """Parse the ``secrets`` input: ``{"NAME": {"id": 123}, ...}``.

    Entries are reduced to their ``id``. A single invalid entry discards the
    whole input.
    """
    try:
        refs = _secret_refs_adapter.validate_python(_load_object("secrets", raw))
    except ValidationError:
        logger.warning(
            "input_invalid",
            input="secrets",
            reason='Each secret must be an object with a numeric "id" property.',
        )
        return {}
    except InputValidationError as e:
        logger.warning("input_invalid", input="secrets", reason=str(e))
        return {}

    return {key: AppSecretRef(id=ref.id) for key, ref in refs.items()}


def parse_secret_slots(raw: str) -> list[SecretSlot]:
    """Parse the ``secret_slots`` input: ``[{"slot": 0, "value": "..."}, ...]``."""
    try:
        data = _load_json("secret_slots", raw, "[]")
        if not isinstance(data, list):
            raise InputValidationError("secret_slots is not a JSON array.")
        slots = _slots_adapter.validate_python(data)
    except ValidationError:
        logger.warning(
            "input_invalid",
            input="secret_slots",
            reason="Each slot must be an object with 'slot' and 'value' properties.",
        )
        return []
    except InputValidationError as e:
        logger.warning("input_invalid", input="secret_slots", reason=str(e))
        return []

    return [SecretSlot(slot=item.slot, value=item.value) for item in slots]


def build_secret_slots(secret_slots: str, secret: str) -> list[SecretSlot]:
    """Slots from ``secret_slots``, or ``secret`` stored in slot 0 when there are none."""
    slots = parse_secret_slots(secret_slots)
    if not slots and secret.strip():
        slots = [SecretSlot(slot=0, value=secret)]
    if not slots:
        logger.warning("secret_slots_empty")
    return slots


def app_resource_from_settings(settings: DeployAppSettings) -> AppResource:
    return AppResource(
        name=settings.app_name,
        status=1,
        env=parse_dictionary_input("env", settings.env),
        rsp_headers=parse_dictionary_input("rsp_headers", settings.rsp_headers),
        secrets=parse_secrets_input(settings.secrets),
        comment=settings.comment,
    )


def secret_resource_from_settings(settings: DeploySecretSettings) -> SecretResource:
    return SecretResource(
        name=settings.secret_name,
        comment=settings.comment,
        secret_slots=build_secret_slots(settings.secret_slots, settings.secret),
    )
