"""FastEdge REST API client.

One ``FastEdgeClient`` per run. It holds the immutable ``ApiConfig`` and a
lazily created ``httpx.AsyncClient``; resource families are exposed as
``client.apps``, ``client.binaries`` and ``client.secrets``.

Every failure is raised as ``FastEdgeAPIError`` with an operation label
("Error fetching application: Not Found"). Calls are never retried.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import os
from pathlib import Path
from typing import Any

import httpx

from ..config import ApiConfig
from ..errors import FastEdgeAPIError, NotFoundError
from ..logging import get_logger
from ..schemas import (
    App,
    AppResource,
    AppsQuery,
    Binary,
    Secret,
    SecretResource,
    SecretsQuery,
)
from .enhanced import EnhancedApp
from .results import Found, LookupResult, NotFound

logger = get_logger(__name__)

APPS_PATH = "/fastedge/v1/apps"
BINARIES_PATH = "/fastedge/v1/binaries"
SECRETS_PATH = "/fastedge/v1/secrets"


@contextmanager
def api_errors(label: str) -> Iterator[None]:
    """Re-raise lower-level failures as ``FastEdgeAPIError`` prefixed with ``label``."""
    try:
        yield
    except FastEdgeAPIError:
        raise
    except (
        httpx.HTTPError, httpx.InvalidURL, ValueError, TypeError, AttributeError, OSError
    ) as exc:
        raise FastEdgeAPIError(label, str(exc) or type(exc).__name__) from exc


class FastEdgeClient:
    """Client for the FastEdge REST API."""

    def __init__(
        self,
        api_key: str,
        api_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize FastEdge Client.

        Args:
            api_key: API key, sent as ``Authorization: APIKey <key>``.
            api_url: Base URL of the API, e.g. https://api.gcore.com
            timeout: Request timeout in seconds. None leaves requests unbounded.
            transport: Optional httpx transport (tests, proxies).
        """
        self.config = ApiConfig(api_url=api_url.rstrip("/"), api_key=api_key)
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        self.apps = AppsAPI(self)
        self.binaries = BinariesAPI(self)
        self.secrets = SecretsAPI(self)

    @classmethod
    def from_config(cls, config: ApiConfig, **kwargs: Any) -> "FastEdgeClient":
        return cls(api_key=config.api_key, api_url=config.api_url, **kwargs)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_url,
                headers=self.config.auth_header,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def request(self, label: str, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body."""
        with api_errors(label):
            client = await self._get_client()
            logger.debug("fastedge_request", method=method, path=path)
            resp = await client.request(method, path, **kwargs)
            if not resp.is_success:
                logger.debug(
                    "fastedge_request_failed",
                    method=method,
                    path=path,
                    status_code=resp.status_code,
                    body=resp.text[:500],
                )
                raise FastEdgeAPIError(
                    label,
                    resp.reason_phrase or str(resp.status_code),
                    status_code=resp.status_code,
                )
            return resp.json()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FastEdgeClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class AppsAPI:
    """Application endpoints."""

    def __init__(self, api: FastEdgeClient):
        self._api = api

    def get(self, app_id: int | str) -> EnhancedApp:
        """Fetch an application by ID; chain ``.include_binary()`` to hydrate it."""
        return EnhancedApp(lambda: self._get(app_id), self._api.binaries.get)

    def get_by_name(self, name: str) -> EnhancedApp:
        """Fetch an application by name; awaiting raises NotFoundError on no match."""
        return EnhancedApp(lambda: self._get_by_name(name), self._api.binaries.get)

    def enhance(self, app: App) -> EnhancedApp:
        """Wrap an already fetched application so it can be hydrated."""

        async def resolved() -> App:
            return app

        return EnhancedApp(resolved, self._api.binaries.get)

    async def list(self, query: AppsQuery | None = None) -> list[App]:
        label = "Error fetching applications"
        params = (query or AppsQuery()).params()
        data = await self._api.request(label, "GET", APPS_PATH, params=params)
        with api_errors(label):
            return [App.model_validate(item) for item in data.get("apps") or []]

    async def find_by_name(self, name: str) -> LookupResult[App]:
        """Look an application up by exact name.

        If the API returns several matches the first one wins.
        """
        apps = await self.list(AppsQuery(name=name))
        if not apps:
            return NotFound(name)
        if len(apps) > 1:
            logger.warning("app_name_ambiguous", name=name, matches=len(apps), picked=apps[0].id)
        return Found(apps[0])

    async def create(self, resource: AppResource) -> App:
        label = "Error creating application"
        data = await self._api.request(label, "POST", APPS_PATH, json=resource.payload())
        with api_errors(label):
            return App.model_validate(data)

    async def update(self, resource: AppResource) -> App:
        label = "Error updating application"
        if resource.id is None:
            raise FastEdgeAPIError(label, "application id is required")
        data = await self._api.request(
            label, "PUT", f"{APPS_PATH}/{resource.id}", json=resource.payload()
        )
        with api_errors(label):
            return App.model_validate(data)

    async def _get(self, app_id: int | str) -> App:
        label = "Error fetching application"
        data = await self._api.request(label, "GET", f"{APPS_PATH}/{app_id}")
        with api_errors(label):
            # The response may omit the id or carry it as a string
            return App.model_validate({**data, "id": int(str(app_id))})

    async def _get_by_name(self, name: str) -> App:
        match = await self.find_by_name(name)
        if isinstance(match, NotFound):
            raise NotFoundError("Application", name)
        return match.resource


class BinariesAPI:
    """Binary endpoints."""

    def __init__(self, api: FastEdgeClient):
        self._api = api

    async def get(self, binary_id: int | str) -> Binary:
        label = "Error fetching binary"
        data = await self._api.request(label, "GET", f"{BINARIES_PATH}/{binary_id}")
        with api_errors(label):
            return Binary.model_validate({**data, "id": int(str(binary_id))})

    async def upload(self, wasm_path: str | os.PathLike[str]) -> Binary:
        """Upload a WASM file as a new binary."""
        label = "Error uploading binary"
        with api_errors(label):
            content = Path(os.path.normpath(wasm_path)).read_bytes()

        logger.info("binary_uploading", path=str(wasm_path), size=len(content))
        data = await self._api.request(
            label,
            "POST",
            f"{BINARIES_PATH}/raw",
            content=content,
            headers={"Content-Type": "application/octet-stream"},
        )
        with api_errors(label):
            binary = Binary.model_validate(data)
        logger.info("binary_uploaded", binary_id=binary.id, checksum=binary.checksum)
        return binary


class SecretsAPI:
    """Secret endpoints."""

    def __init__(self, api: FastEdgeClient):
        self._api = api

    async def get(self, secret_id: int | str) -> Secret:
        label = "Error fetching secret"
        data = await self._api.request(label, "GET", f"{SECRETS_PATH}/{secret_id}")
        with api_errors(label):
            return Secret.model_validate({**data, "id": int(str(secret_id))})

    async def list(self, query: SecretsQuery | None = None) -> list[Secret]:
        label = "Error fetching secrets"
        params = (query or SecretsQuery()).params()
        data = await self._api.request(label, "GET", SECRETS_PATH, params=params)
        with api_errors(label):
            return [Secret.model_validate(item) for item in data.get("secrets") or []]

    async def find_by_name(self, name: str) -> LookupResult[Secret]:
        """Look a secret up by exact name. First match wins."""
        secrets = await self.list(SecretsQuery(secret_name=name))
        if not secrets:
            return NotFound(name)
        if len(secrets) > 1:
            logger.warning(
                "secret_name_ambiguous", name=name, matches=len(secrets), picked=secrets[0].id
            )
        return Found(secrets[0])

    async def get_by_name(self, name: str) -> Secret:
        match = await self.find_by_name(name)
        if isinstance(match, NotFound):
            raise NotFoundError("Secret", name)
        return match.resource

    async def create(self, resource: SecretResource) -> Secret:
        label = "Error creating secret"
        data = await self._api.request(label, "POST", SECRETS_PATH, json=resource.payload())
        with api_errors(label):
            return Secret.model_validate(data)

    async def update(self, resource: SecretResource) -> Secret:
        label = "Error updating secret"
        if resource.id is None:
            raise FastEdgeAPIError(label, "secret id is required")
        data = await self._api.request(
            label, "PATCH", f"{SECRETS_PATH}/{resource.id}", json=resource.payload()
        )
        with api_errors(label):
            return Secret.model_validate(data)
