"""Lazy, memoising wrappers around an application fetch.

``EnhancedApp`` can be awaited for the plain ``App`` or asked for
``include_binary()``, which yields the same application with its binary
reference replaced by the fetched ``Binary``::

    app = await client.apps.get(42)
    app_with_binary = await client.apps.get(42).include_binary()

Each fetch runs at most once per wrapper: the base fetch and the hydration
are both held in a single-assignment cell, so repeated, chained or concurrent
``include_binary()`` calls share one binary request.
"""

import asyncio
from collections.abc import Awaitable, Callable, Generator
from typing import Any, Generic, TypeVar

from ..logging import get_logger
from ..schemas import App, AppWithBinary, Binary

logger = get_logger(__name__)

T = TypeVar("T")


class _Once(Generic[T]):
    """Starts ``factory()`` on first use and hands out the same future afterwards."""

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._future: asyncio.Future[T] | None = None

    def get(self) -> "asyncio.Future[T]":
        if self._future is None:
            self._future = asyncio.ensure_future(self._factory())
        return self._future


class HydratedApp:
    """Awaitable resolving to an ``AppWithBinary``."""

    def __init__(self, hydrate: Callable[[], Awaitable[AppWithBinary]]) -> None:
        self._cell = _Once(hydrate)

    def __await__(self) -> Generator[Any, None, AppWithBinary]:
        return self._cell.get().__await__()

    def include_binary(self) -> "HydratedApp":
        # Binary is already resolved
        return self


class EnhancedApp:
    """Awaitable resolving to an ``App``, with optional binary hydration."""

    def __init__(
        self,
        fetch: Callable[[], Awaitable[App]],
        get_binary: Callable[[int], Awaitable[Binary]],
    ) -> None:
        self._base = _Once(fetch)
        self._get_binary = get_binary
        self._hydrated: HydratedApp | None = None

    def __await__(self) -> Generator[Any, None, App]:
        return self._base.get().__await__()

    def include_binary(self) -> HydratedApp:
        if self._hydrated is None:
            self._hydrated = HydratedApp(self._hydrate)
        return self._hydrated

    async def _hydrate(self) -> AppWithBinary:
        app = await self._base.get()
        if not app.binary:
            logger.debug("app_has_no_binary", app_id=app.id)
            return AppWithBinary.from_app(app, None)

        binary = await self._get_binary(app.binary)
        return AppWithBinary.from_app(app, binary)
