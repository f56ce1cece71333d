from __future__ import annotations

import enum
from contextlib import (
    AbstractAsyncContextManager,
    AbstractContextManager,
    AsyncExitStack,
    ExitStack,
)
from typing import TYPE_CHECKING, Any, Literal, TypeVar

from wirecheck.definitions import Lifetime


if TYPE_CHECKING:
    from wirecheck.definitions import Definition

_T = TypeVar("_T")


class NotInCache(enum.Enum):
    sentinel = enum.auto()


class InstanceStore:
    """Instances built for one lifetime.

    Context-manager factories are entered here and stay open until the
    store is closed. Async managers only close with :meth:`aclose`.
    """

    def __init__(self) -> None:
        self._instances: dict[Definition[Any], Any] = {}
        self._async_stack = AsyncExitStack()
        self._sync_stack = ExitStack()

    def get(
        self, definition: Definition[_T]
    ) -> _T | Literal[NotInCache.sentinel]:
        return self._instances.get(definition, NotInCache.sentinel)

    def add(self, definition: Definition[_T], instance: _T) -> None:
        if definition.lifetime is Lifetime.transient:
            return
        self._instances[definition] = instance

    def instances(self) -> list[Any]:
        return list(self._instances.values())

    async def enter_context(self, provided: Any) -> Any:
        if isinstance(provided, AbstractAsyncContextManager):
            return await self._async_stack.enter_async_context(provided)
        if isinstance(provided, AbstractContextManager):
            return self._async_stack.enter_context(provided)
        return provided

    def enter_sync_context(self, provided: Any) -> Any:
        if isinstance(provided, AbstractContextManager):
            return self._sync_stack.enter_context(provided)
        return provided

    async def aclose(self) -> None:
        await self._async_stack.aclose()
        self.close()

    def close(self) -> None:
        self._sync_stack.close()
        self._instances.clear()
