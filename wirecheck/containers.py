import contextlib
from collections.abc import Mapping
from types import TracebackType
from typing import Any

from typing_extensions import Self

from wirecheck._store import InstanceStore
from wirecheck.context import InjectionContext, SyncInjectionContext
from wirecheck.definitions import Definition
from wirecheck.errors import DuplicateDefinitionError
from wirecheck.registry import Registry


class Container:
    def __init__(self, properties: Mapping[str, Any] | None = None) -> None:
        self._singletons = InstanceStore()

        self.registry = Registry()
        self.properties: dict[str, Any] = dict(properties or {})

    def register(self, *definitions: Definition[Any]) -> None:
        for definition in definitions:
            self.registry.add(definition)

    def try_register(self, *definitions: Definition[Any]) -> None:
        for definition in definitions:
            with contextlib.suppress(DuplicateDefinitionError):
                self.registry.add(definition)

    @property
    def definitions(self) -> tuple[Definition[Any], ...]:
        return self.registry.definitions

    def find_definition(self, type_: Any) -> Definition[Any] | None:
        return next(
            (
                definition
                for definition in self.registry.definitions
                if definition.type_ == type_
            ),
            None,
        )

    def paths(self) -> list[str]:
        return self.registry.namespaces()

    def get_path(self, namespace: str) -> list[Definition[Any]]:
        definitions = [
            definition
            for definition in self.registry.definitions
            if definition.namespace == namespace
        ]
        if not definitions:
            msg = f"Path {namespace!r} not found"
            raise ValueError(msg)
        return definitions

    def instances(self) -> list[Any]:
        return self._singletons.instances()

    def get_property(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)

    def context(
        self,
        context: Mapping[Any, Any] | None = None,
        *,
        isolated: bool = False,
    ) -> InjectionContext:
        return InjectionContext(
            container=self,
            singletons=InstanceStore() if isolated else self._singletons,
            context=context,
            owns_singletons=isolated,
        )

    def sync_context(
        self,
        context: Mapping[Any, Any] | None = None,
        *,
        isolated: bool = False,
    ) -> SyncInjectionContext:
        return SyncInjectionContext(
            container=self,
            singletons=InstanceStore() if isolated else self._singletons,
            context=context,
            owns_singletons=isolated,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._singletons.aclose()

    async def aclose(self) -> None:
        await self.__aexit__(None, None, None)  # pragma: no cover

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._singletons.close()

    def close(self) -> None:
        self.__exit__(None, None, None)  # pragma: no cover
