from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from inspect import isclass
from types import TracebackType
from typing import TYPE_CHECKING, Any, TypeVar

from typing_extensions import Self

from wirecheck._store import InstanceStore, NotInCache
from wirecheck.definitions import Definition, Lifetime, Object
from wirecheck.errors import (
    AsyncDefinitionError,
    DependencyNotFoundError,
    InstanceTypeError,
    ParameterNotFoundError,
)
from wirecheck.parameters import ParameterSource
from wirecheck.registry import type_matches


if TYPE_CHECKING:
    from wirecheck.containers import Container

_T = TypeVar("_T")

Candidates = Callable[[], Iterable[Definition[Any]]]


def _check_instance(definition: Definition[Any], instance: object) -> None:
    expected = definition.type_
    if not isclass(expected) or getattr(expected, "_is_protocol", False):
        return
    if not isinstance(instance, expected):
        raise InstanceTypeError(definition, expected, instance)


class _BaseInjectionContext:
    def __init__(
        self,
        container: Container,
        singletons: InstanceStore,
        context: Mapping[Any, Any] | None = None,
        *,
        owns_singletons: bool = False,
    ) -> None:
        self._container = container
        self._singletons = singletons
        self._owns_singletons = owns_singletons
        self._store = InstanceStore()
        self._definitions: list[Definition[Any]] = []

        if context:
            for key, value in context.items():
                self.register(Object(value, type_=key))

        self._closed = False

    def _get_store(self, lifetime: Lifetime) -> InstanceStore:
        if lifetime is Lifetime.singleton:
            return self._singletons
        return self._store

    def _get_candidates(
        self,
        type_: Any,
        path: str | None,
        candidates: Candidates | None,
    ) -> list[Definition[Any]]:
        if candidates is not None:
            found = list(candidates())
        else:
            found = [
                definition
                for definition in self._definitions
                if type_matches(definition.type_, type_)
            ] or self._container.registry.find_by_type(type_)
            if path is not None:
                found = [
                    definition
                    for definition in found
                    if definition.path == path
                ]

        if not found:
            raise DependencyNotFoundError(type_, path)
        return found

    def _get_parameters(
        self,
        definition: Definition[Any],
        parameters: ParameterSource | None,
    ) -> dict[str, Any]:
        if not definition.parameters:
            return {}

        values = parameters() if parameters is not None else {}
        kwargs = {}
        for name in definition.parameters:
            if name not in values:
                raise ParameterNotFoundError(name, definition)
            kwargs[name] = values[name]
        return kwargs

    def register(self, definition: Definition[Any]) -> None:
        self._definitions.append(definition)


class InjectionContext(_BaseInjectionContext):
    async def resolve(
        self,
        type_: type[_T],
        *,
        path: str | None = None,
        parameters: ParameterSource | None = None,
        candidates: Candidates | None = None,
    ) -> _T:
        definitions = self._get_candidates(type_, path, candidates)
        return await self._resolve_definition(definitions[0], parameters)

    async def resolve_iterable(self, type_: type[_T]) -> list[_T]:
        return [
            await self._resolve_definition(definition, None)
            for definition in self._get_candidates(type_, None, None)
        ]

    async def _resolve_definition(
        self,
        definition: Definition[_T],
        parameters: ParameterSource | None,
    ) -> _T:
        store = self._get_store(definition.lifetime)
        if (cached := store.get(definition)) is not NotInCache.sentinel:
            return cached

        args = []
        kwargs = self._get_parameters(definition, parameters)
        for dependency in definition.dependencies or ():
            value = await self.resolve(dependency.type_)
            if dependency.name is None:
                args.append(value)
            else:
                kwargs[dependency.name] = value

        return await self._provide_and_store(definition, store, args, kwargs)

    async def _provide_and_store(
        self,
        definition: Definition[_T],
        store: InstanceStore,
        args: list[Any],
        kwargs: dict[str, Any],
    ) -> _T:
        provided = await definition.provide(args, kwargs)
        if definition.is_generator:
            provided = await store.enter_context(provided)
        _check_instance(definition, provided)
        store.add(definition, provided)
        return provided

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._closed:
            return

        await self._store.aclose()
        if self._owns_singletons:
            await self._singletons.aclose()
        self._closed = True


class SyncInjectionContext(_BaseInjectionContext):
    def resolve(
        self,
        type_: type[_T],
        *,
        path: str | None = None,
        parameters: ParameterSource | None = None,
        candidates: Candidates | None = None,
    ) -> _T:
        definitions = self._get_candidates(type_, path, candidates)
        return self._resolve_definition(definitions[0], parameters)

    def resolve_iterable(self, type_: type[_T]) -> list[_T]:
        return [
            self._resolve_definition(definition, None)
            for definition in self._get_candidates(type_, None, None)
        ]

    def _resolve_definition(
        self,
        definition: Definition[_T],
        parameters: ParameterSource | None,
    ) -> _T:
        store = self._get_store(definition.lifetime)
        if (cached := store.get(definition)) is not NotInCache.sentinel:
            return cached

        if definition.is_async:
            raise AsyncDefinitionError(definition)

        args = []
        kwargs = self._get_parameters(definition, parameters)
        for dependency in definition.dependencies or ():
            value = self.resolve(dependency.type_)
            if dependency.name is None:
                args.append(value)
            else:
                kwargs[dependency.name] = value

        return self._provide_and_store(definition, store, args, kwargs)

    def _provide_and_store(
        self,
        definition: Definition[_T],
        store: InstanceStore,
        args: list[Any],
        kwargs: dict[str, Any],
    ) -> _T:
        provided = definition.provide_sync(args, kwargs)
        if definition.is_generator:
            provided = store.enter_sync_context(provided)
        _check_instance(definition, provided)
        store.add(definition, provided)
        return provided

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._closed:  # pragma: no cover
            return

        self._store.close()
        if self._owns_singletons:
            self._singletons.close()
        self._closed = True
