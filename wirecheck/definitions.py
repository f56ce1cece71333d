from __future__ import annotations

import collections.abc
import enum
import inspect
import typing
from collections.abc import Sequence
from dataclasses import dataclass
from inspect import isclass
from typing import Any, Generic, TypeAlias, TypeVar


_T = TypeVar("_T")


@dataclass(slots=True, kw_only=True, frozen=True)
class Dependency(Generic[_T]):
    """Single required type of a definition.

    Dependencies without a name are passed to the factory positionally,
    in declaration order.
    """

    name: str | None
    type_: type[_T]


class Lifetime(enum.Enum):
    transient = enum.auto()
    scoped = enum.auto()
    singleton = enum.auto()


_GENERATORS = {
    collections.abc.Generator,
    collections.abc.Iterator,
}
_ASYNC_GENERATORS = {
    collections.abc.AsyncGenerator,
    collections.abc.AsyncIterator,
}

_FactoryType: TypeAlias = (
    type[_T]
    | typing.Callable[..., _T]
    | typing.Callable[..., collections.abc.Awaitable[_T]]
    | typing.Callable[..., collections.abc.Coroutine[Any, Any, _T]]
    | typing.Callable[..., collections.abc.Iterator[_T]]
    | typing.Callable[..., collections.abc.AsyncIterator[_T]]
)


def _guess_return_type(factory: _FactoryType[_T]) -> type[_T]:
    unwrapped = inspect.unwrap(factory)

    origin = typing.get_origin(factory)
    is_generic = origin and isclass(origin)
    if isclass(factory) or is_generic:
        return typing.cast(type[_T], factory)

    try:
        return_type = typing.get_type_hints(unwrapped)["return"]
    except KeyError as e:
        msg = f"Factory {factory.__qualname__} does not specify return type."
        raise ValueError(msg) from e
    except NameError as e:
        msg = f"Factory {factory.__qualname__} return type is not defined yet."
        raise ValueError(msg) from e

    if origin := typing.get_origin(return_type):
        args = typing.get_args(return_type)

        is_async_gen = (
            origin in _ASYNC_GENERATORS
            and inspect.isasyncgenfunction(unwrapped)
        )
        is_sync_gen = origin in _GENERATORS and inspect.isgeneratorfunction(
            unwrapped,
        )
        if is_async_gen or is_sync_gen:
            return_type = args[0]

    return return_type


def _is_context_manager_factory(factory: typing.Callable[..., object]) -> bool:
    unwrapped = inspect.unwrap(factory)
    return inspect.isgeneratorfunction(
        unwrapped
    ) or inspect.isasyncgenfunction(unwrapped)


def collect_dependencies(
    factory: typing.Callable[..., object],
    exclude: Sequence[str] = (),
) -> tuple[Dependency[object], ...] | None:
    """Read the dependency list from the factory's annotated signature.

    Only parameters that are annotated and have no default are treated as
    dependencies. Returns ``None`` when the factory has no signature that
    can be inspected, e.g. most builtin types.
    """
    source = factory.__init__ if isclass(factory) else inspect.unwrap(factory)  # type: ignore[misc]
    try:
        signature = inspect.signature(factory)
        type_hints = typing.get_type_hints(source)
    except (TypeError, ValueError):
        return None
    except NameError as e:
        qualname = getattr(factory, "__qualname__", repr(factory))
        msg = f"Factory {qualname} dependency annotations are not defined yet."
        raise ValueError(msg) from e

    dependencies = []
    for parameter in signature.parameters.values():
        if parameter.name in exclude or parameter.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        ):
            continue
        if (
            parameter.default is not inspect.Parameter.empty
            or parameter.name not in type_hints
        ):
            continue

        name = (
            None
            if parameter.kind is inspect.Parameter.POSITIONAL_ONLY
            else parameter.name
        )
        dependencies.append(
            Dependency(name=name, type_=type_hints[parameter.name]),
        )
    return tuple(dependencies)


class Definition(Generic[_T]):
    """Registration entry describing how to build one component.

    The dependency list is fixed when the definition is created, either from
    ``requires`` or from the factory's annotations, and is never recomputed.
    """

    lifetime: typing.ClassVar[Lifetime]
    factory: typing.Callable[..., Any] | None
    type_: type[_T]
    name: str
    namespace: str
    parameters: tuple[str, ...]
    dependencies: tuple[Dependency[object], ...] | None
    is_async: bool
    is_generator: bool

    @property
    def path(self) -> str:
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name

    def constructor_parameter_types(self) -> tuple[type[object], ...]:
        return tuple(
            dependency.type_ for dependency in self.dependencies or ()
        )

    def provide_sync(
        self,
        args: Sequence[Any],
        kwargs: typing.Mapping[str, Any],
    ) -> _T:
        raise NotImplementedError

    async def provide(
        self,
        args: Sequence[Any],
        kwargs: typing.Mapping[str, Any],
    ) -> _T:
        raise NotImplementedError

    def __repr__(self) -> str:
        type_name = getattr(self.type_, "__qualname__", repr(self.type_))
        return f"{self.__class__.__qualname__}(path={self.path!r}, type={type_name})"


class Scoped(Definition[_T]):
    lifetime = Lifetime.scoped

    def __init__(
        self,
        factory: _FactoryType[_T],
        type_: type[_T] | None = None,
        *,
        name: str | None = None,
        namespace: str = "",
        requires: Sequence[type[Any]] | None = None,
        parameters: Sequence[str] = (),
    ) -> None:
        self.factory = factory
        self.type_ = type_ or _guess_return_type(factory)
        self.name = name or getattr(self.type_, "__qualname__", repr(self.type_))
        self.namespace = namespace
        self.parameters = tuple(parameters)

        if requires is not None:
            self.dependencies = tuple(
                Dependency(name=None, type_=required) for required in requires
            )
        else:
            self.dependencies = collect_dependencies(
                factory,
                exclude=self.parameters,
            )

        self.is_async = inspect.iscoroutinefunction(
            factory
        ) or inspect.isasyncgenfunction(inspect.unwrap(factory))
        self.is_generator = _is_context_manager_factory(factory)

    def provide_sync(
        self,
        args: Sequence[Any],
        kwargs: typing.Mapping[str, Any],
    ) -> _T:
        return self.factory(*args, **kwargs)  # type: ignore[misc]

    async def provide(
        self,
        args: Sequence[Any],
        kwargs: typing.Mapping[str, Any],
    ) -> _T:
        if inspect.iscoroutinefunction(self.factory):
            return await self.factory(*args, **kwargs)  # type: ignore[no-any-return]

        return self.provide_sync(args, kwargs)


class Singleton(Scoped[_T]):
    lifetime = Lifetime.singleton


class Transient(Scoped[_T]):
    lifetime = Lifetime.transient


class Object(Definition[_T]):
    lifetime = Lifetime.scoped  # It's ok to cache it
    factory = None
    dependencies = ()
    parameters = ()
    is_async = False
    is_generator = False

    def __init__(
        self,
        object_: _T,
        type_: type[_T] | None = None,
        *,
        name: str | None = None,
        namespace: str = "",
    ) -> None:
        self.impl = object_
        self.type_ = type_ or type(object_)
        self.name = name or self.type_.__qualname__
        self.namespace = namespace

    def provide_sync(
        self,
        args: Sequence[Any],  # noqa: ARG002
        kwargs: typing.Mapping[str, Any],  # noqa: ARG002
    ) -> _T:
        return self.impl

    async def provide(
        self,
        args: Sequence[Any],  # noqa: ARG002
        kwargs: typing.Mapping[str, Any],  # noqa: ARG002
    ) -> _T:
        return self.impl
