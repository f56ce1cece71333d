import abc
import contextlib
from collections.abc import AsyncIterator, Iterator
from typing import Any, ClassVar, Literal, Protocol

import pytest

from tests.utils_ import RecordingSink
from wirecheck import (
    Container,
    Definition,
    Scoped,
    Singleton,
    Transient,
    parameters_of,
)
from wirecheck.errors import DependencyNotFoundError, ParameterNotFoundError
from wirecheck.validation import (
    BrokenDefinitionError,
    check,
    dry_run,
    dry_run_async,
)


class _ConstructionError(Exception):
    pass


class _ServiceA:
    pass


class _RepoX:
    pass


class _ServiceB:
    def __init__(self, repo: _RepoX) -> None:
        self.repo = repo


class _ServiceC:
    def __init__(self, repo: _RepoX) -> None:
        self.repo = repo


class _FailingRepoX(_RepoX):
    def __init__(self) -> None:
        raise _ConstructionError


class _Outbox(Protocol):
    def send(self, message: str) -> None: ...


class _SmtpOutbox(_Outbox):
    def send(self, message: str) -> None:
        pass


class _Cache(abc.ABC):
    @abc.abstractmethod
    def get(self, key: str) -> object: ...


class _MemoryCache(_Cache):
    def get(self, key: str) -> object:
        return key


class _Newsletter:
    def __init__(self, outbox: _Outbox, cache: _Cache) -> None:
        self.outbox = outbox
        self.cache = cache


class _Counted:
    created: ClassVar[list["_Counted"]] = []

    def __init__(self) -> None:
        self.created.append(self)


class _Client:
    def __init__(self, url: str) -> None:
        self.url = url


class _CycleA:
    def __init__(self, other: object) -> None:
        self.other = other


class _CycleB:
    def __init__(self, other: object) -> None:
        self.other = other


def _container(*definitions: Definition[Any]) -> Container:
    container = Container()
    container.register(*definitions)
    return container


@pytest.fixture(autouse=True)
def _reset_counter() -> Iterator[None]:
    yield
    _Counted.created.clear()


def test_scenario_a() -> None:
    container = _container(Scoped(_ServiceA))

    check(container)
    dry_run(container)


def test_scenario_b() -> None:
    container = _container(Scoped(_ServiceB))

    with pytest.raises(BrokenDefinitionError):
        check(container)
    with pytest.raises(DependencyNotFoundError) as exc_info:
        dry_run(container)

    assert exc_info.value.type_ is _RepoX


def test_scenario_c() -> None:
    container = _container(Scoped(_ServiceC), Scoped(_FailingRepoX))

    check(container)
    with pytest.raises(_ConstructionError):
        dry_run(container)


def test_scenario_d() -> None:
    container = _container(
        Scoped(_RepoX, name="first"),
        Scoped(_RepoX, name="second"),
        Scoped(_ServiceC),
    )

    check(container)
    dry_run(container)


def test_interfaces_resolve_to_registered_implementations() -> None:
    built: list[_Newsletter] = []

    def newsletter(outbox: _Outbox, cache: _Cache) -> _Newsletter:
        built.append(_Newsletter(outbox, cache))
        return built[-1]

    container = _container(
        Scoped(newsletter),
        Scoped(_SmtpOutbox),
        Scoped(_MemoryCache),
    )

    check(container)
    dry_run(container)

    assert isinstance(built[0].outbox, _SmtpOutbox)
    assert isinstance(built[0].cache, _MemoryCache)


@pytest.mark.anyio
async def test_async_dry_run_resolves_interfaces() -> None:
    container = _container(
        Scoped(_Newsletter),
        Scoped(_SmtpOutbox),
        Scoped(_MemoryCache),
    )

    await dry_run_async(container)


def test_error_propagates_unchanged() -> None:
    error = _ConstructionError()

    def factory() -> _ServiceA:
        raise error

    with pytest.raises(_ConstructionError) as exc_info:
        dry_run(_container(Scoped(factory)))

    assert exc_info.value is error


def test_exercises_each_definition_of_shared_type() -> None:
    def broken() -> _RepoX:
        raise _ConstructionError

    container = _container(
        Scoped(_RepoX, name="first"),
        Scoped(broken, name="second"),
    )
    with container.sync_context() as ctx:
        assert isinstance(ctx.resolve(_RepoX), _RepoX)

    with pytest.raises(_ConstructionError):
        dry_run(container)


def test_constructs_fresh_instances_each_run() -> None:
    container = _container(Singleton(_Counted))

    dry_run(container)
    dry_run(container)

    assert len(_Counted.created) == 2  # noqa: PLR2004
    assert _Counted.created[0] is not _Counted.created[1]


def test_does_not_touch_container_singletons() -> None:
    container = _container(Singleton(_Counted))
    with container.sync_context() as ctx:
        counted = ctx.resolve(_Counted)

    dry_run(container)

    assert container.instances() == [counted]
    with container.sync_context() as ctx:
        assert ctx.resolve(_Counted) is counted


def test_instances_are_shared_within_one_run() -> None:
    container = _container(
        Singleton(_Counted),
        Transient(
            lambda counted: counted,
            type_=_Counted,
            name="alias",
            requires=[_Counted],
        ),
    )

    dry_run(container)

    assert len(_Counted.created) == 1


def test_closes_resources_after_run() -> None:
    state: Literal["open", "closed"] | None = None

    @contextlib.contextmanager
    def session() -> Iterator[_ServiceA]:
        nonlocal state
        state = "open"
        yield _ServiceA()
        state = "closed"

    dry_run(_container(Singleton(session)))

    assert state == "closed"


def test_parameters() -> None:
    container = _container(Scoped(_Client, parameters=["url"]))

    with pytest.raises(ParameterNotFoundError):
        dry_run(container)

    dry_run(container, parameters_of(url="db://"))


def test_cycle_passes_check_but_not_dry_run() -> None:
    container = _container(
        Scoped(_CycleA, requires=[_CycleB]),
        Scoped(_CycleB, requires=[_CycleA]),
    )

    check(container)
    with pytest.raises(RecursionError):
        dry_run(container)


def test_trace(sink: RecordingSink) -> None:
    dry_run(_container(Scoped(_ServiceA), Scoped(_RepoX)), sink=sink)

    assert sink.records == [
        ("info", "(DRY RUN)"),
        ("info", "Testing instance Scoped(path='_ServiceA', type=_ServiceA) ..."),
        ("info", "Testing instance Scoped(path='_RepoX', type=_RepoX) ..."),
    ]


def test_trace_on_failure(sink: RecordingSink) -> None:
    container = _container(Scoped(_ServiceA), Scoped(_ServiceC))

    with pytest.raises(DependencyNotFoundError):
        dry_run(container, sink=sink)

    assert sink.records[-2:] == [
        ("info", "Testing instance Scoped(path='_ServiceC', type=_ServiceC) ..."),
        (
            "error",
            "(!) definition Scoped(path='_ServiceC', type=_ServiceC) is broken (!)",
        ),
    ]


@pytest.mark.anyio
async def test_async_dry_run(sink: RecordingSink) -> None:
    state: Literal["open", "closed"] | None = None

    @contextlib.asynccontextmanager
    async def repo() -> AsyncIterator[_RepoX]:
        nonlocal state
        state = "open"
        yield _RepoX()
        state = "closed"

    container = _container(Singleton(repo), Scoped(_ServiceC))

    await dry_run_async(container, sink=sink)

    assert state == "closed"
    assert container.instances() == []
    assert sink.lines[0] == "(DRY RUN)"


@pytest.mark.anyio
async def test_async_dry_run_propagates() -> None:
    async def repo() -> _RepoX:
        raise _ConstructionError

    container = _container(Scoped(repo), Scoped(_ServiceC))

    with pytest.raises(_ConstructionError):
        await dry_run_async(container)


@pytest.mark.anyio
async def test_async_definitions_fail_sync_dry_run() -> None:
    async def repo() -> _RepoX:
        return _RepoX()

    container = _container(Scoped(repo))

    await dry_run_async(container)
    with pytest.raises(TypeError):
        dry_run(container)
