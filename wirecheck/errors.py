from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from wirecheck.definitions import Definition


class DuplicateDefinitionError(ValueError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Definition with path {path!r} already registered")
        self.path = path


class DependencyNotFoundError(ValueError):
    def __init__(self, type_: Any, path: str | None = None) -> None:
        name = getattr(type_, "__qualname__", repr(type_))
        msg = f"Definition for type {name} not found"
        if path is not None:
            msg = f"{msg} at path {path!r}"
        super().__init__(msg)
        self.type_ = type_
        self.path = path


class ParameterNotFoundError(LookupError):
    def __init__(self, name: str, definition: Definition[Any]) -> None:
        super().__init__(
            f"Parameter {name!r} required by {definition!r} was not supplied"
        )
        self.name = name
        self.definition = definition


class InstanceTypeError(TypeError):
    def __init__(
        self,
        definition: Definition[Any],
        expected: type[Any],
        instance: object,
    ) -> None:
        super().__init__(
            f"{definition!r} produced {type(instance).__qualname__}, "
            f"expected {expected.__qualname__}"
        )
        self.definition = definition
        self.expected = expected
        self.instance = instance


class AsyncDefinitionError(TypeError):
    def __init__(self, definition: Definition[Any]) -> None:
        super().__init__(
            f"{definition!r} is async and can't be resolved in a sync context"
        )
        self.definition = definition
