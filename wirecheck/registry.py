from __future__ import annotations

from collections.abc import Iterator
from inspect import isclass
from typing import Any

from wirecheck.definitions import Definition
from wirecheck.errors import DuplicateDefinitionError


def type_matches(provided: Any, required: Any) -> bool:
    """Whether a definition producing ``provided`` satisfies ``required``."""
    if provided == required:
        return True
    # Protocols without runtime_checkable reject issubclass.
    if required in getattr(provided, "__mro__", ()):
        return True
    if isclass(provided) and isclass(required):
        try:
            return issubclass(provided, required)
        except TypeError:
            return False
    return False


class Registry:
    """Ordered collection of definitions.

    Iteration follows registration order, which keeps lookups and the
    validation passes deterministic.
    """

    def __init__(self) -> None:
        self._definitions: dict[str, Definition[Any]] = {}

    def add(self, definition: Definition[Any]) -> None:
        if definition.path in self._definitions:
            raise DuplicateDefinitionError(definition.path)
        self._definitions[definition.path] = definition

    @property
    def definitions(self) -> tuple[Definition[Any], ...]:
        return tuple(self._definitions.values())

    def all_definitions(self) -> tuple[Definition[Any], ...]:
        return self.definitions

    def find_by_type(self, type_: Any) -> list[Definition[Any]]:
        return [
            definition
            for definition in self._definitions.values()
            if type_matches(definition.type_, type_)
        ]

    def find_by_path(self, path: str) -> Definition[Any] | None:
        return self._definitions.get(path)

    def namespaces(self) -> list[str]:
        return list(
            dict.fromkeys(
                definition.namespace
                for definition in self._definitions.values()
            )
        )

    def __iter__(self) -> Iterator[Definition[Any]]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, path: object) -> bool:
        return path in self._definitions
