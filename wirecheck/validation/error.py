import dataclasses
from typing import Any

from wirecheck.definitions import Definition


@dataclasses.dataclass(eq=False)
class BrokenDefinitionError(Exception):
    definition: Definition[Any]
    dependency: Any

    def __str__(self) -> str:
        name = getattr(self.dependency, "__qualname__", repr(self.dependency))
        return (
            f"Could not retrieve dependency of type '{name}' "
            f"for definition {self.definition!r}"
        )
