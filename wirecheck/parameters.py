from collections.abc import Callable, Mapping
from typing import Any, TypeAlias


ParameterSource: TypeAlias = Callable[[], Mapping[str, Any]]


def empty_parameters() -> Mapping[str, Any]:
    return {}


def parameters_of(**values: Any) -> ParameterSource:
    """Parameter source returning the given values on every call."""

    def source() -> Mapping[str, Any]:
        return dict(values)

    return source
