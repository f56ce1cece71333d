import logging

from wirecheck.containers import Container
from wirecheck.context import InjectionContext, SyncInjectionContext
from wirecheck.definitions import (
    Definition,
    Dependency,
    Lifetime,
    Object,
    Scoped,
    Singleton,
    Transient,
)
from wirecheck.parameters import ParameterSource, parameters_of
from wirecheck.registry import Registry


logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Container",
    "Definition",
    "Dependency",
    "InjectionContext",
    "Lifetime",
    "Object",
    "ParameterSource",
    "Registry",
    "Scoped",
    "Singleton",
    "SyncInjectionContext",
    "Transient",
    "parameters_of",
]

__version__ = "0.1.0"
