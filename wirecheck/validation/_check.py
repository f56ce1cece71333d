import logging
from typing import Any

from wirecheck.containers import Container
from wirecheck.definitions import Definition
from wirecheck.registry import Registry
from wirecheck.validation.abc import DiagnosticsSink
from wirecheck.validation.error import BrokenDefinitionError


logger = logging.getLogger(__name__)


def check(
    source: Container | Registry,
    sink: DiagnosticsSink | None = None,
) -> None:
    """Check that every definition's dependencies are registered.

    Nothing is instantiated. Raises ``BrokenDefinitionError`` for the first
    unmet dependency in registration order.
    """
    sink = logger if sink is None else sink
    registry = source.registry if isinstance(source, Container) else source

    sink.info("(CHECK)")
    for definition in registry.all_definitions():
        check_definition(definition, registry, sink)


def check_definition(
    definition: Definition[Any],
    registry: Registry,
    sink: DiagnosticsSink | None = None,
) -> None:
    sink = logger if sink is None else sink

    sink.info("Checking definition: %r ...", definition)
    if definition.dependencies is None:
        sink.info("- no constructor")
        return

    dependency_types = definition.constructor_parameter_types()
    if not dependency_types:
        sink.info("- no needed dependency")
        return

    sink.info("- checking %d dependencies ...", len(dependency_types))
    for dependency_type in dependency_types:
        sink.info("- checking dependency type %r ...", dependency_type)
        if not registry.find_by_type(dependency_type):
            sink.error("(!) definition %r is broken (!)", definition)
            raise BrokenDefinitionError(
                definition=definition,
                dependency=dependency_type,
            )
    sink.info("- definition is ok!")
