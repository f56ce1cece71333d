import logging
from typing import Any

from wirecheck.containers import Container
from wirecheck.context import Candidates
from wirecheck.definitions import Definition
from wirecheck.parameters import ParameterSource, empty_parameters
from wirecheck.validation.abc import DiagnosticsSink


logger = logging.getLogger(__name__)


def _only(definition: Definition[Any]) -> Candidates:
    return lambda: [definition]


def dry_run(
    container: Container,
    parameters: ParameterSource = empty_parameters,
    sink: DiagnosticsSink | None = None,
) -> None:
    """Resolve every definition through a throwaway sync context.

    Instances are discarded when the pass ends and container singletons are
    left untouched. The first resolution error is re-raised as is.
    """
    sink = logger if sink is None else sink

    sink.info("(DRY RUN)")
    with container.sync_context(isolated=True) as ctx:
        for definition in container.definitions:
            sink.info("Testing instance %r ...", definition)
            try:
                ctx.resolve(
                    definition.type_,
                    path=definition.path,
                    parameters=parameters,
                    candidates=_only(definition),
                )
            except Exception:
                sink.error("(!) definition %r is broken (!)", definition)
                raise


async def dry_run_async(
    container: Container,
    parameters: ParameterSource = empty_parameters,
    sink: DiagnosticsSink | None = None,
) -> None:
    sink = logger if sink is None else sink

    sink.info("(DRY RUN)")
    async with container.context(isolated=True) as ctx:
        for definition in container.definitions:
            sink.info("Testing instance %r ...", definition)
            try:
                await ctx.resolve(
                    definition.type_,
                    path=definition.path,
                    parameters=parameters,
                    candidates=_only(definition),
                )
            except Exception:
                sink.error("(!) definition %r is broken (!)", definition)
                raise
