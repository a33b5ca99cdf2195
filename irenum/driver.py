"""Orchestrator — drives the guide, the builder and the emitter."""

from __future__ import annotations

import json
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterator

from .catalog import Catalog, default_catalog
from .generator import ParameterPlacement, ProgramGenerator
from .guide import ReplayChooser, make_guide
from .ir import IRContext, ModuleOp, module_to_dict
from .ir_stats import count_arguments, count_operations
from .verify import check_module
from . import constants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnumerationConfig:
    """Groups enumeration configuration."""

    max_operations: int = constants.DEFAULT_MAX_OPERATIONS
    policy: str = constants.GUIDE_BFS
    seed: int = constants.DEFAULT_SEED
    placement: ParameterPlacement = ParameterPlacement.ANY_POSITION
    limit: int | None = None
    verify: bool = False


@dataclass(frozen=True)
class EnumeratedProgram:
    """One emitted program together with the decisions that produced it."""

    index: int
    decisions: tuple[int, ...]
    module: ModuleOp


@dataclass
class EnumerationStats:
    """Totals over an enumeration run."""

    programs: int = 0
    operations: int = 0
    arguments: int = 0
    longest_decision_sequence: int = 0
    operation_counts: Counter = field(default_factory=Counter)
    elapsed: float = 0.0

    def add(self, program: EnumeratedProgram) -> None:
        counts = count_operations(program.module)
        self.programs += 1
        self.operations += sum(counts.values())
        self.arguments += count_arguments(program.module)
        self.longest_decision_sequence = max(
            self.longest_decision_sequence, len(program.decisions)
        )
        self.operation_counts.update(counts)

    def report(self) -> str:
        lines = [
            "═══ Enumeration Statistics ═══",
            f"  Programs:            {self.programs}",
            f"  Operations:          {self.operations}",
            f"  Arguments:           {self.arguments}",
            f"  Longest decisions:   {self.longest_decision_sequence}",
            f"  Time:                {self.elapsed * 1000:.1f}ms",
        ]
        for name, count in sorted(self.operation_counts.items()):
            lines.append(f"    {name:<20} {count}")
        return "\n".join(lines)


def enumerate_programs(
    ctx: IRContext,
    config: EnumerationConfig = EnumerationConfig(),
    catalog: Catalog | None = None,
) -> Iterator[EnumeratedProgram]:
    """Yield one program per chooser until the guide is exhausted.

    With ``config.verify`` each program is checked before it is yielded, so
    a malformed program is never emitted.
    """
    catalog = catalog if catalog is not None else default_catalog()
    types = catalog.resolve(ctx)
    guide = make_guide(config.policy, seed=config.seed, max_runs=config.limit)
    logger.info(
        "Enumerating with %s guide (max_operations=%d, placement=%s)",
        config.policy,
        config.max_operations,
        config.placement.value,
    )
    for index, chooser in enumerate(guide):
        if config.limit is not None and index >= config.limit:
            logger.info("Stopping at limit of %d programs", config.limit)
            return
        generator = ProgramGenerator(ctx, chooser, catalog, config.placement, types)
        module = generator.create_program(config.max_operations)
        if config.verify:
            check_module(module, config.max_operations, catalog)
        yield EnumeratedProgram(
            index=index, decisions=chooser.decisions, module=module
        )


def run_enumeration(
    config: EnumerationConfig = EnumerationConfig(),
    catalog: Catalog | None = None,
    emit: Callable[[EnumeratedProgram], None] | None = None,
) -> EnumerationStats:
    """Run a whole enumeration inside a fresh context and return its totals."""
    stats = EnumerationStats()
    start = time.perf_counter()
    with IRContext() as ctx:
        for program in enumerate_programs(ctx, config, catalog):
            if emit is not None:
                emit(program)
            stats.add(program)
    stats.elapsed = time.perf_counter() - start
    logger.info(
        "Enumeration finished: %d programs in %.1fms",
        stats.programs,
        stats.elapsed * 1000,
    )
    return stats


def replay_program(
    decisions: list[int] | tuple[int, ...],
    config: EnumerationConfig = EnumerationConfig(),
    catalog: Catalog | None = None,
    ctx: IRContext | None = None,
) -> ModuleOp:
    """Rebuild the program a recorded decision sequence describes.

    Without ``ctx`` the program is built in a private context that is closed
    before returning.
    """
    if ctx is None:
        with IRContext() as owned:
            return replay_program(decisions, config, catalog, owned)
    catalog = catalog if catalog is not None else default_catalog()
    generator = ProgramGenerator(
        ctx, ReplayChooser(decisions), catalog, config.placement
    )
    module = generator.create_program(config.max_operations)
    if config.verify:
        check_module(module, config.max_operations, catalog)
    return module


def format_program(
    program: EnumeratedProgram,
    output_format: str = constants.FORMAT_TEXT,
    show_decisions: bool = False,
) -> str:
    if output_format == constants.FORMAT_JSON:
        payload = {
            "index": program.index,
            "decisions": list(program.decisions),
            **module_to_dict(program.module),
        }
        return json.dumps(payload)
    if output_format != constants.FORMAT_TEXT:
        raise ValueError(f"Unknown output format: {output_format}")
    text = str(program.module)
    if show_decisions:
        decisions = ",".join(str(d) for d in program.decisions)
        text = f"// program {program.index}, decisions: {decisions}\n{text}"
    return text
