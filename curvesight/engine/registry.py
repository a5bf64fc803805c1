"""Stage registry: every cycle stage is a standalone function registered via decorator.

Usage:
    @stage(id="S1.02", layer=Layer.ANALYSIS, dependencies=["S0.01"])
    def path_length(ctx: CycleContext) -> None:
        ctx.path_metrics = PathEvaluator(ctx.config.z_bias_factor).evaluate(ctx.signal)

Adding a stage = creating one module under ``curvesight.engine.stages``.
"""

from __future__ import annotations

import enum
import heapq
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from curvesight.engine.context import CycleContext

logger = logging.getLogger(__name__)


class Layer(enum.IntEnum):
    RECONSTRUCTION = 0
    ANALYSIS = 1
    BELIEF = 2


@dataclass
class StageSpec:
    id: str
    layer: Layer
    fn: Callable[["CycleContext"], None]
    dependencies: list[str] = field(default_factory=list)
    description: str = ""

    @property
    def sort_key(self) -> tuple[int, str]:
        return (int(self.layer), self.id)


class StageRegistry:
    def __init__(self) -> None:
        self._stages: dict[str, StageSpec] = {}

    def register(self, spec: StageSpec) -> None:
        if spec.id in self._stages:
            raise ValueError(f"Duplicate stage ID: {spec.id}")
        self._stages[spec.id] = spec
        logger.debug("Registered stage %s (%s)", spec.id, spec.layer.name)

    def below(self, layer: Layer) -> set[str]:
        """IDs of every stage in a layer earlier than ``layer``."""
        return {sid for sid, spec in self._stages.items() if spec.layer < layer}

    def closure(self, stage_ids: Iterable[str]) -> set[str]:
        """``stage_ids`` plus everything they transitively depend on."""
        stack = list(stage_ids)
        unknown = [sid for sid in stack if sid not in self._stages]
        if unknown:
            raise KeyError(f"Unknown stage(s): {sorted(unknown)}")
        seen: set[str] = set()
        while stack:
            sid = stack.pop()
            # Dependencies outside the registry are ignored, as in a full run
            if sid in seen or sid not in self._stages:
                continue
            seen.add(sid)
            stack.extend(self._stages[sid].dependencies)
        return seen

    def resolve_order(self, requested_ids: Iterable[str] | None = None) -> list[StageSpec]:
        """Dependency order over all stages, or over ``requested_ids`` and their deps.

        Ready stages run lowest (layer, id) first.
        """
        ids = set(self._stages) if requested_ids is None else self.closure(requested_ids)
        pending = {sid: {d for d in self._stages[sid].dependencies if d in ids} for sid in ids}

        ready = [self._stages[sid].sort_key for sid, deps in pending.items() if not deps]
        heapq.heapify(ready)
        ordered: list[StageSpec] = []
        while ready:
            _, sid = heapq.heappop(ready)
            ordered.append(self._stages[sid])
            for other, deps in pending.items():
                if sid in deps:
                    deps.discard(sid)
                    if not deps:
                        heapq.heappush(ready, self._stages[other].sort_key)

        if len(ordered) != len(ids):
            missing = ids - {s.id for s in ordered}
            raise ValueError(f"Circular dependency detected among: {sorted(missing)}")
        return ordered

    @property
    def count(self) -> int:
        return len(self._stages)


# Module-level singleton
_registry = StageRegistry()


def get_registry() -> StageRegistry:
    return _registry


def stage(
    *,
    id: str,
    layer: Layer,
    dependencies: list[str] | None = None,
    description: str = "",
):
    """Decorator to register a stage function."""

    def decorator(fn: Callable[["CycleContext"], None]):
        _registry.register(
            StageSpec(id=id, layer=layer, fn=fn, dependencies=dependencies or [], description=description)
        )
        return fn

    return decorator
