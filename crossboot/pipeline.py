"""Declared steps and the order they run in.

A Pipeline is an ordered collection of named steps, each listing the steps
it requires. Execution order is a topological sort of those edges with
declaration order as the tie-break, so a pipeline declared in a valid
order runs exactly in that order, and an edge that contradicts the
declaration is honoured rather than silently ignored.

    pipe = Pipeline()

    @pipe.step("fetch-gcc")
    def fetch_gcc(ctx): ...

    @pipe.step("gcc", requires=["fetch-gcc"])
    def gcc(ctx): ...

    pipe.run_all(StepRunner(MarkerStore("markers")))

Steps always run one at a time; the first failure stops the pipeline.
"""

from __future__ import annotations

import heapq
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Iterator

from crossboot.errors import PipelineError
from crossboot.markers import valid_step_name

if TYPE_CHECKING:
    from crossboot.runner import StepContext, StepRunner, StepStatus

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Step:
    """A named unit of work.

    ``body`` is called with a StepContext. Returning None, True or 0 (or
    finishing a CompletedProcess with status 0) means success; raising or
    returning anything else means failure.
    """

    name: str
    body: Callable[[StepContext], object]
    requires: tuple[str, ...] = ()
    description: str = ""


class Pipeline:
    """Ordered set of steps with explicit dependencies."""

    def __init__(self, steps: Iterable[Step] = ()):
        self._steps: dict[str, Step] = {}
        for s in steps:
            self.add(s)

    def add(self, step: Step) -> Step:
        if not step.name:
            raise PipelineError("step name must not be empty")
        if not valid_step_name(step.name):
            raise PipelineError(
                f"invalid step name {step.name!r}: must not contain '/' or start with '.'"
            )
        if step.name in self._steps:
            raise PipelineError(f"duplicate step name: {step.name!r}")
        self._steps[step.name] = step
        return step

    def step(self, name: str, *, requires: Iterable[str] = (),
             description: str = "") -> Callable:
        """Decorator form of add()."""
        def register(fn: Callable[[StepContext], object]):
            self.add(Step(name, fn, tuple(requires), description or (fn.__doc__ or "").strip()))
            return fn
        return register

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps.values())

    def __len__(self) -> int:
        return len(self._steps)

    def __contains__(self, name: str) -> bool:
        return name in self._steps

    def __getitem__(self, name: str) -> Step:
        try:
            return self._steps[name]
        except KeyError:
            raise PipelineError(f"no such step: {name!r}") from None

    @property
    def names(self) -> list[str]:
        return list(self._steps)

    # --- Ordering ---

    def order(self) -> list[Step]:
        """Steps in execution order.

        Raises PipelineError for requirements on unknown steps and for
        dependency cycles.
        """
        position = {name: i for i, name in enumerate(self._steps)}
        children: dict[str, list[str]] = defaultdict(list)
        pending: dict[str, int] = {}

        for s in self._steps.values():
            reqs = set(s.requires)
            for r in reqs:
                if r not in self._steps:
                    raise PipelineError(f"step {s.name!r} requires unknown step {r!r}")
                children[r].append(s.name)
            pending[s.name] = len(reqs)

        ready = [(position[n], n) for n, count in pending.items() if count == 0]
        heapq.heapify(ready)
        ordered: list[Step] = []
        while ready:
            _, name = heapq.heappop(ready)
            ordered.append(self._steps[name])
            for child in children[name]:
                pending[child] -= 1
                if pending[child] == 0:
                    heapq.heappush(ready, (position[child], child))

        if len(ordered) != len(self._steps):
            stuck = sorted((n for n, c in pending.items() if c > 0), key=position.get)
            raise PipelineError(f"dependency cycle among steps: {', '.join(stuck)}")
        return ordered

    def dependents(self, name: str) -> list[str]:
        """Every step that directly or transitively requires name, in execution order."""
        if name not in self._steps:
            raise PipelineError(f"no such step: {name!r}")
        affected = {name}
        result = []
        for s in self.order():
            if s.name != name and affected.intersection(s.requires):
                affected.add(s.name)
                result.append(s.name)
        return result

    # --- Execution ---

    def run_all(self, runner: StepRunner) -> dict[str, StepStatus]:
        """Run every step in order. The first StepFailure propagates."""
        ordered = self.order()
        total = len(ordered)
        results = {}
        for i, s in enumerate(ordered, 1):
            results[s.name] = runner.run(s, index=i, total=total)
        log.info("all %d steps complete", total)
        return results
