"""
Composite job: one job made of several child jobs.

Each child keeps its own job_run record. The composite forwards every
progress increment a child reports, scaled by the child's chunk of work
percentage, to its own record, so the composite reaches 100 when all
children do.
"""

import asyncio
import logging
import math
from collections.abc import Sequence
from typing import Any

from jobtrack.core.jobs.base import Job
from jobtrack.core.jobs.exceptions import InvalidArgumentError
from jobtrack.core.jobs.runner import JobRunner, validate_chunk_of_work_percentage

logger = logging.getLogger(__name__)

# Slack for float rounding when summing child weights
WEIGHT_TOLERANCE = 1e-9


class CompositeJob(Job):
    """
    Run child jobs in series or concurrently as a single job.

    Usage:
        job = CompositeJob(
            JobRunner(store, "nightly"),
            [ImportJob(JobRunner(store, "import")), ReindexJob(JobRunner(store, "reindex"))],
            weights=[0.75, 0.25],
        )
        results = await execute(job)

    Args:
        runner: Runner of the composite itself.
        children: Jobs to run, in order.
        weights: Chunk of work percentage per child, adding up to at most 1.
            By default children keep a weight already set on their runner
            and the others split the remaining share equally.
        parallel: Run children concurrently instead of one after another.
    """

    def __init__(
        self,
        runner: JobRunner,
        children: Sequence[Job],
        *,
        weights: Sequence[float] | None = None,
        parallel: bool = False,
    ) -> None:
        super().__init__(runner)
        self.children = list(children)
        self.parallel = parallel

        if weights is None:
            weights = self._default_weights()
        if len(weights) != len(self.children):
            raise InvalidArgumentError(
                f"Expected {len(self.children)} weights, got {len(weights)}"
            )

        weights = [validate_chunk_of_work_percentage(weight) for weight in weights]
        if math.fsum(weights) > 1 + WEIGHT_TOLERANCE:
            raise InvalidArgumentError(
                f"Child weights must add up to at most 1, got: {math.fsum(weights)}"
            )
        for child, weight in zip(self.children, weights):
            child.runner.set_chunk_of_work_percentage(weight)

    def _default_weights(self) -> list[float]:
        """Keep weights set on child runners and split the rest equally."""
        assigned = math.fsum(
            child.runner.get_chunk_of_work_percentage()
            for child in self.children
            if child.runner.chunk_of_work_explicit
        )
        unassigned = [child for child in self.children if not child.runner.chunk_of_work_explicit]
        if not unassigned:
            return [child.runner.get_chunk_of_work_percentage() for child in self.children]

        share = (1 - assigned) / len(unassigned)
        if share <= 0:
            raise InvalidArgumentError(
                f"Child weights already add up to {assigned}, "
                f"nothing left for {len(unassigned)} children"
            )
        return [
            child.runner.get_chunk_of_work_percentage()
            if child.runner.chunk_of_work_explicit
            else share
            for child in self.children
        ]

    def _forward_progress(self, child: Job) -> None:
        weight = child.runner.get_chunk_of_work_percentage()
        child.runner.add_progress_listener(
            lambda increment: self.on_update(increment * weight)
        )

    async def run(self) -> list[Any]:
        self.on_start()
        self.log("Running %d child jobs (parallel=%s)", len(self.children), self.parallel)
        for child in self.children:
            self._forward_progress(child)

        try:
            if self.parallel:
                results = await self._run_parallel()
            else:
                results = await self._run_series()
        except Exception as e:
            self.on_completed(error=e)
            raise

        self.on_completed()
        return results

    async def _run_series(self) -> list[Any]:
        results = []
        for child in self.children:
            self.log("Starting child job %s", child.id)
            results.append(await child.run())
        return results

    async def _run_parallel(self) -> list[Any]:
        outcomes = await asyncio.gather(
            *(child.run() for child in self.children), return_exceptions=True
        )
        for child, outcome in zip(self.children, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Child job {child.name} ({child.id}) failed: {outcome}")
                raise outcome
        return list(outcomes)
