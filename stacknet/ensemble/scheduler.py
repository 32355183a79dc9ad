"""
ParallelFitScheduler - run the models of one layer on a thread pool.

Training and inference share the same primitive: submit up to ``pool_size``
tasks in spec order, wait for the whole batch, harvest the results in
submission order, then move to the next batch. Each result is tied to its
spec position, so column placement never depends on completion order.

scikit-learn, XGBoost and LightGBM release the GIL in their native fitting
and scoring loops, which makes threads effective here.
"""
from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from ..exceptions import TrainingAbortedError

logger = logging.getLogger(__name__)


def resolve_threads(threads: int) -> int:
    """Thread count: values <= 0 mean one thread per available CPU."""
    if threads <= 0:
        return max(1, os.cpu_count() or 1)
    return int(threads)


@dataclass(frozen=True)
class ModelTask:
    """
    One unit of work for the scheduler.

    Attributes:
        index: Position of the model in its layer spec
        spec: Model specification string, used in error messages
        run: Zero-argument callable doing the work
    """
    index: int
    spec: str
    run: Callable[[], Any]


class ParallelFitScheduler:
    """
    Fixed-size pool runner for the tasks of one layer step.

    Args:
        threads: Thread count (<= 0 means CPU count)
        level: 1-based layer number, reported in failures
        stage: Short description of the work ("fold 2/5", "final refit"...)
    """

    def __init__(self, threads: int, level: Optional[int] = None, stage: str = "") -> None:
        self._threads = resolve_threads(threads)
        self._level = level
        self._stage = stage

    @property
    def threads(self) -> int:
        return self._threads

    def pool_size(self, n_tasks: int) -> int:
        return max(1, min(self._threads, n_tasks))

    def run(self, tasks: Sequence[ModelTask]) -> List[Any]:
        """
        Execute all tasks and return their results in task order.

        Raises:
            TrainingAbortedError: If any task raises; the original exception is chained
        """
        if not tasks:
            return []

        pool_size = self.pool_size(len(tasks))
        if pool_size == 1:
            return [self._harvest(task, None) for task in tasks]

        results: List[Any] = []
        with ThreadPoolExecutor(max_workers=pool_size) as executor:
            for start in range(0, len(tasks), pool_size):
                batch = tasks[start:start + pool_size]
                futures = [executor.submit(task.run) for task in batch]
                wait(futures)
                for task, future in zip(batch, futures):
                    results.append(self._harvest(task, future))
        return results

    def _harvest(self, task: ModelTask, future: Any) -> Any:
        try:
            return task.run() if future is None else future.result()
        except Exception as e:
            where = f"layer {self._level}" if self._level is not None else "ensemble"
            stage = f" ({self._stage})" if self._stage else ""
            logger.error(
                f"Model {task.index} '{task.spec}' failed in {where}{stage}: {e}"
            )
            raise TrainingAbortedError(
                f"Model {task.index} '{task.spec}' failed in {where}{stage}: "
                f"{type(e).__name__}: {e}",
                level=self._level,
                model_index=task.index,
                spec=task.spec,
            ) from e


__all__ = [
    "ModelTask",
    "ParallelFitScheduler",
    "resolve_threads",
]
