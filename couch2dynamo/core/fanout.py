"""Concurrent fan-out over keyed awaitables.

Every job is scheduled as its own asyncio.Task up front. An optional
Semaphore bounds how many are in flight at once. Failures are logged the
moment a task finishes with an exception, but siblings are never cancelled:
the call returns only once every task has settled.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Generic, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class FanOutResult(Generic[T]):
    """Outcome of a fan-out, keyed in submission order."""
    results: dict[str, T] = field(default_factory=dict)
    failures: dict[str, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def first_failure(self) -> Optional[tuple[str, BaseException]]:
        for key, exc in self.failures.items():
            return key, exc
        return None


async def gather_all(
    jobs: Iterable[tuple[str, Awaitable[T]]],
    *,
    max_concurrency: Optional[int] = None,
    label: str = "task",
) -> FanOutResult[T]:
    """
    Run all jobs concurrently and wait for every one of them.

    Args:
        jobs: (key, awaitable) pairs. Keys must be unique.
        max_concurrency: Upper bound on jobs awaiting at the same time
            (None = unbounded).
        label: Prefix for task names and log lines.

    Returns:
        FanOutResult with successful results and failures, both keyed in
        submission order.
    """
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
    detected = 0

    async def run_one(awaitable: Awaitable[T]) -> T:
        if semaphore is None:
            return await awaitable
        async with semaphore:
            return await awaitable

    def on_done(key: str, task: asyncio.Task):
        nonlocal detected
        if task.cancelled():
            logger.warning(f"{label} '{key}' was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            detected += 1
            if detected == 1:
                logger.error(f"{label} '{key}' failed: {exc}")
            else:
                logger.warning(f"{label} '{key}' also failed: {exc}")

    jobs = list(jobs)
    keys = [key for key, _ in jobs]
    if len(set(keys)) != len(keys):
        raise ValueError(f"Duplicate {label} keys in fan-out")

    tasks: dict[str, asyncio.Task] = {}
    for key, awaitable in jobs:
        task = asyncio.create_task(run_one(awaitable), name=f"{label}-{key}")
        task.add_done_callback(lambda t, k=key: on_done(k, t))
        tasks[key] = task

    outcome: FanOutResult[Any] = FanOutResult()
    if not tasks:
        return outcome

    await asyncio.wait(tasks.values())

    for key, task in tasks.items():
        if task.cancelled():
            outcome.failures[key] = asyncio.CancelledError(f"{label} '{key}' was cancelled")
        elif task.exception() is not None:
            outcome.failures[key] = task.exception()
        else:
            outcome.results[key] = task.result()

    return outcome
