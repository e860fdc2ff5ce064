"""Ordered fan-out/fan-in of independent per-chunk coroutines."""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar, Union

from studydeck.errors import GenerationCancelled, GenerationFailure

T = TypeVar("T")

CoroutineFactory = Callable[[], Awaitable[T]]


def _spawn(factories: Sequence[CoroutineFactory[T]], max_concurrency: int) -> List["asyncio.Future[T]"]:
    semaphore = asyncio.Semaphore(max(max_concurrency, 1))

    async def _run(factory: CoroutineFactory[T]) -> T:
        async with semaphore:
            return await factory()

    return [asyncio.ensure_future(_run(factory)) for factory in factories]


async def run_with_timeout(awaitable: Awaitable[T], timeout: Optional[float]) -> T:
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as error:
        raise GenerationCancelled(f"Generation did not finish within {timeout} seconds") from error


async def gather_ordered(
    factories: Sequence[CoroutineFactory[T]],
    *,
    max_concurrency: int = 4,
    timeout: Optional[float] = None,
) -> List[T]:
    """Run ``factories`` concurrently and return results in input order.

    The first failure cancels every task still pending and is re-raised; a
    ``timeout`` expiring raises :class:`GenerationCancelled`.
    """

    if not factories:
        return []

    tasks = _spawn(factories, max_concurrency)
    try:
        results = await run_with_timeout(asyncio.gather(*tasks), timeout)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
    return list(results)


async def gather_settled(
    factories: Sequence[CoroutineFactory[T]],
    *,
    max_concurrency: int = 4,
    timeout: Optional[float] = None,
) -> List[Union[T, GenerationFailure]]:
    """Like :func:`gather_ordered` but keeps going past classified failures.

    Each slot holds either the result or the :class:`GenerationFailure` raised
    for that position. Unclassified exceptions still propagate.
    """

    if not factories:
        return []

    tasks = _spawn(factories, max_concurrency)
    try:
        outcomes = await run_with_timeout(asyncio.gather(*tasks, return_exceptions=True), timeout)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()

    for outcome in outcomes:
        if isinstance(outcome, BaseException) and not isinstance(outcome, GenerationFailure):
            raise outcome
    return list(outcomes)


__all__ = ["gather_ordered", "gather_settled", "run_with_timeout"]
