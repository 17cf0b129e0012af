"""Combinators over async descriptor streams.

All combinators are async generator functions: nothing runs until the first
item is requested, and closing the returned generator cancels in-flight reads
and closes every upstream iterator it opened.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, List, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

_MISSING = object()


async def _next(it: AsyncIterator[T]) -> T:
    return await it.__anext__()


def _failed(task: "asyncio.Task[Any]") -> bool:
    if task.cancelled():
        return False
    exc = task.exception()
    return exc is not None and not isinstance(exc, StopAsyncIteration)


async def _release(tasks: List["asyncio.Task[Any]"], iterators: List[AsyncIterator[Any]]) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()
    # cancelled reads must settle before aclose(), an async generator cannot be closed mid-step
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
    for it in iterators:
        aclose = getattr(it, "aclose", None)
        if aclose is not None:
            await aclose()


async def merge_streams(*streams: AsyncIterable[T]) -> AsyncIterator[T]:
    iterators = [s.__aiter__() for s in streams]
    reads: Dict["asyncio.Task[T]", int] = {}
    try:
        for idx, it in enumerate(iterators):
            reads[asyncio.ensure_future(_next(it))] = idx
        while reads:
            done, _ = await asyncio.wait(reads.keys(), return_when=asyncio.FIRST_COMPLETED)
            # failures first, then source order when several reads finish together
            for task in sorted(done, key=lambda t: (not _failed(t), reads[t])):
                idx = reads.pop(task)
                try:
                    value = task.result()
                except StopAsyncIteration:
                    logger.debug("merge: source %d completed, %d still active", idx, len(reads))
                    continue
                reads[asyncio.ensure_future(_next(iterators[idx]))] = idx
                yield value
    finally:
        await _release(list(reads.keys()), iterators)


def _check_interval(interval_ms: float) -> None:
    if interval_ms < 0:
        raise ValueError(f"interval_ms must be >= 0, got {interval_ms}")


async def _coalesce(stream: AsyncIterable[T], interval_ms: float, *, restart_on_arrival: bool) -> AsyncIterator[T]:
    interval = interval_ms / 1000.0
    loop = asyncio.get_running_loop()
    it = stream.__aiter__()
    read = asyncio.ensure_future(_next(it))
    pending: Any = _MISSING
    deadline = None
    try:
        while True:
            if deadline is not None and loop.time() >= deadline:
                value, pending, deadline = pending, _MISSING, None
                yield value
                continue

            timeout = None if deadline is None else deadline - loop.time()
            done, _ = await asyncio.wait({read}, timeout=timeout)
            if not done:
                continue
            try:
                pending = read.result()
            except StopAsyncIteration:
                break
            if deadline is None or restart_on_arrival:
                deadline = loop.time() + interval
            read = asyncio.ensure_future(_next(it))

        # upstream finished: the last pending value still waits out its window
        if pending is not _MISSING:
            remaining = deadline - loop.time()
            if remaining > 0:
                await asyncio.sleep(remaining)
            yield pending
    finally:
        await _release([read], [it])


def throttle_stream(stream: AsyncIterable[T], interval_ms: float) -> AsyncIterator[T]:
    """Trailing-edge throttle: at most one emission per ``interval_ms``, always the latest value."""
    _check_interval(interval_ms)
    return _coalesce(stream, interval_ms, restart_on_arrival=False)


def debounce_stream(stream: AsyncIterable[T], interval_ms: float) -> AsyncIterator[T]:
    """Emit a value once ``interval_ms`` has passed without a newer one."""
    _check_interval(interval_ms)
    return _coalesce(stream, interval_ms, restart_on_arrival=True)
