import asyncio

import pytest
from splay_bridge.runtime.streams import debounce_stream, merge_streams, throttle_stream


async def timed(events, *, end_delay=0.0, state=None):
    """Yield values at the given offsets (seconds from start)."""
    loop = asyncio.get_running_loop()
    start = loop.time()
    try:
        for at, value in events:
            delay = start + at - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            yield value
        if end_delay:
            await asyncio.sleep(end_delay)
    finally:
        if state is not None:
            state["closed"] = True


async def collect(stream):
    loop = asyncio.get_running_loop()
    start = loop.time()
    out = []
    async for value in stream:
        out.append((loop.time() - start, value))
    return out


@pytest.mark.asyncio
async def test_throttle_trailing_edge_flushes_latest_on_completion():
    events = [(0.00, "t0"), (0.01, "t10"), (0.02, "t20"), (0.03, "t30")]
    out = await collect(throttle_stream(timed(events), 50))
    assert [v for _, v in out] == ["t30"]
    assert out[0][0] >= 0.045


@pytest.mark.asyncio
async def test_throttle_keeps_minimum_gap_between_emissions():
    events = [(i * 0.01, i) for i in range(12)]
    out = await collect(throttle_stream(timed(events), 40))
    times = [t for t, _ in out]
    assert len(out) >= 2
    assert all(b - a >= 0.035 for a, b in zip(times, times[1:]))
    assert out[-1][1] == 11


@pytest.mark.asyncio
async def test_debounce_emits_after_silence():
    events = [(0.00, "t0"), (0.01, "t10"), (0.02, "t20")]
    out = await collect(debounce_stream(timed(events), 50))
    assert [v for _, v in out] == ["t20"]
    assert out[0][0] >= 0.065


@pytest.mark.asyncio
async def test_debounce_emits_each_quiet_burst():
    events = [(0.00, "a1"), (0.01, "a2"), (0.10, "b1"), (0.11, "b2")]
    out = await collect(debounce_stream(timed(events, end_delay=0.1), 30))
    assert [v for _, v in out] == ["a2", "b2"]


@pytest.mark.asyncio
async def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        throttle_stream(timed([]), -1)
    with pytest.raises(ValueError):
        debounce_stream(timed([]), -1)


@pytest.mark.asyncio
async def test_merge_interleaves_by_arrival():
    slow = timed([(0.00, 1), (0.05, 2)])
    fast = timed([(0.01, 9)])
    values = [v for _, v in await collect(merge_streams(slow, fast))]
    assert values == [1, 9, 2]


@pytest.mark.asyncio
async def test_merge_preserves_per_source_order():
    a = timed([(0.00, "a1"), (0.01, "a2"), (0.02, "a3")])
    b = timed([(0.005, "b1"), (0.015, "b2")])
    values = [v for _, v in await collect(merge_streams(a, b))]
    assert [v for v in values if v.startswith("a")] == ["a1", "a2", "a3"]
    assert [v for v in values if v.startswith("b")] == ["b1", "b2"]
    assert len(values) == 5


@pytest.mark.asyncio
async def test_merge_of_nothing_completes():
    assert [x async for x in merge_streams()] == []


@pytest.mark.asyncio
async def test_merge_failure_releases_other_sources():
    other = {}

    async def failing():
        await asyncio.sleep(0.01)
        raise RuntimeError("source failed")
        yield  # pragma: no cover

    merged = merge_streams(timed([(0.0, 1), (1.0, 2)], state=other), failing())
    got = []
    with pytest.raises(RuntimeError, match="source failed"):
        async for value in merged:
            got.append(value)
    assert got == [1]
    assert other.get("closed") is True


@pytest.mark.asyncio
async def test_abandoning_merge_releases_sources():
    a_state, b_state = {}, {}
    merged = merge_streams(timed([(0.0, "a"), (1.0, "a2")], state=a_state), timed([(1.0, "b")], state=b_state))
    assert await merged.__anext__() == "a"
    await merged.aclose()
    assert a_state.get("closed") is True
    assert b_state.get("closed") is True


@pytest.mark.asyncio
async def test_abandoning_throttle_releases_upstream_and_timer():
    state = {}
    events = [(i * 0.01, i) for i in range(100)]
    throttled = throttle_stream(timed(events, state=state), 20)
    first = await throttled.__anext__()
    assert isinstance(first, int)
    await throttled.aclose()
    assert state.get("closed") is True
    # no pending read survives the close
    await asyncio.sleep(0.05)
    pending_reads = [t for t in asyncio.all_tasks() if getattr(t.get_coro(), "__name__", "") == "_next" and not t.done()]
    assert pending_reads == []


@pytest.mark.asyncio
async def test_upstream_error_propagates_through_debounce():
    async def failing():
        yield 1
        raise RuntimeError("bad upstream")

    with pytest.raises(RuntimeError, match="bad upstream"):
        async for _ in debounce_stream(failing(), 10):
            pass


@pytest.mark.asyncio
async def test_combinators_are_lazy():
    started = []

    async def source():
        started.append(True)
        yield 1

    stream = throttle_stream(source(), 10)
    await asyncio.sleep(0.01)
    assert started == []
    assert [x async for x in stream] == [1]
    assert started == [True]
