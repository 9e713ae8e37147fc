"""Tests for the concurrent fan-out helper."""

import asyncio
import logging

import pytest

from couch2dynamo.core.fanout import gather_all


async def _value(v, delay=0.0):
    await asyncio.sleep(delay)
    return v


async def _fail(message, delay=0.0):
    await asyncio.sleep(delay)
    raise RuntimeError(message)


class TestGatherAll:
    async def test_results_in_submission_order(self):
        outcome = await gather_all([("a", _value(1, 0.02)), ("b", _value(2)), ("c", _value(3, 0.01))])
        assert outcome.ok
        assert list(outcome.results) == ["a", "b", "c"]
        assert outcome.results == {"a": 1, "b": 2, "c": 3}

    async def test_empty(self):
        outcome = await gather_all([])
        assert outcome.ok
        assert outcome.results == {}
        assert outcome.first_failure() is None

    async def test_failures_collected_siblings_complete(self):
        finished = []

        async def slow():
            await asyncio.sleep(0.05)
            finished.append("slow")
            return "done"

        outcome = await gather_all([("bad", _fail("boom")), ("slow", slow())])
        assert not outcome.ok
        assert finished == ["slow"]
        assert outcome.results == {"slow": "done"}
        key, exc = outcome.first_failure()
        assert key == "bad"
        assert isinstance(exc, RuntimeError)

    async def test_concurrency_is_bounded(self):
        in_flight = 0
        peak = 0

        async def tracked(i):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return i

        outcome = await gather_all(((str(i), tracked(i)) for i in range(10)), max_concurrency=3)
        assert len(outcome.results) == 10
        assert peak == 3

    async def test_failure_logged_when_detected(self, caplog):
        with caplog.at_level(logging.ERROR, logger="couch2dynamo.core.fanout"):
            await gather_all([("x", _fail("kaput"))], label="fetch")
        assert "fetch 'x' failed: kaput" in caplog.text

    async def test_duplicate_keys_rejected(self):
        first, second = _value(1), _value(2)
        with pytest.raises(ValueError, match="Duplicate"):
            await gather_all([("k", first), ("k", second)])
        first.close()
        second.close()
