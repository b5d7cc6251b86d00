from __future__ import annotations

import asyncio

import pytest

from curation.listing.debounce import Debouncer, LiveQuery, RequestTokens


def test_request_tokens_only_latest_is_current():
    tokens = RequestTokens()
    first = tokens.issue()
    second = tokens.issue()
    assert not tokens.is_current(first)
    assert tokens.is_current(second)
    assert tokens.latest == second


@pytest.mark.asyncio
async def test_only_last_trigger_fires():
    calls = []
    debouncer = Debouncer(calls.append, delay=0.05)
    for text in ("a", "ad", "ado"):
        debouncer.trigger(text)
    assert debouncer.scheduled
    await asyncio.sleep(0.15)
    assert calls == ["ado"]
    assert not debouncer.scheduled


@pytest.mark.asyncio
async def test_cancel_drops_scheduled_run():
    calls = []
    debouncer = Debouncer(calls.append, delay=0.02)
    debouncer.trigger("x")
    debouncer.cancel()
    await asyncio.sleep(0.06)
    assert calls == []


@pytest.mark.asyncio
async def test_async_callback_is_awaited_by_wait_idle():
    done = []

    async def work(text):
        await asyncio.sleep(0.02)
        done.append(text)

    debouncer = Debouncer(work, delay=0.01)
    debouncer.trigger("q")
    await asyncio.sleep(0.03)
    await debouncer.wait_idle()
    assert done == ["q"]


@pytest.mark.asyncio
async def test_stale_response_is_discarded():
    delays = {"slow": 0.2, "fast": 0.0}
    results = []

    async def fetch(text):
        await asyncio.sleep(delays[text])
        return text.upper()

    live = LiveQuery(fetch, results.append, delay=0.01)
    live.update("slow")
    await asyncio.sleep(0.05)  # "slow" is now in flight
    live.update("fast")
    await asyncio.sleep(0.05)
    await live.wait_idle()

    assert results == ["FAST"]
    assert live.discarded == 1


@pytest.mark.asyncio
async def test_current_error_reported_and_stale_error_dropped():
    errors = []
    results = []

    async def fetch(text):
        if text == "old":
            await asyncio.sleep(0.1)
        raise RuntimeError(text)

    live = LiveQuery(fetch, results.append, on_error=errors.append, delay=0.01)
    live.update("old")
    await asyncio.sleep(0.03)
    live.update("new")
    await asyncio.sleep(0.03)
    await live.wait_idle()

    assert [str(e) for e in errors] == ["new"]
    assert results == []
    assert live.discarded == 1
