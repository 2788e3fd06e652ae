"""Tests for latest-request-wins coordination."""

import anyio
import pytest

from draft_oracle.services.request_coordinator import CancellationToken, RequestCoordinator

pytestmark = pytest.mark.anyio


async def test_single_request_commits():
    coordinator = RequestCoordinator()

    async def fetch(token, value):
        return value * 2

    assert await coordinator.execute(fetch, 21) == 42
    assert coordinator.data == 42
    assert coordinator.error is None
    assert not coordinator.is_loading


async def test_superseded_request_is_discarded_even_if_it_finishes_last():
    coordinator = RequestCoordinator()
    started = {"A": anyio.Event(), "B": anyio.Event()}
    release = {"A": anyio.Event(), "B": anyio.Event()}
    done = {"A": anyio.Event(), "B": anyio.Event()}
    results = {}
    tokens = {}

    async def fetch(token, name):
        tokens[name] = token
        started[name].set()
        await release[name].wait()
        return f"payload-{name}"

    async def run(name):
        results[name] = await coordinator.execute(fetch, name)
        done[name].set()

    async with anyio.create_task_group() as tg:
        tg.start_soon(run, "A")
        await started["A"].wait()
        tg.start_soon(run, "B")
        await started["B"].wait()
        assert tokens["A"].cancelled

        release["B"].set()
        await done["B"].wait()
        assert coordinator.data == "payload-B"

        release["A"].set()

    assert results == {"A": None, "B": "payload-B"}
    assert coordinator.data == "payload-B"
    assert not coordinator.is_loading


async def test_failure_is_stored_as_string():
    coordinator = RequestCoordinator()

    async def fetch(token):
        raise RuntimeError("upstream timeout")

    assert await coordinator.execute(fetch) is None
    assert coordinator.error == "upstream timeout"
    assert not coordinator.is_loading


async def test_error_from_cancelled_request_is_dropped():
    coordinator = RequestCoordinator()

    async def fetch(token):
        coordinator.cancel("navigated away")
        raise RuntimeError("late failure")

    assert await coordinator.execute(fetch) is None
    assert coordinator.error is None


async def test_data_survives_a_failed_refetch():
    coordinator = RequestCoordinator()

    async def ok(token):
        return "first"

    async def fail(token):
        raise ValueError("bad")

    await coordinator.execute(ok)
    await coordinator.execute(fail)
    assert coordinator.data == "first"
    assert coordinator.error == "bad"


def test_token_cancel_once():
    token = CancellationToken()
    assert token.cancel("first")
    assert not token.cancel("second")
    assert token.reason == "first"
