"""Tests for concurrent search fan-out."""

from __future__ import annotations

import time
import typing as typ

import pytest
from _catalog_helpers import (
    RecordingLocalSearch,
    ReportingProvider,
    StaticProvider,
    make_candidate,
    make_resource,
)

from librarian.catalog.domain import ResourceFilter
from librarian.catalog.errors import LocalStoreError
from librarian.catalog.fanout import fan_out
from librarian.catalog.search import LocalPage

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def _local_call(
    search: RecordingLocalSearch,
) -> cabc.Callable[[], cabc.Awaitable[LocalPage]]:
    async def call() -> LocalPage:
        return await search.find(ResourceFilter(query="networks"), 1, 20)

    return call


@pytest.mark.asyncio
async def test_fan_out_joins_local_page_and_provider_outcomes() -> None:
    """Return the local page and one outcome per provider, in order."""
    local = RecordingLocalSearch(
        page=LocalPage(items=(make_resource(), make_resource()), total=2)
    )
    books = StaticProvider(
        name="googleBooks", candidates=(make_candidate("a"), make_candidate("b"))
    )
    preprints = StaticProvider(name="arxiv", candidates=(make_candidate("c"),))

    result = await fan_out(
        "networks",
        _local_call(local),
        [books, preprints],
        max_results=20,
        timeout=1.0,
    )

    assert result.local.total == 2, "Expected the local total to pass through."
    assert [outcome.name for outcome in result.outcomes] == ["googleBooks", "arxiv"]
    assert [len(outcome.candidates) for outcome in result.outcomes] == [2, 1]
    assert not any(outcome.failed for outcome in result.outcomes)


@pytest.mark.asyncio
async def test_provider_exception_is_isolated() -> None:
    """Settle a raising provider as failed without disturbing siblings."""
    broken = StaticProvider(name="core", error=RuntimeError("upstream exploded"))
    healthy = StaticProvider(name="arxiv", candidates=(make_candidate("c"),))
    local = RecordingLocalSearch(page=LocalPage(items=(make_resource(),), total=1))

    result = await fan_out(
        "graphs", _local_call(local), [broken, healthy], max_results=5, timeout=1.0
    )

    failed, succeeded = result.outcomes
    assert failed.failed is True, "Expected the raising provider to fail."
    assert failed.candidates == ()
    assert failed.reason == "upstream exploded"
    assert succeeded.candidates == (make_candidate("c"),)
    assert result.local.total == 1


@pytest.mark.asyncio
async def test_slow_provider_times_out_without_delaying_the_join() -> None:
    """Abandon a provider that exceeds the timeout."""
    slow = StaticProvider(name="openLibrary", delay=5.0)
    fast = StaticProvider(name="arxiv", candidates=(make_candidate("c"),))

    started = time.perf_counter()
    result = await fan_out(
        "graphs", None, [slow, fast], max_results=5, timeout=0.05
    )
    elapsed = time.perf_counter() - started

    assert elapsed < 2.0, "Expected the join to finish near the timeout."
    assert result.outcomes[0].failed is True
    assert result.outcomes[0].reason == "timed out after 0.05s"
    assert result.outcomes[1].candidates == (make_candidate("c"),)


@pytest.mark.asyncio
async def test_reported_provider_failure_is_kept() -> None:
    """Keep failures that a provider reports about itself."""
    provider = ReportingProvider(
        name="googleBooks", failure_reason="googleBooks responded with HTTP 503"
    )

    result = await fan_out("graphs", None, [provider], max_results=5, timeout=1.0)

    (outcome,) = result.outcomes
    assert outcome.failed is True
    assert outcome.reason == "googleBooks responded with HTTP 503"


@pytest.mark.asyncio
async def test_provider_results_are_capped() -> None:
    """Cap every provider's candidates at ``max_results``."""
    provider = StaticProvider(
        name="googleBooks",
        candidates=tuple(make_candidate(f"v{index}") for index in range(10)),
    )

    result = await fan_out("graphs", None, [provider], max_results=3, timeout=1.0)

    assert len(result.outcomes[0].candidates) == 3
    assert provider.calls == [("graphs", 3)], "Expected one call with the cap."


@pytest.mark.asyncio
async def test_missing_local_call_yields_empty_page() -> None:
    """Return an empty local page when the local source is not selected."""
    result = await fan_out("graphs", None, [], max_results=5, timeout=1.0)

    assert result.local == LocalPage.empty()
    assert result.outcomes == ()


@pytest.mark.asyncio
async def test_local_failure_fails_the_request_and_cancels_providers() -> None:
    """Surface local store failures and cancel pending provider calls."""
    local = RecordingLocalSearch(error=ConnectionError("database is down"))
    slow = StaticProvider(name="arxiv", delay=5.0)

    started = time.perf_counter()
    with pytest.raises(LocalStoreError) as excinfo:
        await fan_out("graphs", _local_call(local), [slow], max_results=5, timeout=10)

    assert time.perf_counter() - started < 2.0, (
        "Expected pending providers to be cancelled."
    )
    assert excinfo.value.retryable is True
    assert excinfo.value.code == "local_store_failure"
