"""Concurrent fan-out across the local repository and external providers.

The local query and every selected provider run as sibling tasks in one
``asyncio.TaskGroup``. Provider calls are guarded at the call site so that an
exception or timeout becomes a failed ``ProviderOutcome`` with no candidates;
the join still waits for every sibling to settle. A local failure is fatal
for the request: the task group cancels the pending provider calls and the
failure surfaces as ``LocalStoreError``.

Examples
--------
>>> result = await fan_out(
...     "networks",
...     local_call,
...     [google_books],
...     max_results=20,
...     timeout=8.0,
... )
>>> result.local.total, [outcome.name for outcome in result.outcomes]
(2, ['googleBooks'])
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import time
import typing as typ

from librarian.asyncio_tasks import create_task_in_group
from librarian.logging import get_logger, log_error, log_warning

from .errors import CatalogError, LocalStoreError
from .search import LocalPage, ProviderOutcome

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from librarian.asyncio_tasks import TaskMetadata

    from .ports import SearchProvider

logger = get_logger(__name__)

type LocalCall = cabc.Callable[[], cabc.Awaitable[LocalPage]]

_LOCAL_PRIORITY = 0
_PROVIDER_PRIORITY = 1


@typ.runtime_checkable
class OutcomeReportingProvider(typ.Protocol):
    """Provider that reports its own recovered failures as outcomes."""

    name: str

    async def search_outcome(
        self,
        query: str,
        max_results: int,
    ) -> ProviderOutcome:
        """Search and return a settled outcome without raising."""
        ...


@dc.dataclass(frozen=True, slots=True)
class FanOutResult:
    """Joined fan-out result: the local page and one outcome per provider."""

    local: LocalPage
    outcomes: tuple[ProviderOutcome, ...]


async def _run_local(local_call: LocalCall | None) -> LocalPage:
    """Run the local search, converting store failures to ``LocalStoreError``."""
    if local_call is None:
        return LocalPage.empty()
    try:
        return await local_call()
    except CatalogError:
        raise
    except Exception as exc:
        log_error(logger, "Local resource search failed: %s", exc, exc_info=exc)
        msg = "The local resource store is unavailable."
        raise LocalStoreError(msg) from exc


async def _call_provider(
    provider: SearchProvider,
    query: str,
    max_results: int,
) -> ProviderOutcome:
    """Invoke ``provider``, preferring its self-reported outcome."""
    if isinstance(provider, OutcomeReportingProvider):
        return await provider.search_outcome(query, max_results)
    candidates = await provider.search(query, max_results)
    return ProviderOutcome(name=provider.name, candidates=tuple(candidates))


async def _guarded_provider_call(
    provider: SearchProvider,
    query: str,
    *,
    max_results: int,
    timeout: float,
) -> ProviderOutcome:
    """Run one provider call; errors and timeouts become failed outcomes."""
    started = time.perf_counter()
    try:
        async with asyncio.timeout(timeout):
            outcome = await _call_provider(provider, query, max_results)
    except TimeoutError:
        log_warning(
            logger,
            "Provider %s timed out after %.3fs.",
            provider.name,
            time.perf_counter() - started,
        )
        return ProviderOutcome(
            name=provider.name,
            failed=True,
            reason=f"timed out after {timeout:g}s",
        )
    except Exception as exc:  # noqa: BLE001
        log_warning(
            logger,
            "Provider %s failed: %s",
            provider.name,
            exc,
            exc_info=exc,
        )
        return ProviderOutcome(
            name=provider.name,
            failed=True,
            reason=str(exc) or type(exc).__name__,
        )
    return dc.replace(outcome, candidates=outcome.candidates[:max_results])


async def fan_out(
    query: str,
    local_call: LocalCall | None,
    providers: cabc.Sequence[SearchProvider],
    *,
    max_results: int,
    timeout: float,
    correlation_id: str | None = None,
) -> FanOutResult:
    """Run the local search and provider searches concurrently.

    Parameters
    ----------
    query : str
        Free-text query forwarded to every provider.
    local_call : LocalCall | None
        Zero-argument coroutine function producing the local page, or
        ``None`` when the local source was not selected.
    providers : collections.abc.Sequence[SearchProvider]
        Selected providers, in response order.
    max_results : int
        Candidate cap applied to every provider.
    timeout : float
        Seconds each provider call may take.
    correlation_id : str | None, optional
        Identifier attached to task metadata for tracing.

    Returns
    -------
    FanOutResult
        The local page and one outcome per provider, in ``providers`` order.

    Raises
    ------
    LocalStoreError
        If the local search fails. Pending provider calls are cancelled.
    """
    try:
        async with asyncio.TaskGroup() as group:
            local_task = create_task_in_group(
                group,
                _run_local(local_call),
                name="search:local",
                metadata=_task_metadata(
                    "search.local", correlation_id, _LOCAL_PRIORITY
                ),
            )
            provider_tasks = [
                create_task_in_group(
                    group,
                    _guarded_provider_call(
                        provider,
                        query,
                        max_results=max_results,
                        timeout=timeout,
                    ),
                    name=f"search:{provider.name}",
                    metadata=_task_metadata(
                        f"search.provider.{provider.name}",
                        correlation_id,
                        _PROVIDER_PRIORITY,
                    ),
                )
                for provider in providers
            ]
    except* CatalogError as group_error:
        raise group_error.exceptions[0] from None

    return FanOutResult(
        local=local_task.result(),
        outcomes=tuple(task.result() for task in provider_tasks),
    )


def _task_metadata(
    operation_name: str,
    correlation_id: str | None,
    priority_hint: int,
) -> TaskMetadata:
    """Build task metadata for one fan-out task."""
    metadata: TaskMetadata = {
        "operation_name": operation_name,
        "priority_hint": priority_hint,
    }
    if correlation_id:
        metadata["correlation_id"] = correlation_id
    return metadata


__all__ = ("FanOutResult", "LocalCall", "OutcomeReportingProvider", "fan_out")
