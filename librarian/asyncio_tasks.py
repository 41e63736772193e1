"""Metadata-aware task creation for structured fan-out.

Search fan-out creates one task per source inside an ``asyncio.TaskGroup``.
This module centralizes that task creation so every task carries a stable
name and, when a custom event-loop task factory is installed, structured
metadata (operation, correlation identifier, priority hint) that the factory
can use for tracing.
"""

from __future__ import annotations

import asyncio
import sys
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import contextvars as cv

TASK_METADATA_KWARG = "librarian_task_metadata"
_TASK_METADATA_KEYS = frozenset({"operation_name", "correlation_id", "priority_hint"})


class TaskMetadata(typ.TypedDict, total=False):
    """Optional metadata forwarded to custom task factories."""

    operation_name: str
    correlation_id: str
    priority_hint: int


class TaskCreateKwargs(typ.TypedDict, total=False):
    """Supported kwargs for metadata-aware task creation."""

    name: str | None
    context: cv.Context | None
    eager_start: bool | None
    metadata: TaskMetadata | None


_TASK_CREATE_KWARGS_KEYS = frozenset({"name", "context", "eager_start", "metadata"})

# TaskGroup.create_task only forwards extra kwargs to the loop factory from 3.14.
_GROUP_FORWARDS_FACTORY_KWARGS = sys.version_info >= (3, 14)


def _validate_string_metadata_field(
    metadata: TaskMetadata,
    field_name: str,
) -> str | None:
    """Validate one optional string metadata field."""
    value = metadata.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        msg = (
            f"Task metadata {field_name!r} must be a string, "
            f"got {type(value).__name__!r}."
        )
        raise TypeError(msg)
    if not value:
        msg = f"Task metadata {field_name!r} must be a non-empty string."
        raise ValueError(msg)
    return value


def _validate_priority_hint_field(metadata: TaskMetadata) -> int | None:
    """Validate the optional integer priority hint field."""
    priority_hint = metadata.get("priority_hint")
    if priority_hint is None:
        return None
    if isinstance(priority_hint, bool) or not isinstance(priority_hint, int):
        msg = "Task metadata 'priority_hint' must be an integer."
        raise TypeError(msg)
    return priority_hint


def validate_task_metadata(metadata: TaskMetadata) -> TaskMetadata | None:
    """Validate metadata shape and return the populated subset.

    Parameters
    ----------
    metadata : TaskMetadata
        Candidate metadata mapping.

    Returns
    -------
    TaskMetadata | None
        Metadata restricted to populated keys, or ``None`` when nothing was
        populated.

    Raises
    ------
    ValueError
        If unsupported keys are present or a string field is empty.
    TypeError
        If a field has the wrong type.
    """
    unsupported_keys = set(metadata) - _TASK_METADATA_KEYS
    if unsupported_keys:
        keys = ", ".join(repr(key) for key in sorted(unsupported_keys, key=repr))
        msg = f"Unsupported task metadata keys: {keys}"
        raise ValueError(msg)

    validated: TaskMetadata = {}
    operation_name = _validate_string_metadata_field(metadata, "operation_name")
    if operation_name is not None:
        validated["operation_name"] = operation_name

    correlation_id = _validate_string_metadata_field(metadata, "correlation_id")
    if correlation_id is not None:
        validated["correlation_id"] = correlation_id

    priority_hint = _validate_priority_hint_field(metadata)
    if priority_hint is not None:
        validated["priority_hint"] = priority_hint

    return validated or None


def _validate_task_create_kwargs(kwargs: dict[str, object]) -> TaskCreateKwargs:
    """Reject unknown task-creation kwargs."""
    unexpected_keys = set(kwargs) - _TASK_CREATE_KWARGS_KEYS
    if unexpected_keys:
        keys = ", ".join(sorted(unexpected_keys, key=repr))
        msg = f"Unsupported task creation kwargs: {keys}"
        raise TypeError(msg)
    return typ.cast("TaskCreateKwargs", kwargs)


def create_task_in_group[T](
    task_group: asyncio.TaskGroup,
    coro: cabc.Coroutine[object, object, T],
    /,
    **kwargs: typ.Unpack[TaskCreateKwargs],
) -> asyncio.Task[T]:
    """Create a task in ``task_group`` with optional task-factory metadata.

    Metadata is only forwarded when the running loop has a custom task
    factory and the interpreter lets task groups pass extra keyword arguments
    through to it.
    ``eager_start`` is only forwarded when explicitly set.
    """
    task_kwargs = _validate_task_create_kwargs(dict(kwargs))
    metadata = task_kwargs.get("metadata")
    validated_metadata = (
        None if metadata is None else validate_task_metadata(metadata)
    )

    forwarded: dict[str, object] = {
        "name": task_kwargs.get("name"),
        "context": task_kwargs.get("context"),
    }
    eager_start = task_kwargs.get("eager_start")
    if eager_start is not None:
        forwarded["eager_start"] = eager_start

    loop = asyncio.get_running_loop()
    if (
        validated_metadata is not None
        and _GROUP_FORWARDS_FACTORY_KWARGS
        and loop.get_task_factory() is not None
    ):
        forwarded[TASK_METADATA_KWARG] = validated_metadata

    group_task_creator = typ.cast(
        "typ.Callable[..., asyncio.Task[T]]",
        task_group.create_task,
    )
    return group_task_creator(coro, **forwarded)


__all__ = (
    "TASK_METADATA_KWARG",
    "TaskMetadata",
    "create_task_in_group",
    "validate_task_metadata",
)
