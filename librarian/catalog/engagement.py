"""Engagement operations: rating, download, and share.

Each operation runs inside a caller-supplied unit of work and commits it.
Counter updates are single ``UPDATE ... RETURNING`` statements; rating upserts
lock the resource row so that the recomputed average always reflects the
committed rating set.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ

from librarian.logging import get_logger, log_info

from .domain import (
    MAX_RATING_SCORE,
    MIN_RATING_SCORE,
    EngagementCounter,
    Rating,
)
from .errors import (
    AccessDeniedError,
    InvalidRatingError,
    InvalidRequestError,
    ResourceNotFoundError,
)

if typ.TYPE_CHECKING:
    import uuid

    from .domain import Caller, Resource, ResourceType
    from .ports import AccessPolicy, CatalogUnitOfWork, ShareNotifier

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class RatingSummary:
    """Outcome of a rating upsert."""

    score: int
    average_rating: float
    ratings_count: int


@dc.dataclass(frozen=True, slots=True)
class DownloadTarget:
    """Where a client should fetch a resource from.

    Exactly one of ``redirect_url`` (external links) and ``file_url`` (stored
    files) is set.
    """

    redirect_url: str | None
    file_url: str | None
    downloads: int


@dc.dataclass(frozen=True, slots=True)
class ShareRequest:
    """Share a resource with a study group or a list of users."""

    group_id: uuid.UUID | None = None
    user_ids: tuple[uuid.UUID, ...] = ()
    message: str | None = None


@dc.dataclass(frozen=True, slots=True)
class ShareNotice:
    """Notice handed to a ``ShareNotifier`` for delivery.

    Attributes
    ----------
    resource_id : uuid.UUID
        Shared resource.
    title : str
        Title of the shared resource.
    resource_type : ResourceType
        Kind of the shared resource.
    url : str | None
        File URL or external link of the resource.
    sender_id : uuid.UUID
        Identity sharing the resource.
    group_id : uuid.UUID | None
        Target study group, if any.
    recipient_ids : tuple[uuid.UUID, ...]
        Target users when sharing directly.
    message : str
        Text accompanying the shared resource.
    """

    resource_id: uuid.UUID
    title: str
    resource_type: ResourceType
    url: str | None
    sender_id: uuid.UUID
    group_id: uuid.UUID | None
    recipient_ids: tuple[uuid.UUID, ...]
    message: str


@dc.dataclass(frozen=True, slots=True)
class ShareResult:
    """Outcome of a share."""

    shares: int
    group_id: uuid.UUID | None
    recipients: int


def validate_score(score: object) -> int:
    """Return ``score`` when it is an integer within the rating range."""
    if (
        isinstance(score, bool)
        or not isinstance(score, int)
        or not MIN_RATING_SCORE <= score <= MAX_RATING_SCORE
    ):
        msg = (
            f"Rating must be an integer between {MIN_RATING_SCORE} "
            f"and {MAX_RATING_SCORE}."
        )
        raise InvalidRatingError(msg)
    return score


async def _require_resource(
    uow: CatalogUnitOfWork,
    resource_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> Resource:
    """Fetch a resource or raise ``ResourceNotFoundError``."""
    resource = (
        await uow.resources.get_for_update(resource_id)
        if for_update
        else await uow.resources.get(resource_id)
    )
    if resource is None:
        msg = f"Resource {resource_id} not found."
        raise ResourceNotFoundError(msg, entity_id=str(resource_id))
    return resource


def ensure_access(policy: AccessPolicy, caller: Caller, resource: Resource) -> None:
    """Raise ``AccessDeniedError`` unless ``caller`` may open ``resource``."""
    if not policy.can_access(caller, resource):
        msg = f"Access to resource {resource.id} is not permitted."
        raise AccessDeniedError(msg, entity_id=str(resource.id))


async def _increment(
    uow: CatalogUnitOfWork,
    resource_id: uuid.UUID,
    counter: EngagementCounter,
) -> int:
    value = await uow.resources.increment(resource_id, counter)
    if value is None:
        msg = f"Resource {resource_id} not found."
        raise ResourceNotFoundError(msg, entity_id=str(resource_id))
    return value


async def rate_resource(
    uow: CatalogUnitOfWork,
    resource_id: uuid.UUID,
    caller: Caller,
    score: object,
    review: str | None = None,
) -> RatingSummary:
    """Insert or replace ``caller``'s rating and recompute the average.

    Parameters
    ----------
    uow : CatalogUnitOfWork
        Active unit of work.
    resource_id : uuid.UUID
        Rated resource.
    caller : Caller
        Rater identity; a rater holds at most one rating per resource.
    score : object
        Requested score, validated to an integer from 1 to 5.
    review : str | None, optional
        Review text. ``None`` keeps the rater's previous review.

    Returns
    -------
    RatingSummary
        The accepted score, the recomputed average, and the rating count.

    Raises
    ------
    InvalidRatingError
        If ``score`` is outside the rating range.
    ResourceNotFoundError
        If the resource does not exist.
    """
    accepted = validate_score(score)
    resource = await _require_resource(uow, resource_id, for_update=True)
    previous = resource.rating_by(caller.id)
    if review is None:
        review = previous.review if previous is not None else ""
    rating = Rating(
        rater_id=caller.id,
        score=accepted,
        review=review,
        rated_at=dt.datetime.now(dt.UTC),
    )
    await uow.resources.upsert_rating(resource_id, rating)
    average, count = await uow.resources.refresh_average(resource_id)
    await uow.commit()
    log_info(
        logger,
        "Rated resource %s with %s; average %.2f over %s ratings.",
        resource_id,
        accepted,
        average,
        count,
    )
    return RatingSummary(score=accepted, average_rating=average, ratings_count=count)


async def record_download(
    uow: CatalogUnitOfWork,
    resource_id: uuid.UUID,
    caller: Caller,
    policy: AccessPolicy,
) -> DownloadTarget:
    """Count a download and return where the content lives.

    Raises
    ------
    ResourceNotFoundError
        If the resource does not exist.
    AccessDeniedError
        If ``policy`` refuses the caller.
    """
    resource = await _require_resource(uow, resource_id)
    ensure_access(policy, caller, resource)
    downloads = await _increment(uow, resource_id, EngagementCounter.DOWNLOADS)
    await uow.commit()
    if resource.external_link and not resource.file_url:
        return DownloadTarget(
            redirect_url=resource.external_link,
            file_url=None,
            downloads=downloads,
        )
    return DownloadTarget(
        redirect_url=None,
        file_url=resource.file_url,
        downloads=downloads,
    )


async def share_resource(
    uow: CatalogUnitOfWork,
    notifier: ShareNotifier,
    resource_id: uuid.UUID,
    caller: Caller,
    request: ShareRequest,
) -> ShareResult:
    """Deliver a share notice and count the share.

    The share counter only moves when the notifier accepts the notice.

    Raises
    ------
    InvalidRequestError
        If neither a group nor any user is targeted.
    ResourceNotFoundError
        If the resource does not exist.
    ShareRejectedError
        If the notifier refuses the notice.
    """
    recipients = tuple(dict.fromkeys(request.user_ids))
    if request.group_id is None and not recipients:
        msg = "Provide a group_id or a non-empty list of user_ids."
        raise InvalidRequestError(msg)

    resource = await _require_resource(uow, resource_id)
    message = request.message or f"Check out this resource: {resource.title}"
    notice = ShareNotice(
        resource_id=resource.id,
        title=resource.title,
        resource_type=resource.resource_type,
        url=resource.file_url or resource.external_link,
        sender_id=caller.id,
        group_id=request.group_id,
        recipient_ids=() if request.group_id is not None else recipients,
        message=message,
    )
    await notifier.deliver(notice)
    shares = await _increment(uow, resource_id, EngagementCounter.SHARES)
    await uow.commit()
    return ShareResult(
        shares=shares,
        group_id=request.group_id,
        recipients=len(notice.recipient_ids),
    )


__all__ = (
    "DownloadTarget",
    "RatingSummary",
    "ShareNotice",
    "ShareRequest",
    "ShareResult",
    "ensure_access",
    "rate_resource",
    "record_download",
    "share_resource",
    "validate_score",
)
