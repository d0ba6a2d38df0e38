# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Normalize raw search API items into PullRequestRecord."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from ghprs.classes import PRState, PullRequestRecord
from ghprs.constants import EPOCH_SUFFIX, TIMESTAMP_FIELDS

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MILLISECOND = timedelta(milliseconds=1)


def parse_github_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 GitHub timestamp (``2013-05-01T12:00:00Z``) as UTC."""
    dt = datetime.fromisoformat(value.rstrip("Z"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    """Exact epoch milliseconds of an aware datetime."""
    return (dt - EPOCH) // ONE_MILLISECOND


def format_us_date(dt: datetime) -> str:
    """en-US short date, M/D/YYYY."""
    return f"{dt.month}/{dt.day}/{dt.year}"


def transform_timestamp(value: Optional[str]) -> Tuple[Optional[str], Optional[int]]:
    """Return the (display date, epoch ms) pair for one raw timestamp.

    A null timestamp yields (None, None), never the epoch of 1970-01-01.
    """
    if not value:
        return (None, None)
    dt = parse_github_timestamp(value)
    return (format_us_date(dt), to_epoch_ms(dt))


def normalize_pull_request(raw: Dict[str, Any], state: Optional[str] = None) -> PullRequestRecord:
    """Map one search API item onto a PullRequestRecord.

    Args:
        raw (Dict[str, Any]): Item from the ``items`` list of a search response.
        state (Optional[str]): State to use instead of the item's own ``state``.

    Returns:
        PullRequestRecord: The normalized record. A PR that carries
        ``pull_request.merged_at`` is ``merged`` whatever state was reported.

    Raises:
        ValueError: If the item has no id or no usable state.
    """
    if raw.get("id") is None:
        raise ValueError("search item has no id")

    raw_state = state or raw.get("state")
    if not raw_state:
        raise ValueError(f"search item {raw['id']} has no state")

    user = raw.get("user") or {}
    pull_request = raw.get("pull_request") or {}
    merged_at = pull_request.get("merged_at")

    source_timestamps = {
        "created_at": raw.get("created_at"),
        "updated_at": raw.get("updated_at"),
        "merged_at": merged_at,
        "closed_at": raw.get("closed_at"),
    }
    timestamps = {}
    for name in TIMESTAMP_FIELDS:
        formatted, epoch = transform_timestamp(source_timestamps[name])
        timestamps[name] = formatted
        timestamps[f"{name}{EPOCH_SUFFIX}"] = epoch

    return PullRequestRecord(
        id=int(raw["id"]),
        title=raw.get("title") or "",
        user=user.get("login") or "",
        state=PRState.MERGED if merged_at else PRState(str(raw_state).lower()),
        **timestamps,
    )
