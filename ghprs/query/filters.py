# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Validation and execution of state / date range queries.

Rules are checked in a fixed order and the first violation is reported:
    1. state is one of open, closed, merged, all
    2. a timestamp type needs a date range
    3. the date range is two strict M/D/YYYY dates
    4. the timestamp type is one of created, updated, closed
    5. the (state, timestamp type) pair is in STATE_TIMESTAMP_COMPATIBILITY
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from ghprs.classes import PullRequestRecord
from ghprs.constants import (
    EPOCH_SUFFIX,
    STATE_TIMESTAMP_COMPATIBILITY,
    USER_DATE_FORMAT,
    VALID_STATES,
    VALID_TIMESTAMP_TYPES,
)
from ghprs.ingest.transform import to_epoch_ms
from ghprs.storage import LocalStore

USER_DATE_PATTERN = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')
DEFAULT_TIMESTAMP_TYPE = 'created'


class InvalidFilterError(ValueError):
    """A query was rejected before touching the store."""

    def __init__(self, rule: str, message: str):
        super().__init__(message)
        self.rule = rule


@dataclass(frozen=True)
class FilterRequest:
    """A validated query"""

    state: str
    timestamp_type: Optional[str] = None
    low: Optional[int] = None
    high: Optional[int] = None

    @property
    def has_range(self) -> bool:
        return self.low is not None

    @property
    def epoch_field(self) -> Optional[str]:
        if self.timestamp_type is None:
            return None
        return f"{self.timestamp_type}_at{EPOCH_SUFFIX}"


def parse_user_date(value: str) -> datetime:
    """Strictly parse M/D/YYYY (leading zeros allowed) as UTC midnight.

    Raises:
        ValueError: If the text is not in that format or not a calendar date.
    """
    match = USER_DATE_PATTERN.match(str(value).strip())
    if not match:
        raise ValueError(f"'{value}' is not in {USER_DATE_FORMAT} format")
    month, day, year = (int(part) for part in match.groups())
    return datetime(year, month, day, tzinfo=timezone.utc)


def is_valid_date_input(dates: Optional[Sequence[str]]) -> bool:
    """True if ``dates`` is exactly two valid M/D/YYYY dates."""
    if not dates or len(dates) != 2:
        return False
    try:
        for date in dates:
            parse_user_date(date)
    except ValueError:
        return False
    return True


def is_valid_state_timestamp_type(state: str, timestamp_type: str) -> bool:
    return timestamp_type in STATE_TIMESTAMP_COMPATIBILITY.get(state, [])


def date_range_to_epoch(dates: Sequence[str]) -> Tuple[int, int]:
    """Convert two user dates to an ordered (low, high) epoch ms pair."""
    first, second = (to_epoch_ms(parse_user_date(date)) for date in dates)
    return (min(first, second), max(first, second))


def validate_filter(
    state: str = 'all',
    timestamp_type: Optional[str] = None,
    date: Optional[Sequence[str]] = None,
) -> FilterRequest:
    """Check a query against the rules above and build a FilterRequest.

    A date range without a timestamp type applies to the creation date.

    Raises:
        InvalidFilterError: On the first violated rule.
    """
    if state not in VALID_STATES:
        raise InvalidFilterError(
            'invalid_state',
            f"Invalid state '{state}'. Valid states - {', '.join(VALID_STATES)}",
        )

    if timestamp_type and not date:
        raise InvalidFilterError(
            'timestamp_without_date',
            'Timestamp type must be used with a date range - see examples',
        )

    if date and not is_valid_date_input(date):
        raise InvalidFilterError(
            'invalid_date',
            f"Invalid date(s) {list(date)} - expected two dates in {USER_DATE_FORMAT} format",
        )

    if timestamp_type and timestamp_type not in VALID_TIMESTAMP_TYPES:
        raise InvalidFilterError(
            'invalid_timestamp_type',
            f"Invalid timestamp type '{timestamp_type}'. Valid types - {', '.join(VALID_TIMESTAMP_TYPES)}",
        )

    if timestamp_type and not is_valid_state_timestamp_type(state, timestamp_type):
        allowed = ', '.join(STATE_TIMESTAMP_COMPATIBILITY[state])
        raise InvalidFilterError(
            'incompatible_combination',
            f"Invalid state and timestamp type combination: '{state}' PRs can only be "
            f"filtered by {allowed} - see examples",
        )

    if not date:
        return FilterRequest(state=state)

    low, high = date_range_to_epoch(date)
    return FilterRequest(state=state, timestamp_type=timestamp_type or DEFAULT_TIMESTAMP_TYPE, low=low, high=high)


def apply_filter(store: LocalStore, request: FilterRequest) -> List[PullRequestRecord]:
    """Run a validated query against the store."""
    records = store.find_by_state(request.state)
    if request.has_range:
        records = store.find_by_range(request.epoch_field, request.low, request.high, records=records)
    return records


def run_query(
    store: LocalStore,
    state: str = 'all',
    timestamp_type: Optional[str] = None,
    date: Optional[Sequence[str]] = None,
) -> List[PullRequestRecord]:
    """Validate, then query. Nothing is read from the store if validation fails."""
    return apply_filter(store, validate_filter(state, timestamp_type, date))
