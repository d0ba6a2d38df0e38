# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Caller-facing operations: fetch, query and clear.

The CLI is a thin layer over these three functions.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from ghprs.classes import FetchSummary
from ghprs.constants import REQUEST_TIMEOUT_SECONDS
from ghprs.ingest import PageFetcher, build_query_windows, ingest_windows
from ghprs.query import apply_filter, validate_filter
from ghprs.storage import LocalStore, StoreError
from ghprs.utils.config import Settings
from ghprs.utils.utils import mask_secret

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Answer to a query, ready for display"""

    count: int
    records: List[Dict[str, Any]] = field(default_factory=list)
    show_list: bool = False
    has_data: bool = True


async def fetch_prs(
    settings: Settings,
    store: LocalStore,
    session: Optional[aiohttp.ClientSession] = None,
    current_year: Optional[int] = None,
    concurrency: int = 1,
) -> FetchSummary:
    """Fetch the organization's whole PR history into ``store``.

    Existing records are kept; the store's duplicate policy decides what
    happens to PRs that are fetched again.
    """
    store.load()
    windows = build_query_windows(settings.first_pr_year, current_year)
    logger.info(
        f"Fetching PRs for org '{settings.org}' in {len(windows)} window(s) "
        f"(token {mask_secret(settings.token) if settings.token else 'not set'})"
    )

    if session is None:
        timeout = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT_SECONDS)
        async with aiohttp.ClientSession(timeout=timeout) as owned_session:
            fetcher = PageFetcher(owned_session, store, settings.org, token=settings.token)
            summary = await ingest_windows(windows, fetcher, concurrency=concurrency)
    else:
        fetcher = PageFetcher(session, store, settings.org, token=settings.token)
        summary = await ingest_windows(windows, fetcher, concurrency=concurrency)

    logger.info(f"Fetch finished: {summary}")
    return summary


def get_prs(
    store: LocalStore,
    state: str = 'all',
    list_prs: bool = False,
    date: Optional[Sequence[str]] = None,
    timestamp_type: Optional[str] = None,
) -> QueryResult:
    """Query the local copy.

    Raises:
        InvalidFilterError: If the filter is rejected; the store is not read.
        StoreError: If the backing file is corrupt.
    """
    request = validate_filter(state=state, timestamp_type=timestamp_type, date=date)

    if not store.is_loaded and not store.load():
        return QueryResult(count=0, show_list=list_prs, has_data=False)

    records = apply_filter(store, request)
    return QueryResult(
        count=len(records),
        records=[record.display_dict() for record in records],
        show_list=list_prs,
    )


def clear_prs(store: LocalStore) -> int:
    """Remove every stored PR and save the empty store. Returns how many were removed.

    An unreadable store file is overwritten with an empty store.
    """
    try:
        store.load()
    except StoreError as e:
        logger.warning(f"Discarding unreadable store: {e}")
    removed = store.count
    store.clear()
    store.persist()
    logger.info(f"Cleared {removed} records from {store.path}")
    return removed
