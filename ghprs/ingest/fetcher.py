# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Paginated search fetching.

One window is drained by a probe request (to learn the page count from the
``Link`` header) followed by one request per page, strictly in order. A failed
request is logged and skipped. Nothing is retried and the run never aborts, so it
can finish with an incomplete local copy. The returned WindowResult /
FetchSummary records every failed page so callers can tell.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp

from ghprs.classes import FailureKind, FetchSummary, PageResult, QueryWindow, WindowResult
from ghprs.constants import SEARCH_ISSUES_URL
from ghprs.ingest.transform import normalize_pull_request
from ghprs.storage import LocalStore, StoreError
from ghprs.utils.github_api_tools import (
    build_search_params,
    check_preemptive_rate_limit,
    describe_window_result,
    get_last_page,
    is_rate_limited,
    make_headers,
)

logger = logging.getLogger(__name__)


@dataclass
class SearchResponse:
    """Body and pagination links of one search request, or why it failed"""

    data: Optional[Dict[str, Any]] = None
    links: Optional[Any] = None
    failure_kind: Optional[FailureKind] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure_kind is None


class PageFetcher:
    """Drains query windows from the search API into a LocalStore."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        store: LocalStore,
        org: str,
        token: Optional[str] = None,
        url: str = SEARCH_ISSUES_URL,
    ):
        self.session = session
        self.store = store
        self.org = org
        self.url = url
        self.headers = make_headers(token)

    async def search(self, window: QueryWindow, page: Optional[int] = None) -> SearchResponse:
        """Issue one search request. Never raises for request-level failures."""
        params = build_search_params(self.org, window, page)
        target = f"window {window} page {page if page is not None else 'probe'}"

        try:
            async with self.session.get(self.url, params=params, headers=self.headers) as response:
                if response.status != 200:
                    body = await response.text()
                    if is_rate_limited(response.status, response.headers, body):
                        return SearchResponse(
                            failure_kind=FailureKind.RATE_LIMITED,
                            error=f"rate limited on {target} (status {response.status})",
                        )
                    return SearchResponse(
                        failure_kind=FailureKind.HTTP_STATUS,
                        error=f"status {response.status} on {target}",
                    )

                check_preemptive_rate_limit(response.headers)

                try:
                    data = await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    return SearchResponse(failure_kind=FailureKind.MALFORMED, error=f"invalid JSON on {target}: {e}")

                if not isinstance(data, dict) or not isinstance(data.get('items'), list):
                    return SearchResponse(failure_kind=FailureKind.MALFORMED, error=f"no items list on {target}")

                return SearchResponse(data=data, links=response.links)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return SearchResponse(failure_kind=FailureKind.NETWORK, error=f"request failed on {target}: {e!r}")

    async def get_page_count(self, window: QueryWindow, result: WindowResult) -> int:
        """Probe the window and record its page count on ``result``.

        A window without a ``last`` link has one page; so does a window whose
        probe failed.
        """
        response = await self.search(window)
        if not response.ok:
            logger.warning(f"Probe failed ({response.failure_kind.value}): {response.error}; assuming one page")
            result.probe_ok = False
            return 1

        result.total_count = response.data.get('total_count')
        truncated, reason = describe_window_result(result.total_count, bool(response.data.get('incomplete_results')))
        if truncated:
            logger.warning(f"Window {window} will be incomplete: {reason}")

        return get_last_page(response.links) or 1

    async def fetch_page(self, window: QueryWindow, page: int) -> PageResult:
        """Request one page and insert its normalized items into the store."""
        response = await self.search(window, page)
        if not response.ok:
            logger.error(f"Skipping page ({response.failure_kind.value}): {response.error}")
            return PageResult(
                window=window,
                page=page,
                ok=False,
                failure_kind=response.failure_kind,
                error=response.error,
            )

        inserted = 0
        skipped = 0
        for item in response.data['items']:
            try:
                record = normalize_pull_request(item)
            except (ValueError, TypeError, AttributeError) as e:
                skipped += 1
                logger.warning(f"Skipping malformed item on window {window} page {page}: {e}")
                continue
            self.store.insert(record)
            inserted += 1

        logger.debug(f"Window {window} page {page}: {inserted} records")
        return PageResult(window=window, page=page, ok=True, records=inserted, skipped=skipped)

    async def fetch_window(self, window: QueryWindow) -> WindowResult:
        """Fetch every page of ``window`` in ascending order, then save the store."""
        result = WindowResult(window=window, total_pages=0)
        result.total_pages = await self.get_page_count(window, result)
        logger.info(f"Window {window}: {result.total_pages} page(s), {result.total_count} result(s) reported")

        for page in range(1, result.total_pages + 1):
            result.pages.append(await self.fetch_page(window, page))

        try:
            self.store.persist()
            result.persisted = True
        except StoreError as e:
            logger.error(f"Could not save store after window {window}: {e}")

        return result


async def ingest_windows(windows: List[QueryWindow], fetcher: PageFetcher, concurrency: int = 1) -> FetchSummary:
    """Drain every window through ``fetcher``.

    Windows run one at a time by default. With ``concurrency > 1`` up to that
    many windows are in flight at once; pages inside a window stay sequential.
    Results are reported in window order either way.
    """
    summary = FetchSummary()

    if concurrency <= 1:
        for window in windows:
            summary.windows.append(await fetcher.fetch_window(window))
        return summary

    semaphore = asyncio.Semaphore(concurrency)

    async def bounded(window: QueryWindow) -> WindowResult:
        async with semaphore:
            return await fetcher.fetch_window(window)

    summary.windows.extend(await asyncio.gather(*(bounded(window) for window in windows)))
    return summary
