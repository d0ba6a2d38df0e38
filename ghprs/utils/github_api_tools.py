# Entrius 2025
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from ghprs.classes import QueryWindow
from ghprs.constants import SEARCH_PER_PAGE, SEARCH_RESULT_CAP

logger = logging.getLogger(__name__)

# =============================================================================
# Rate Limit Configuration
# =============================================================================
RATE_LIMIT_MIN_REMAINING = 3  # search API allows 30 requests/minute with a token


@dataclass
class RateLimitInfo:
    """Represents GitHub API rate limit information extracted from response headers."""

    limit: int  # Maximum requests allowed in the current window
    remaining: int  # Requests remaining in current window
    reset_timestamp: int  # Unix timestamp when the rate limit resets
    used: int  # Requests used in current window

    @property
    def is_exceeded(self) -> bool:
        """Check if rate limit has been exceeded."""
        return self.remaining == 0

    @property
    def seconds_until_reset(self) -> int:
        """Calculate seconds until rate limit resets."""
        current_time = int(time.time())
        return max(0, self.reset_timestamp - current_time)

    def __str__(self) -> str:
        return f"RateLimit(remaining={self.remaining}/{self.limit}, resets_in={self.seconds_until_reset}s)"


def parse_rate_limit_headers(headers: Mapping[str, str]) -> Optional[RateLimitInfo]:
    """
    Parse GitHub API rate limit information from response headers.

    Args:
        headers: Response headers (case-insensitive mapping)

    Returns:
        RateLimitInfo object if headers are present, None otherwise
    """
    try:
        limit = int(headers.get('X-RateLimit-Limit', 0))
        remaining = int(headers.get('X-RateLimit-Remaining', 0))
        reset_timestamp = int(headers.get('X-RateLimit-Reset', 0))
        used = int(headers.get('X-RateLimit-Used', 0))

        if limit == 0 and reset_timestamp == 0:
            return None

        return RateLimitInfo(limit=limit, remaining=remaining, reset_timestamp=reset_timestamp, used=used)
    except (ValueError, TypeError) as e:
        logger.debug(f"Could not parse rate limit headers: {e}")
        return None


def is_rate_limited(status: int, headers: Mapping[str, str], body_text: str = "") -> bool:
    """
    Check if a response indicates rate limiting.

    Requests are never retried, so only the verdict matters here.

    Args:
        status: HTTP status code
        headers: Response headers
        body_text: Response body, used when the headers are inconclusive

    Returns:
        True if the request was rate limited
    """
    if status not in (403, 429):
        return False

    rate_limit_info = parse_rate_limit_headers(headers)
    if rate_limit_info and rate_limit_info.is_exceeded:
        return True

    return 'rate limit' in (body_text or '').lower()


def check_preemptive_rate_limit(headers: Mapping[str, str]) -> None:
    """
    Check if we're approaching rate limit and log a warning.

    Args:
        headers: Response headers of a successful request
    """
    rate_limit_info = parse_rate_limit_headers(headers)

    if rate_limit_info and rate_limit_info.remaining <= RATE_LIMIT_MIN_REMAINING:
        logger.warning(
            f"Approaching GitHub search rate limit: {rate_limit_info.remaining} requests remaining, "
            f"resets in {rate_limit_info.seconds_until_reset}s"
        )


def make_headers(token: Optional[str]) -> Dict[str, str]:
    """Build standard GitHub HTTP headers for a PAT.

    Args:
        token (str): Github pat, may be empty for unauthenticated requests
    Returns:
        Dict[str, str]: Mapping of HTTP header names to values.
    """
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def build_search_query(org: str, window: QueryWindow) -> str:
    """Search expression for all PRs of ``org`` created inside ``window``."""
    return f"is:pr org:{org} {window.search_term}"


def build_search_params(org: str, window: QueryWindow, page: Optional[int] = None) -> Dict[str, Any]:
    """Query string parameters for one search request. No page means the probe request."""
    params: Dict[str, Any] = {
        "q": build_search_query(org, window),
        "per_page": SEARCH_PER_PAGE,
    }
    if page is not None:
        params["page"] = page
    return params


def get_last_page(links: Optional[Mapping[str, Any]]) -> Optional[int]:
    """Read the total page count from a parsed ``Link`` header.

    Args:
        links: rel -> link mapping as exposed by ``aiohttp.ClientResponse.links``

    Returns:
        The page number of the ``last`` relation, or None if there is none.
    """
    if not links:
        return None
    last = links.get('last')
    if not last:
        return None

    url = last.get('url') if hasattr(last, 'get') else last
    pages = parse_qs(urlsplit(str(url)).query).get('page')
    if not pages:
        return None
    try:
        return int(pages[0])
    except ValueError:
        logger.debug(f"Unparseable last page in Link header: {url}")
        return None


def describe_window_result(total_count: Optional[int], incomplete: bool) -> Tuple[bool, str]:
    """Flag a probe response whose result set the search API will truncate.

    Returns:
        Tuple of (truncated, reason)
    """
    if total_count is not None and total_count > SEARCH_RESULT_CAP:
        return (True, f"{total_count} results exceed the search cap of {SEARCH_RESULT_CAP}")
    if incomplete:
        return (True, "search API reported incomplete_results")
    return (False, "")
