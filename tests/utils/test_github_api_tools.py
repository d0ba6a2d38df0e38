# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Unit tests for GitHub API helpers.

Covers:
    - request headers and search parameters
    - Link header page discovery
    - rate limit detection
"""

import time

import pytest

from ghprs.classes import QueryWindow
from ghprs.utils.github_api_tools import (
    RateLimitInfo,
    build_search_params,
    build_search_query,
    check_preemptive_rate_limit,
    describe_window_result,
    get_last_page,
    is_rate_limited,
    make_headers,
    parse_rate_limit_headers,
)
from tests.conftest import last_link


# ============================================================================
# Requests
# ============================================================================


class TestMakeHeaders:
    def test_with_token(self):
        headers = make_headers('abc')
        assert headers['Authorization'] == 'token abc'
        assert headers['Accept'] == 'application/vnd.github.v3+json'

    def test_without_token(self):
        assert 'Authorization' not in make_headers(None)
        assert 'Authorization' not in make_headers('')


class TestSearchParams:
    def test_query(self):
        assert build_search_query('ramda', QueryWindow(2013, 2014)) == 'is:pr org:ramda created:2013-01-01..2014-12-31'

    def test_probe_has_no_page(self):
        params = build_search_params('ramda', QueryWindow(2013, 2014))
        assert 'page' not in params
        assert params['per_page'] == 100

    def test_page(self):
        assert build_search_params('ramda', QueryWindow(2013, 2014), page=4)['page'] == 4


# ============================================================================
# Link header
# ============================================================================


class TestGetLastPage:
    def test_last_relation(self):
        assert get_last_page(last_link(7)) == 7

    def test_plain_string_url(self):
        assert get_last_page({'last': 'https://api.github.com/search/issues?q=x&page=12'}) == 12

    @pytest.mark.parametrize(
        'links',
        [
            None,
            {},
            {'next': {'url': 'https://api.github.com/search/issues?page=2'}},
            {'last': {'url': 'https://api.github.com/search/issues?q=x'}},
            {'last': {'url': 'https://api.github.com/search/issues?page=abc'}},
        ],
    )
    def test_missing_or_unusable(self, links):
        assert get_last_page(links) is None


# ============================================================================
# Rate limits
# ============================================================================


class TestRateLimits:
    def test_parse_headers(self):
        info = parse_rate_limit_headers(
            {'X-RateLimit-Limit': '30', 'X-RateLimit-Remaining': '12', 'X-RateLimit-Reset': '1700000000',
             'X-RateLimit-Used': '18'}
        )
        assert info == RateLimitInfo(limit=30, remaining=12, reset_timestamp=1700000000, used=18)

    def test_no_headers(self):
        assert parse_rate_limit_headers({}) is None

    def test_garbage_headers(self):
        assert parse_rate_limit_headers({'X-RateLimit-Limit': 'lots'}) is None

    def test_seconds_until_reset_never_negative(self):
        info = RateLimitInfo(limit=30, remaining=0, reset_timestamp=int(time.time()) - 100, used=30)
        assert info.seconds_until_reset == 0

    def test_403_with_exhausted_quota(self):
        headers = {'X-RateLimit-Limit': '30', 'X-RateLimit-Remaining': '0', 'X-RateLimit-Reset': '1'}
        assert is_rate_limited(403, headers)

    def test_secondary_limit_from_body(self):
        assert is_rate_limited(403, {}, 'You have exceeded a secondary rate limit')

    def test_plain_403_is_not_rate_limit(self):
        assert not is_rate_limited(403, {}, 'Resource not accessible by integration')

    def test_other_status_never_rate_limited(self):
        assert not is_rate_limited(500, {'X-RateLimit-Limit': '30', 'X-RateLimit-Remaining': '0'}, 'rate limit')

    def test_preemptive_warning(self, caplog):
        headers = {'X-RateLimit-Limit': '30', 'X-RateLimit-Remaining': '2', 'X-RateLimit-Reset': '1'}
        with caplog.at_level('WARNING', logger='ghprs'):
            check_preemptive_rate_limit(headers)
        assert 'Approaching GitHub search rate limit' in caplog.text

    def test_no_warning_with_quota_left(self, caplog):
        headers = {'X-RateLimit-Limit': '30', 'X-RateLimit-Remaining': '20', 'X-RateLimit-Reset': '1'}
        with caplog.at_level('WARNING', logger='ghprs'):
            check_preemptive_rate_limit(headers)
        assert caplog.text == ''


# ============================================================================
# Result cap
# ============================================================================


class TestDescribeWindowResult:
    def test_under_cap(self):
        assert describe_window_result(999, False) == (False, '')

    def test_over_cap(self):
        truncated, reason = describe_window_result(1001, False)
        assert truncated
        assert '1000' in reason

    def test_incomplete(self):
        assert describe_window_result(10, True)[0]

    def test_unknown_total(self):
        assert describe_window_result(None, False) == (False, '')
