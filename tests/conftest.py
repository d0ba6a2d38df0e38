# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared fixtures: raw search items, a temporary store and a fake aiohttp session.
"""

from typing import Any, Callable, Dict, List, Optional

import pytest

from ghprs.classes import DuplicatePolicy
from ghprs.storage import LocalStore

SEARCH_URL = 'https://api.github.com/search/issues'


def make_raw_item(
    id: int = 1,
    title: str = 'Add feature',
    login: str = 'contributor',
    state: str = 'closed',
    created_at: Optional[str] = '2013-05-01T10:00:00Z',
    updated_at: Optional[str] = '2013-06-01T10:00:00Z',
    closed_at: Optional[str] = '2013-06-01T10:00:00Z',
    merged_at: Optional[str] = None,
) -> Dict[str, Any]:
    """One item as returned in the ``items`` list of /search/issues."""
    return {
        'id': id,
        'number': id,
        'title': title,
        'user': {'login': login, 'id': 1000 + id},
        'state': state,
        'locked': False,
        'comments': 0,
        'created_at': created_at,
        'updated_at': updated_at,
        'closed_at': closed_at,
        'body': 'Some description',
        'pull_request': {
            'url': f'https://api.github.com/repos/ramda/ramda/pulls/{id}',
            'merged_at': merged_at,
        },
    }


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse used as an async context manager."""

    def __init__(
        self,
        status: int = 200,
        payload: Any = None,
        links: Optional[Dict[str, Dict[str, str]]] = None,
        headers: Optional[Dict[str, str]] = None,
        text: str = '',
        json_error: Optional[Exception] = None,
    ):
        self.status = status
        self._payload = payload
        self.links = links or {}
        self.headers = headers or {}
        self._text = text
        self._json_error = json_error

    async def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Routes ``get`` calls to ``handler(params)``; a returned exception is raised."""

    def __init__(self, handler: Callable[[Dict[str, Any]], Any]):
        self.handler = handler
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, params=None, headers=None):
        self.calls.append({'url': url, 'params': dict(params or {}), 'headers': dict(headers or {})})
        result = self.handler(dict(params or {}))
        if isinstance(result, BaseException):
            raise result
        return result


def last_link(page: int) -> Dict[str, Dict[str, str]]:
    return {
        'next': {'url': f'{SEARCH_URL}?q=is%3Apr&per_page=100&page=2'},
        'last': {'url': f'{SEARCH_URL}?q=is%3Apr&per_page=100&page={page}'},
    }


def search_payload(items: List[Dict[str, Any]], total_count: Optional[int] = None) -> Dict[str, Any]:
    return {
        'total_count': len(items) if total_count is None else total_count,
        'incomplete_results': False,
        'items': items,
    }


@pytest.fixture
def raw_item():
    """Factory for raw search items."""
    return make_raw_item


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / 'db.json'


@pytest.fixture
def store(store_path):
    return LocalStore(store_path)


@pytest.fixture
def upsert_store(store_path):
    return LocalStore(store_path, policy=DuplicatePolicy.UPSERT)


@pytest.fixture
def fake_session():
    """Factory: ``fake_session(handler)``."""
    return FakeSession
