# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Fetch a window through a fake search API, then query and clear the local copy.
"""

import asyncio

import pytest

from ghprs.classes import DuplicatePolicy, PRState
from ghprs.service import clear_prs, fetch_prs, get_prs
from ghprs.storage import LocalStore
from ghprs.utils.config import Settings
from tests.conftest import FakeResponse, FakeSession, make_raw_item, search_payload


@pytest.fixture
def settings(store_path):
    return Settings(token='secret', org='ramda', first_pr_year=2013, db_path=store_path)


def _serve(items):
    def handler(params):
        return FakeResponse(payload=search_payload(items))

    return FakeSession(handler)


def _fetch(settings, store, items, current_year=2014):
    return asyncio.run(fetch_prs(settings, store, session=_serve(items), current_year=current_year))


class TestEndToEnd:
    def test_closed_unmerged_pr(self, settings, store):
        item = make_raw_item(
            id=42,
            state='closed',
            created_at='2013-05-01T00:00:00Z',
            closed_at='2013-06-01T00:00:00Z',
            merged_at=None,
        )

        summary = _fetch(settings, store, [item])

        assert [str(w.window) for w in summary.windows] == ['2013-01-01..2014-12-31']
        assert summary.is_complete

        [record] = store.all()
        assert record.state == PRState.CLOSED
        assert record.merged_at_epoch is None
        assert record.created_at == '5/1/2013'

        assert get_prs(store, state='merged').count == 0

        result = get_prs(store, state='closed', timestamp_type='created', date=['1/1/2013', '12/31/2014'])
        assert result.count == 1
        assert result.records[0]['title'] == item['title']
        assert result.records[0]['user'] == 'contributor'

    def test_query_from_a_fresh_process(self, settings, store, store_path):
        _fetch(settings, store, [make_raw_item(id=1)])

        reader = LocalStore(store_path)
        assert get_prs(reader).count == 1

    def test_clear_then_query(self, settings, store):
        _fetch(settings, store, [make_raw_item(id=1), make_raw_item(id=2, merged_at='2013-06-01T00:00:00Z')])

        assert clear_prs(store) == 2

        result = get_prs(LocalStore(settings.db_path), state='all')
        assert result.count == 0
        assert result.has_data is True

    def test_query_before_any_fetch(self, store):
        result = get_prs(store)
        assert result.count == 0
        assert result.has_data is False

    def test_refetch_appends_by_default(self, settings, store):
        _fetch(settings, store, [make_raw_item(id=1)])
        _fetch(settings, store, [make_raw_item(id=1)])
        assert store.count == 2

    def test_refetch_with_upsert(self, settings, store_path):
        store = LocalStore(store_path, policy=DuplicatePolicy.UPSERT)
        _fetch(settings, store, [make_raw_item(id=1)])
        _fetch(settings, store, [make_raw_item(id=1, title='Renamed')])

        assert store.count == 1
        assert store.all()[0].title == 'Renamed'

    def test_no_windows_when_history_starts_this_year(self, settings, store):
        summary = _fetch(settings, store, [make_raw_item()], current_year=2013)
        assert summary.windows == []
        assert store.count == 0

    def test_clear_overwrites_corrupt_store(self, store, store_path):
        store_path.write_text('{not json')

        assert clear_prs(store) == 0

        result = get_prs(LocalStore(store_path))
        assert result.count == 0
        assert result.has_data is True
