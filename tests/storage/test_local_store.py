# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Tests for the JSON file backed LocalStore.
"""

import json

import pytest

from ghprs.classes import DuplicatePolicy, PRState, PullRequestRecord
from ghprs.storage import LocalStore, StoreError


def _record(id: int, state: PRState = PRState.CLOSED, created_epoch=None, title='PR') -> PullRequestRecord:
    merged = state == PRState.MERGED
    return PullRequestRecord(
        id=id,
        title=title,
        user='someone',
        state=state,
        created_at='1/1/1970' if created_epoch is not None else None,
        created_at_epoch=created_epoch,
        merged_at='1/1/1970' if merged else None,
        merged_at_epoch=0 if merged else None,
    )


# ============================================================================
# Queries
# ============================================================================


class TestFindByState:
    def test_exact_match(self, store):
        store.insert(_record(1, PRState.OPEN))
        store.insert(_record(2, PRState.CLOSED))
        store.insert(_record(3, PRState.MERGED))

        assert [r.id for r in store.find_by_state('open')] == [1]
        assert [r.id for r in store.find_by_state(PRState.MERGED)] == [3]

    def test_all_returns_everything(self, store):
        for i, state in enumerate(PRState):
            store.insert(_record(i, state))
        assert len(store.find_by_state('all')) == 3

    def test_unknown_state_rejected(self, store):
        with pytest.raises(ValueError):
            store.find_by_state('draft')


class TestFindByRange:
    @pytest.fixture
    def populated(self, store):
        store.insert(_record(1, created_epoch=100))
        store.insert(_record(2, created_epoch=200))
        store.insert(_record(3, created_epoch=300))
        store.insert(_record(4, created_epoch=None))
        return store

    def test_inclusive_on_both_ends(self, populated):
        found = populated.find_by_range('created_at_epoch', 100, 200)
        assert [r.id for r in found] == [1, 2]

    def test_reversed_bounds_match_nothing(self, populated):
        """The store uses bounds as given; ordering them is the caller's job."""
        assert populated.find_by_range('created_at_epoch', 200, 100) == []

    def test_null_values_excluded(self, populated):
        found = populated.find_by_range('created_at_epoch', -10**15, 10**15)
        assert 4 not in [r.id for r in found]

    def test_narrows_given_records(self, populated):
        subset = [r for r in populated.all() if r.id != 2]
        found = populated.find_by_range('created_at_epoch', 0, 1000, records=subset)
        assert [r.id for r in found] == [1, 3]


# ============================================================================
# Inserts and duplicate policy
# ============================================================================


class TestDuplicatePolicy:
    def test_append_keeps_duplicates(self, store):
        store.insert(_record(1, title='first'))
        store.insert(_record(1, title='second'))
        assert store.count == 2

    def test_upsert_replaces_by_id(self, upsert_store):
        upsert_store.insert(_record(1, title='first'))
        upsert_store.insert(_record(2))
        upsert_store.insert(_record(1, title='second'))

        assert upsert_store.count == 2
        assert [r.title for r in upsert_store.all() if r.id == 1] == ['second']

    def test_upsert_survives_reload(self, store_path):
        writer = LocalStore(store_path, policy=DuplicatePolicy.UPSERT)
        writer.insert(_record(1, title='first'))
        writer.persist()

        reader = LocalStore(store_path, policy=DuplicatePolicy.UPSERT)
        reader.load()
        reader.insert(_record(1, title='second'))
        assert reader.count == 1


# ============================================================================
# Clear / persist / load
# ============================================================================


class TestLifecycle:
    def test_clear_empties_store(self, store):
        store.insert(_record(1))
        store.clear()
        assert store.count == 0
        assert store.find_by_state('all') == []

    def test_persist_and_load_round_trip(self, store, store_path):
        store.insert(_record(1, PRState.MERGED, created_epoch=5))
        store.insert(_record(2, PRState.OPEN))
        store.persist()

        fresh = LocalStore(store_path)
        assert fresh.load() is True
        assert fresh.all() == store.all()

    def test_file_has_metadata(self, store, store_path):
        store.insert(_record(1))
        store.persist()

        data = json.loads(store_path.read_text())
        assert data['version'] == 1
        assert 'saved_at' in data
        assert data['prs'][0]['id'] == 1

    def test_load_without_file(self, store):
        assert store.load() is False
        assert store.is_loaded is False

    def test_load_is_idempotent(self, store, store_path):
        store.insert(_record(1))
        store.persist()

        fresh = LocalStore(store_path)
        fresh.load()
        fresh.load()
        assert fresh.count == 1

    def test_persist_creates_parent_directory(self, tmp_path):
        store = LocalStore(tmp_path / 'nested' / 'dir' / 'db.json')
        store.persist()
        assert (tmp_path / 'nested' / 'dir' / 'db.json').exists()

    def test_corrupt_file_raises_store_error(self, store, store_path):
        store_path.write_text('{not json')
        with pytest.raises(StoreError):
            store.load()

    def test_missing_collection_raises_store_error(self, store, store_path):
        store_path.write_text(json.dumps({'version': 1}))
        with pytest.raises(StoreError):
            store.load()

    def test_unknown_version_raises_store_error(self, store, store_path):
        store_path.write_text(json.dumps({'version': 99, 'prs': []}))
        with pytest.raises(StoreError):
            store.load()

    def test_invalid_record_raises_store_error(self, store, store_path):
        store_path.write_text(json.dumps({'version': 1, 'prs': [{'id': 1, 'state': 'merged'}]}))
        with pytest.raises(StoreError):
            store.load()
