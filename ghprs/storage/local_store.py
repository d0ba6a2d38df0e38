# The MIT License (MIT)
# Copyright © 2025 Entrius

"""JSON file storage for normalized pull requests.

The whole collection lives in memory and is written back in one piece. One
process owns the file at a time; concurrent writers are not supported.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ghprs.classes import DuplicatePolicy, PRState, PullRequestRecord
from ghprs.constants import ALL_STATES, STORE_COLLECTION, STORE_FORMAT_VERSION

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """The backing file exists but cannot be read or written."""


class LocalStore:
    """File-backed collection of PullRequestRecord."""

    def __init__(self, path: Union[str, Path], policy: DuplicatePolicy = DuplicatePolicy.APPEND):
        self.path = Path(path)
        self.policy = policy
        self._records: List[PullRequestRecord] = []
        self._positions: Dict[int, int] = {}  # id -> index, maintained for upserts
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        """True once the store was read from, or written to, its backing file."""
        return self._loaded

    def __len__(self) -> int:
        return len(self._records)

    @property
    def count(self) -> int:
        return len(self._records)

    def all(self) -> List[PullRequestRecord]:
        return list(self._records)

    def insert(self, record: PullRequestRecord) -> None:
        """Add a record. Under UPSERT an existing record with the same id is replaced."""
        if self.policy == DuplicatePolicy.UPSERT and record.id in self._positions:
            self._records[self._positions[record.id]] = record
            return
        self._positions.setdefault(record.id, len(self._records))
        self._records.append(record)

    def find_by_state(self, state: Union[str, PRState]) -> List[PullRequestRecord]:
        """Records in exactly ``state``; every record for ``'all'``."""
        if state == ALL_STATES:
            return self.all()
        state = PRState(state)
        return [r for r in self._records if r.state == state]

    def find_by_range(
        self,
        field: str,
        low: int,
        high: int,
        records: Optional[Iterable[PullRequestRecord]] = None,
    ) -> List[PullRequestRecord]:
        """Records whose epoch ``field`` lies in [low, high].

        Records with a null value are excluded. Bounds are used as given, so
        ``low > high`` matches nothing. ``records`` narrows an earlier result
        instead of searching the whole store.
        """
        source = self._records if records is None else records
        matches = []
        for record in source:
            value = getattr(record, field)
            if value is not None and low <= value <= high:
                matches.append(record)
        return matches

    def clear(self) -> None:
        """Remove every record."""
        self._records = []
        self._positions = {}

    def load(self) -> bool:
        """Replace the in-memory records with the file contents.

        Returns:
            bool: False if there is no backing file yet (nothing fetched).

        Raises:
            StoreError: If the file is unreadable or not a valid store.
        """
        if not self.path.exists():
            return False

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise StoreError(f"Could not read store {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get(STORE_COLLECTION), list):
            raise StoreError(f"Store {self.path} has no '{STORE_COLLECTION}' collection")

        version = data.get('version')
        if version != STORE_FORMAT_VERSION:
            raise StoreError(f"Store {self.path} has unsupported version {version}")

        try:
            records = [PullRequestRecord.from_dict(item) for item in data[STORE_COLLECTION]]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Store {self.path} contains an invalid record: {e}") from e

        self.clear()
        for record in records:
            self.insert(record)
        self._loaded = True
        logger.debug(f"Loaded {len(self._records)} records from {self.path}")
        return True

    def persist(self) -> None:
        """Write every record to the backing file, replacing it atomically.

        Raises:
            StoreError: If the file cannot be written.
        """
        payload = {
            'version': STORE_FORMAT_VERSION,
            'saved_at': datetime.now(timezone.utc).isoformat(),
            STORE_COLLECTION: [record.to_dict() for record in self._records],
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f'.{self.path.name}.', suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(payload, f)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StoreError(f"Could not write store {self.path}: {e}") from e

        self._loaded = True
        logger.debug(f"Saved {len(self._records)} records to {self.path}")
