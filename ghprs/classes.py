# The MIT License (MIT)
# Copyright © 2025 Entrius

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ghprs.constants import DISPLAY_FIELDS, EPOCH_SUFFIX, TIMESTAMP_FIELDS


class PRState(Enum):
    """Lifecycle state of a stored PR"""

    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"


class DuplicatePolicy(Enum):
    """How the store treats a record whose id it already holds"""

    APPEND = "append"
    UPSERT = "upsert"


class FailureKind(Enum):
    """Why a single search request failed"""

    NETWORK = "network"
    RATE_LIMITED = "rate_limited"
    HTTP_STATUS = "http_status"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class QueryWindow:
    """Creation-date range [start_year-01-01, end_year-12-31] for one search query"""

    start_year: int
    end_year: int

    @property
    def start_date(self) -> str:
        return f"{self.start_year}-01-01"

    @property
    def end_date(self) -> str:
        return f"{self.end_year}-12-31"

    @property
    def search_term(self) -> str:
        return f"created:{self.start_date}..{self.end_date}"

    def __str__(self) -> str:
        return f"{self.start_date}..{self.end_date}"


@dataclass(frozen=True)
class PullRequestRecord:
    """One normalized pull request as kept in the local store.

    Every timestamp is stored twice: an en-US display string and the epoch
    milliseconds used for range comparisons. Both are None when the remote
    timestamp was null.
    """

    id: int
    title: str
    user: str
    state: PRState
    created_at: Optional[str] = None
    created_at_epoch: Optional[int] = None
    updated_at: Optional[str] = None
    updated_at_epoch: Optional[int] = None
    merged_at: Optional[str] = None
    merged_at_epoch: Optional[int] = None
    closed_at: Optional[str] = None
    closed_at_epoch: Optional[int] = None

    def __post_init__(self):
        for name in TIMESTAMP_FIELDS:
            formatted = getattr(self, name)
            epoch = getattr(self, f"{name}{EPOCH_SUFFIX}")
            if (formatted is None) != (epoch is None):
                raise ValueError(f"{name} and {name}{EPOCH_SUFFIX} must both be set or both be None")
        if self.state == PRState.MERGED and self.merged_at_epoch is None:
            raise ValueError(f"PR {self.id} is merged but has no merged_at timestamp")

    @property
    def is_merged(self) -> bool:
        return self.state == PRState.MERGED

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "user": self.user,
            "state": self.state.value,
        }
        for name in TIMESTAMP_FIELDS:
            data[name] = getattr(self, name)
            data[f"{name}{EPOCH_SUFFIX}"] = getattr(self, f"{name}{EPOCH_SUFFIX}")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PullRequestRecord":
        timestamps = {}
        for name in TIMESTAMP_FIELDS:
            timestamps[name] = data.get(name)
            timestamps[f"{name}{EPOCH_SUFFIX}"] = data.get(f"{name}{EPOCH_SUFFIX}")
        return cls(
            id=int(data["id"]),
            title=data.get("title") or "",
            user=data.get("user") or "",
            state=PRState(data["state"]),
            **timestamps,
        )

    def display_dict(self) -> Dict[str, Any]:
        """Reduce the record to the fields shown to the user."""
        data = self.to_dict()
        return {key: data[key] for key in DISPLAY_FIELDS}


@dataclass
class PageResult:
    """Outcome of requesting one page of one window"""

    window: QueryWindow
    page: int
    ok: bool
    records: int = 0
    skipped: int = 0  # items that could not be normalized
    failure_kind: Optional[FailureKind] = None
    error: Optional[str] = None


@dataclass
class WindowResult:
    """Outcome of draining one window"""

    window: QueryWindow
    total_pages: int
    probe_ok: bool = True
    total_count: Optional[int] = None
    persisted: bool = False
    pages: List[PageResult] = field(default_factory=list)

    @property
    def records_inserted(self) -> int:
        return sum(p.records for p in self.pages)

    @property
    def failed_pages(self) -> List[PageResult]:
        return [p for p in self.pages if not p.ok]


@dataclass
class FetchSummary:
    """Aggregated outcome of a full ingestion run"""

    windows: List[WindowResult] = field(default_factory=list)

    @property
    def pages_attempted(self) -> int:
        return sum(len(w.pages) for w in self.windows)

    @property
    def pages_failed(self) -> int:
        return sum(len(w.failed_pages) for w in self.windows)

    @property
    def probes_failed(self) -> int:
        return sum(1 for w in self.windows if not w.probe_ok)

    @property
    def records_inserted(self) -> int:
        return sum(w.records_inserted for w in self.windows)

    @property
    def items_skipped(self) -> int:
        return sum(p.skipped for w in self.windows for p in w.pages)

    @property
    def is_complete(self) -> bool:
        return (
            self.pages_failed == 0
            and self.probes_failed == 0
            and self.items_skipped == 0
            and all(w.persisted for w in self.windows)
        )

    def __str__(self) -> str:
        return (
            f"FetchSummary(windows={len(self.windows)}, pages={self.pages_attempted}, "
            f"failed={self.pages_failed}, records={self.records_inserted})"
        )
