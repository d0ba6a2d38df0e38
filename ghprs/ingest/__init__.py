# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Ingestion pipeline: query windows -> paginated search -> normalized records.
"""

from .fetcher import PageFetcher, ingest_windows
from .partition import build_query_windows
from .transform import normalize_pull_request, transform_timestamp

__all__ = [
    'PageFetcher',
    'ingest_windows',
    'build_query_windows',
    'normalize_pull_request',
    'transform_timestamp',
]
