# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Split an organization's history into search windows.

The search API returns at most 1000 results per query, so the full history is
requested as a series of two-year creation-date windows instead.
"""

from datetime import datetime, timezone
from typing import List, Optional

from ghprs.classes import QueryWindow
from ghprs.constants import WINDOW_SPAN_YEARS


def build_query_windows(first_year: int, current_year: Optional[int] = None) -> List[QueryWindow]:
    """Build the ordered two-year windows from ``first_year`` up to ``current_year``.

    A window starts every two years while its start year is at most
    ``current_year - 1``; the last window therefore always reaches the current
    year (or the one after it).

    Args:
        first_year (int): Year of the organization's first PR.
        current_year (Optional[int]): Defaults to the current UTC year.

    Returns:
        List[QueryWindow]: Windows in ascending order, without gaps.
    """
    if current_year is None:
        current_year = datetime.now(timezone.utc).year

    windows = []
    year = first_year
    while year <= current_year - 1:
        windows.append(QueryWindow(start_year=year, end_year=year + WINDOW_SPAN_YEARS - 1))
        year += WINDOW_SPAN_YEARS
    return windows
