# The MIT License (MIT)
# Copyright © 2025 Entrius

# =============================================================================
# GitHub API
# =============================================================================
BASE_GITHUB_API_URL = "https://api.github.com"
SEARCH_ISSUES_URL = f"{BASE_GITHUB_API_URL}/search/issues"
SEARCH_PER_PAGE = 100  # max allowed by the search API
SEARCH_RESULT_CAP = 1000  # search API never returns more than this per query
REQUEST_TIMEOUT_SECONDS = 30

# =============================================================================
# Organization
# =============================================================================
DEFAULT_ORG = "ramda"
DEFAULT_FIRST_PR_YEAR = 2013
WINDOW_SPAN_YEARS = 2

# =============================================================================
# Records & Filtering
# =============================================================================
TIMESTAMP_FIELDS = ["created_at", "updated_at", "merged_at", "closed_at"]
EPOCH_SUFFIX = "_epoch"
DISPLAY_FIELDS = ["title", "user", "created_at", "closed_at", "state"]

ALL_STATES = "all"
VALID_STATES = ["open", "closed", "merged", ALL_STATES]
VALID_TIMESTAMP_TYPES = ["created", "updated", "closed"]

# an open PR never carries a closed timestamp; closed/merged "updated" is not
# distinct enough from "closed" to be worth filtering on
STATE_TIMESTAMP_COMPATIBILITY = {
    "open": ["created", "updated"],
    "closed": ["created", "closed"],
    "merged": ["created", "closed"],
    "all": ["created", "updated", "closed"],
}

USER_DATE_FORMAT = "M/D/YYYY"

# =============================================================================
# Local Storage
# =============================================================================
STORE_FORMAT_VERSION = 1
STORE_COLLECTION = "prs"
