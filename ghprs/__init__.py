# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
ghprs - organization pull request census.

Fetches every pull request of a GitHub organization through the search API,
keeps a normalized local copy and answers state / date range queries against it.
"""

__version__ = "1.0.0"
