# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
ghprs CLI

Usage:
    ghprs fetch                          # Fetch every PR of the organization
    ghprs get -s merged -l               # List merged PRs
    ghprs get -s open -t created -d 1/1/2020 12/31/2020
    ghprs clear                          # Empty the local store
    ghprs config set org ramda           # Persist a setting
"""

from .main import cli

__all__ = ['cli']
