# The MIT License (MIT)
# Copyright © 2025 Entrius

from .local_store import LocalStore, StoreError

__all__ = ['LocalStore', 'StoreError']
