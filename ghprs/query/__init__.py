# The MIT License (MIT)
# Copyright © 2025 Entrius

from .filters import FilterRequest, InvalidFilterError, apply_filter, run_query, validate_filter

__all__ = ['FilterRequest', 'InvalidFilterError', 'apply_filter', 'run_query', 'validate_filter']
