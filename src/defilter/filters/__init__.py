"""Client-side filter lifecycle: registry, expiry, range scans.

This package provides:
- FilterEngine: filter creation, polling, replay and removal
- FilterRegistry: installed filters and their cursors
- ExpiryScheduler: per-filter idle timers
- Parameter normalization and block-range helpers
"""

from defilter.filters.engine import FilterEngine
from defilter.filters.expiry import ExpiryScheduler, loop_timer_factory
from defilter.filters.normalize import criteria_to_query, normalize_block_tag, normalize_filter, resolve_tag
from defilter.filters.ranges import block_delta, hex_to_int, int_range, int_to_hex
from defilter.filters.registry import FilterRegistry

__all__ = [
    "FilterEngine",
    "ExpiryScheduler",
    "loop_timer_factory",
    "criteria_to_query",
    "normalize_block_tag",
    "normalize_filter",
    "resolve_tag",
    "block_delta",
    "hex_to_int",
    "int_range",
    "int_to_hex",
    "FilterRegistry",
]
