"""Block-height helpers for range scans.

Functions
---------
- hex_to_int / int_to_hex: JSON-RPC quantity encoding.
- int_range: half-open integer range, empty when start >= stop.
- block_delta: heights strictly after a cursor up to and including a head.

Heights and ids of 0 are ordinary values and encode as "0x0".
"""

from __future__ import annotations

from eth_utils import is_0x_prefixed, is_hexstr, to_int


def hex_to_int(value: str) -> int:
    """Parse a 0x-prefixed hex quantity.

    Raises
    ------
    ValueError
        If `value` is not a non-empty 0x-prefixed hex string.
    """
    if not isinstance(value, str) or not is_0x_prefixed(value) or not is_hexstr(value):
        raise ValueError(f"not a hex quantity: {value!r}")
    if len(value) == 2:
        raise ValueError(f"empty hex quantity: {value!r}")
    return to_int(hexstr=value)


def int_to_hex(value: int) -> str:
    """Return a 0x-prefixed hex quantity."""
    return hex(value)


def int_range(start: int, stop: int) -> list[int]:
    """Return [start, stop) as a list; empty for an empty or inverted range."""
    if start >= stop:
        return []
    return list(range(start, stop))


def block_delta(cursor: int, head: int) -> list[int]:
    """Heights in (cursor, head], ascending."""
    return int_range(cursor + 1, head + 1)
