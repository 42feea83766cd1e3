"""Filter parameter normalization (pure, no I/O).

Raw `eth_newFilter` objects are validated with pydantic, then reduced to a
`LogCriteria`:

- block specifier: absent / "latest" / "pending" -> LATEST, "earliest" -> 0,
  0x-prefixed hex -> int, anything else -> InvalidFilterParams
- address: absent -> None (any), single -> one-element tuple, list -> as-is
- topics: absent -> (), otherwise passed through unchanged

`LATEST` is resolved against the head only when a query is built.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from defilter.core.errors import InvalidFilterParams
from defilter.core.models import LATEST, BlockTag, LogCriteria, LogQuery
from defilter.filters.ranges import hex_to_int

_LATEST_ALIASES = frozenset({"latest", "pending"})


class FilterParams(BaseModel):
    """Shape of an `eth_newFilter` parameter object."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    from_block: Optional[str] = Field(default=None, alias="fromBlock")
    to_block: Optional[str] = Field(default=None, alias="toBlock")
    address: Union[str, list[str], None] = None
    topics: Optional[list[Any]] = None


def normalize_block_tag(value: str | None) -> BlockTag:
    """Normalize a block specifier to a height or LATEST."""
    if value is None or value in _LATEST_ALIASES:
        return LATEST
    if value == "earliest":
        return 0
    try:
        return hex_to_int(value)
    except ValueError as e:
        raise InvalidFilterParams(f"Invalid block option: {value}") from e


def normalize_addresses(address: str | list[str] | None) -> tuple[str, ...] | None:
    if address is None:
        return None
    if isinstance(address, str):
        return (address,)
    return tuple(address)


def normalize_filter(raw: dict[str, Any] | None) -> LogCriteria:
    """Validate and normalize raw `eth_newFilter` parameters.

    Raises
    ------
    InvalidFilterParams
        If the object is malformed or a block specifier cannot be parsed.
    """
    try:
        params = FilterParams.model_validate(raw or {})
    except ValidationError as e:
        raise InvalidFilterParams(f"Invalid filter params: {e.error_count()} error(s)") from e

    return LogCriteria(
        from_block=normalize_block_tag(params.from_block),
        to_block=normalize_block_tag(params.to_block),
        addresses=normalize_addresses(params.address),
        topics=tuple(params.topics) if params.topics is not None else (),
    )


def resolve_tag(tag: BlockTag, head: int) -> int:
    """Substitute the current head for LATEST."""
    return head if tag == LATEST else tag


def criteria_to_query(criteria: LogCriteria, head: int, *, from_height: int | None = None) -> LogQuery:
    """Build a concrete log query, resolving LATEST against `head`.

    `from_height` overrides the criteria's lower bound (change scans start at
    the filter cursor rather than at `from_block`).
    """
    lo = resolve_tag(criteria.from_block, head) if from_height is None else from_height
    return LogQuery(
        from_height=lo,
        to_height=resolve_tag(criteria.to_block, head),
        addresses=criteria.addresses,
        topics=criteria.topics,
    )
