"""Core data models, configuration, errors and ports.

This package provides:
- Data models (Filter, LogCriteria, Block, LogQuery)
- Configuration classes (RPCConfig, FilterEngineConfig)
- Error taxonomy (InvalidFilterParams, FilterNotFound, BlockFetchError, LogQueryError)
- Source interfaces (IBlockSource, ILogQuerySource)
"""

from defilter.core.config import FilterEngineConfig, RPCConfig
from defilter.core.errors import (
    BlockFetchError,
    FilterError,
    FilterNotFound,
    InvalidFilterParams,
    LogQueryError,
    RPCError,
)
from defilter.core.interfaces import IBlockSource, ILogQuerySource
from defilter.core.models import LATEST, Block, Filter, LogCriteria, LogQuery

__all__ = [
    "FilterEngineConfig",
    "RPCConfig",
    "BlockFetchError",
    "FilterError",
    "FilterNotFound",
    "InvalidFilterParams",
    "LogQueryError",
    "RPCError",
    "IBlockSource",
    "ILogQuerySource",
    "LATEST",
    "Block",
    "Filter",
    "LogCriteria",
    "LogQuery",
]
