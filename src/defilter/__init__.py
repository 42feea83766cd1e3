from __future__ import annotations

from .clients.rpc import RPC
from .core.config import FilterEngineConfig, RPCConfig
from .core.errors import (
    BlockFetchError,
    FilterError,
    FilterNotFound,
    InvalidFilterParams,
    LogQueryError,
    RPCError,
)
from .core.models import LATEST, Block, Filter, LogCriteria, LogQuery
from .filters.engine import FilterEngine
from .rpc.dispatch import FilterProvider
from .rpc.methods import FilterMethods

__all__ = [
    "RPC",
    "FilterEngineConfig",
    "RPCConfig",
    "BlockFetchError",
    "FilterError",
    "FilterNotFound",
    "InvalidFilterParams",
    "LogQueryError",
    "RPCError",
    "LATEST",
    "Block",
    "Filter",
    "LogCriteria",
    "LogQuery",
    "FilterEngine",
    "FilterProvider",
    "FilterMethods",
]
