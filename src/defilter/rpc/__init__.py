"""JSON-RPC surface: filter methods and request routing."""

from defilter.rpc.dispatch import FilterProvider
from defilter.rpc.methods import FilterMethods

__all__ = ["FilterMethods", "FilterProvider"]
