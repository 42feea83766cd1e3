"""JSON-RPC transport clients."""

from defilter.clients.rpc import RPC

__all__ = ["RPC"]
