"""Store module for KV-REST."""

from .ordered import Filter, OrderedDict

__all__ = ["Filter", "OrderedDict"]
