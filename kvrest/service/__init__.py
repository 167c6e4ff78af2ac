"""Service module for KV-REST."""

from .base import Params, Payload, Service, ServiceBuilder
from .codec import JSONCodec
from .dict_service import DictService
from .filters import FilterFactory, field_filter, match_all
from .io_service import IOHandler, IOService
from .model import Model, ModelBuilder

__all__ = [
    "DictService",
    "FilterFactory",
    "IOHandler",
    "IOService",
    "JSONCodec",
    "Model",
    "ModelBuilder",
    "Params",
    "Payload",
    "Service",
    "ServiceBuilder",
    "field_filter",
    "match_all",
]
