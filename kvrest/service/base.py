"""
Service Interface

A Service manipulates the models of a backend. DictService keeps them in
memory and IOService persists any other Service as snapshots; callers
can use either interchangeably.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Mapping, Optional, Union

from .model import Model

# Raw request body handed to create/update/modify
Payload = Union[bytes, str]

# Caller-supplied query parameters for browse/delete
Params = Optional[Mapping[str, str]]


class Service(ABC):
    """Interface for CRUD operations over a store of models."""

    @abstractmethod
    def browse(self, params: Params = None) -> List[Model]:
        """Return the models matching the filter built from ``params``."""

    @abstractmethod
    def delete(self, params: Params = None) -> List[Model]:
        """Remove and return the models matching the filter built from ``params``."""

    @abstractmethod
    def create(self, payload: Payload) -> Model:
        """Decode, validate and store a new model."""

    @abstractmethod
    def select(self, key: str) -> Model:
        """Return the model stored under ``key``."""

    @abstractmethod
    def remove(self, key: str) -> Model:
        """Remove and return the model stored under ``key``."""

    @abstractmethod
    def update(self, key: str, payload: Payload) -> Model:
        """Replace the entire model stored under ``key``."""

    @abstractmethod
    def modify(self, key: str, payload: Payload) -> Model:
        """Merge a partial payload into the model stored under ``key``."""


# Constructs a fresh, empty Service given no arguments.
ServiceBuilder = Callable[[], Service]
