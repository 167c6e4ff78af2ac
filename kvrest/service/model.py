"""
Model Interface

A Model is a caller-defined entity that the CRUD service can store. The
service never looks inside a model; it only relies on the hooks below.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict


class Model(ABC):
    """
    Interface for a storable model.

    Business hooks:
        validate()  - raise ValueError if the model is invalid
        make_key()  - derive the primary key from a sequence number
        merge()     - apply a partial update onto this model

    Codec hooks:
        load()      - populate a blank model from decoded payload data
        dump()      - export the model as plain data for encoding
    """

    @abstractmethod
    def validate(self) -> None:
        """Raise ValueError if the model breaks a business rule."""

    @abstractmethod
    def make_key(self, sequence: int) -> str:
        """
        Create the primary key for this model.

        Implementations may also set derived fields as a side effect.

        Args:
            sequence: The service's key-sequence counter

        Returns:
            The key to store the model under
        """

    @abstractmethod
    def merge(self, other: "Model") -> None:
        """
        Merge a partial model into this model.

        Raises:
            TypeError: If ``other`` cannot be merged into this model
            ValueError: If the merged contents are unacceptable
        """

    @abstractmethod
    def load(self, data: Dict[str, Any]) -> None:
        """
        Populate this model from decoded payload data.

        Fields absent from ``data`` are left untouched so that a blank
        model can carry a partial update.

        Raises:
            KeyError, TypeError, ValueError: If the data is malformed
        """

    @abstractmethod
    def dump(self) -> Dict[str, Any]:
        """Return the model as a dict of plain, encodable values."""


# Constructs a blank Model given no arguments.
ModelBuilder = Callable[[], Model]
