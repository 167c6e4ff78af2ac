"""
Dict Service Module

This module implements the CRUD service that keeps models in an
OrderedDict.

The order of checks inside each operation is observable by callers and
must not change:

    create: decode -> make_key -> validate -> insert -> count += 1
    update: decode -> validate -> existence
    modify: decode -> existence -> merge (working copy) -> validate -> store

Decode and validation failures are raised before anything is written,
so a failed call leaves the dict and the counter exactly as they were.
"""

import copy
import logging
from typing import Any, Dict, List

from ..config.settings import settings
from ..errors import DecodeError, KeyExists, KeyMissing, ValidationError
from ..store.ordered import OrderedDict
from .base import Params, Payload, Service
from .codec import JSONCodec
from .filters import FilterFactory, field_filter
from .model import Model, ModelBuilder

logger = logging.getLogger(__name__)


class DictService(Service):
    """
    In-memory Service backed by an OrderedDict.

    Usage:
        service = DictService(Todo, todo_filter)
        todo = service.create(b'{"content": "write docs"}')
        service.select(todo.key)

    Attributes:
        dict: The OrderedDict holding the models
        count: Key-sequence counter, incremented after each successful create
        build: Constructs blank models to decode payloads into
        filter_factory: Builds browse/delete predicates from query parameters
        codec: Decodes raw payloads
    """

    def __init__(
            self,
            build: ModelBuilder,
            filter_factory: FilterFactory = None,
            codec: JSONCodec = None,
            capacity: int = None,
    ):
        """
        Initialize the service with an empty dict.

        Args:
            build: Model builder (e.g. the model class itself)
            filter_factory: Filter factory (default field_filter)
            codec: Payload codec (default JSONCodec)
            capacity: Capacity hint (default from settings.INITIAL_CAPACITY)
        """
        self.build = build
        self.filter_factory = filter_factory if filter_factory is not None else field_filter
        self.codec = codec if codec is not None else JSONCodec()
        self.dict = OrderedDict(capacity)
        self.count = 0

    def _decode(self, payload: Payload) -> Model:
        data = self.codec.decode(payload)
        model = self.build()
        try:
            model.load(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise DecodeError(exc) from exc
        return model

    @staticmethod
    def _validate(model: Model) -> None:
        try:
            model.validate()
        except ValueError as exc:
            raise ValidationError(exc) from exc

    def browse(self, params: Params = None) -> List[Model]:
        """
        Return stored models matching the filter, in ascending key order.

        Args:
            params: Query parameters handed to the filter factory
        """
        indices = self.dict.search(self.filter_factory(params))
        return [self.dict.values[i] for i in indices]

    def delete(self, params: Params = None) -> List[Model]:
        """
        Remove and return stored models matching the filter.

        Matches are resolved to keys before anything is removed, since
        every removal shifts the indices that follow it.

        Raises:
            KeyMissing: If a matched key is gone by the time it is removed
        """
        indices = self.dict.search(self.filter_factory(params))
        keys = [self.dict.keys[i] for i in indices]

        # Every stored key matched: same result as removing one by one
        if len(keys) == len(self.dict):
            models = list(self.dict.values)
            self.dict.clear()
            logger.debug(f"Cleared {len(models)} models")
            return models

        models = []
        for key in keys:
            model = self.dict.remove(key)
            if model is None:
                raise KeyMissing(key)
            models.append(model)

        logger.debug(f"Deleted {len(models)} models")
        return models

    def create(self, payload: Payload) -> Model:
        """
        Decode, validate and store a new model.

        The key is derived from the current counter, which only advances
        once the model has been stored.

        Raises:
            DecodeError: If the payload is malformed
            ValidationError: If the model is invalid
            KeyExists: If the derived key is already stored
        """
        model = self._decode(payload)

        key = model.make_key(self.count)
        self._validate(model)

        if not self.dict.insert(key, model):
            raise KeyExists(key)

        self.count += 1
        logger.debug(f"Created {key} (count={self.count})")
        return model

    def select(self, key: str) -> Model:
        """
        Return the model stored under a key.

        Raises:
            KeyMissing: If the key is not stored
        """
        model = self.dict.get(key)
        if model is None:
            raise KeyMissing(key)
        return model

    def remove(self, key: str) -> Model:
        """
        Remove and return the model stored under a key.

        Raises:
            KeyMissing: If the key is not stored
        """
        model = self.dict.remove(key)
        if model is None:
            raise KeyMissing(key)
        logger.debug(f"Removed {key}")
        return model

    def update(self, key: str, payload: Payload) -> Model:
        """
        Replace the entire model stored under a key.

        Validation runs before the existence check, so an invalid payload
        for a missing key reports ValidationError.

        Raises:
            DecodeError: If the payload is malformed
            ValidationError: If the replacement is invalid
            KeyMissing: If the key is not stored
        """
        model = self._decode(payload)
        self._validate(model)

        if not self.dict.set(key, model):
            raise KeyMissing(key)

        logger.debug(f"Updated {key}")
        return model

    def modify(self, key: str, payload: Payload) -> Model:
        """
        Merge a partial payload into the model stored under a key.

        The merge happens on a copy; the stored model is only replaced if
        both the merge and the validation of the result succeed.

        Raises:
            DecodeError: If the payload is malformed
            KeyMissing: If the key is not stored
            ValidationError: If the merge fails or the result is invalid
        """
        patch = self._decode(payload)

        index = self.dict.index(key)
        if index == len(self.dict) or self.dict.keys[index] != key:
            raise KeyMissing(key)

        model = copy.deepcopy(self.dict.values[index])

        try:
            model.merge(patch)
        except (TypeError, ValueError) as exc:
            raise ValidationError(exc) from exc

        self._validate(model)

        self.dict.values[index] = model
        logger.debug(f"Modified {key}")
        return model

    def state(self) -> Dict[str, Any]:
        """
        Export the persistent state for snapshot handlers.

        Returns:
            Dictionary with keys, values and count
        """
        return {
            "keys": list(self.dict.keys),
            "values": list(self.dict.values),
            "count": self.count,
        }

    def restore(self, state: Dict[str, Any]) -> None:
        """
        Replace the persistent state with a snapshot from state().

        Raises:
            ValueError: If the snapshot's keys and values do not line up,
                or the keys are not strictly ascending
        """
        keys, values = list(state["keys"]), list(state["values"])
        if len(keys) != len(values):
            raise ValueError(
                f"snapshot has {len(keys)} keys but {len(values)} values"
            )
        if not all(a < b for a, b in zip(keys, keys[1:])):
            raise ValueError("snapshot keys are not strictly ascending")

        self.dict.clear(max(len(keys), settings.INITIAL_CAPACITY))
        self.dict.keys = keys
        self.dict.values = values
        self.count = int(state["count"])

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the service.

        Returns:
            Dictionary containing:
            - total_keys: Number of stored models
            - count: Current key-sequence counter
            - capacity: Capacity hint of the underlying dict
        """
        return {
            "total_keys": len(self.dict),
            "count": self.count,
            "capacity": self.dict.capacity,
        }
