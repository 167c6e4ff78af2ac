"""
IO Service Module

This module implements the snapshot persistence decorator.

IOService wraps any Service behind an IOHandler. It keeps no models of
its own: every call loads a full snapshot from the handler, delegates to
it, and for mutating calls saves the snapshot back afterwards.

    read:   load -> delegate
    write:  load -> delegate -> save (only if delegation succeeded)

A failed delegation is never saved, so the stored snapshot is unchanged.
A failed save is reported as PersistenceError even though the in-memory
mutation succeeded; the mutation is lost on the next load.

The load-delegate-save window is not atomic. Two interleaved writers
will lose one of the updates (last successful save wins).
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..errors import PersistenceError
from .base import Params, Payload, Service
from .model import Model

logger = logging.getLogger(__name__)


class IOHandler(ABC):
    """
    Interface for persisting a Service.

    Contract: after save(s), load() returns a Service whose browse() with
    no parameters yields models equal to those of ``s``, in the same order.
    """

    @abstractmethod
    def save(self, service: Service) -> None:
        """Persist the given service."""

    @abstractmethod
    def load(self) -> Service:
        """Reconstruct the last saved service."""


class IOService(Service):
    """
    Service persisted through an IOHandler.

    Usage:
        service = IOService(FileHandler("todos.db", new_todo_service))
        service.create(b'{"content": "buy milk"}')

    Attributes:
        handler: The IOHandler snapshots are loaded from and saved to
    """

    def __init__(self, handler: IOHandler):
        self.handler = handler

    def _load(self, operation: str) -> Service:
        try:
            return self.handler.load()
        except Exception as exc:
            logger.warning(f"Snapshot load failed during {operation}: {exc}")
            raise PersistenceError(operation, exc) from exc

    def _save(self, operation: str, service: Service) -> None:
        try:
            self.handler.save(service)
        except Exception as exc:
            logger.warning(f"Snapshot save failed during {operation}: {exc}")
            raise PersistenceError(operation, exc) from exc
        logger.debug(f"Snapshot saved after {operation}")

    def browse(self, params: Params = None) -> List[Model]:
        return self._load("browse").browse(params)

    def delete(self, params: Params = None) -> List[Model]:
        service = self._load("delete")
        models = service.delete(params)
        self._save("delete", service)
        return models

    def create(self, payload: Payload) -> Model:
        service = self._load("create")
        model = service.create(payload)
        self._save("create", service)
        return model

    def select(self, key: str) -> Model:
        return self._load("select").select(key)

    def remove(self, key: str) -> Model:
        service = self._load("remove")
        model = service.remove(key)
        self._save("remove", service)
        return model

    def update(self, key: str, payload: Payload) -> Model:
        service = self._load("update")
        model = service.update(key, payload)
        self._save("update", service)
        return model

    def modify(self, key: str, payload: Payload) -> Model:
        service = self._load("modify")
        model = service.modify(key, payload)
        self._save("modify", service)
        return model
