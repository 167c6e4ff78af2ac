"""
Todo Model

The model served by the bundled server, and a compact example of how to
implement the Model hooks.

Payload shape (all fields optional on input):
    {"key": "3", "content": "...", "created_at": "2024-01-01T00:00:00+00:00", "done": true}
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from ..service.dict_service import DictService
from ..service.model import Model
from ..store.ordered import Filter


def _parse_time(value: Any) -> datetime:
    if not isinstance(value, str):
        raise TypeError("created_at must be an ISO 8601 string")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _expect(data: Dict[str, Any], name: str, kind: type) -> Any:
    value = data[name]
    if not isinstance(value, kind):
        raise TypeError(f"{name} must be of type {kind.__name__}")
    return value


@dataclass
class Todo(Model):
    """
    A todo item.

    Attributes:
        key: Primary key, assigned by make_key()
        content: Description, must not be empty
        created_at: Creation time, must not be in the future
        done: Completion flag
    """

    key: Optional[str] = None
    content: Optional[str] = None
    created_at: Optional[datetime] = None
    done: Optional[bool] = None

    def __post_init__(self):
        # Naive times are taken as UTC, as for decoded payloads
        if self.created_at is not None and self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=timezone.utc)

    def validate(self) -> None:
        if not self.content:
            raise ValueError("todo content is empty")
        if self.created_at is not None and self.created_at > datetime.now(timezone.utc):
            raise ValueError("todo is created in the future")

    def make_key(self, sequence: int) -> str:
        self.key = str(sequence)
        self.done = sequence & 1 == 1
        return self.key

    def merge(self, other: Model) -> None:
        if not isinstance(other, Todo):
            raise TypeError("attempted to merge non-Todo object")
        # Only fields present in the partial payload are applied
        if other.content is not None:
            self.content = other.content
        if other.created_at is not None:
            self.created_at = other.created_at
        if other.done is not None:
            self.done = other.done

    def load(self, data: Dict[str, Any]) -> None:
        if "key" in data:
            self.key = _expect(data, "key", str)
        if "content" in data:
            self.content = _expect(data, "content", str)
        if "created_at" in data:
            self.created_at = _parse_time(data["created_at"])
        if "done" in data:
            self.done = _expect(data, "done", bool)

    def dump(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "done": self.done,
        }


def todo_filter(params: Optional[Mapping[str, str]] = None) -> Filter:
    """
    Build a predicate from query parameters.

    ``done=true`` keeps finished todos and ``done=false`` unfinished ones.
    Any other value, or no ``done`` parameter, keeps everything.
    """
    done = (params or {}).get("done", "")

    def predicate(todo: Todo) -> bool:
        if done == "true":
            return bool(todo.done)
        if done == "false":
            return not todo.done
        return True

    return predicate


def new_todo_service() -> DictService:
    """Create an empty in-memory todo service."""
    return DictService(Todo, todo_filter)
