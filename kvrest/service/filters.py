"""
Filter Factories

A filter factory receives caller-supplied query parameters and returns a
predicate over models. Predicates must be pure functions of the model.
"""

from typing import Any, Callable, Mapping, Optional

from ..store.ordered import Filter

FilterFactory = Callable[[Optional[Mapping[str, str]]], Filter]


def match_all(model: Any) -> bool:
    """Predicate accepting every model."""
    return True


def format_field(value: Any) -> str:
    """Render a dumped field the way it appears in query parameters."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def field_filter(params: Optional[Mapping[str, str]] = None) -> Filter:
    """
    Build a predicate matching models field by field.

    Each parameter must equal the string form of the same field in the
    model's dump(). Parameters naming a field the model does not have
    never match.

    Examples:
        >>> predicate = field_filter({"done": "true"})
        >>> predicate(todo)  # True iff todo.done is True
    """
    criteria = dict(params or {})
    if not criteria:
        return match_all

    def predicate(model: Any) -> bool:
        fields = model.dump()
        for name, expected in criteria.items():
            if name not in fields or format_field(fields[name]) != expected:
                return False
        return True

    return predicate
