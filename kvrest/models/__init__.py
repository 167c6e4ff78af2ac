"""Example models for KV-REST."""

from .todo import Todo, new_todo_service, todo_filter

__all__ = ["Todo", "new_todo_service", "todo_filter"]
