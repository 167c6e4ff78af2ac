"""
Ordered Dictionary Module

This module implements the sorted key/value container that backs the
CRUD service.

Keys are kept in a strictly ascending list with a parallel list of
values, so lookups are a binary search and iteration always yields
entries in key order. Insertion and removal shift the tail of both
lists and are therefore O(n), which is fine for small to moderate
collections.
"""

from bisect import bisect_left
from typing import Any, Callable, Iterator, List, Optional, Tuple

from ..config.settings import settings

# A predicate over stored values, used by search()
Filter = Callable[[Any], bool]


class OrderedDict:
    """
    Sorted-array mapping from string keys to opaque values.

    Invariant (between public calls):
        len(keys) == len(values) and keys is strictly ascending

    Time Complexity:
        index/get/set: O(log n)
        insert/remove: O(n)
        search:        O(n)

    Usage:
        d = OrderedDict()
        d.insert("b", 2)
        d.insert("a", 1)
        list(d)  # ['a', 'b']

    Attributes:
        keys: Stored keys in ascending order
        values: Stored values, values[i] belongs to keys[i]
        capacity: The capacity hint the dict was last cleared with
    """

    def __init__(self, capacity: int = None):
        """
        Initialize an empty dict.

        Args:
            capacity: Capacity hint (default from settings.INITIAL_CAPACITY)
        """
        self.keys: List[str] = []
        self.values: List[Any] = []
        self.capacity = capacity if capacity is not None else settings.INITIAL_CAPACITY

    def index(self, key: str) -> int:
        """
        Find the lowest index whose key is not less than ``key``.

        Returns len(self) when the key would be appended, and 0 for an
        empty dict.
        """
        return bisect_left(self.keys, key)

    def _find(self, key: str) -> Optional[int]:
        i = self.index(key)
        if i < len(self.keys) and self.keys[i] == key:
            return i
        return None

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get the value for a key.

        Args:
            key: The key to look up
            default: Returned when the key does not exist

        Returns:
            The stored value, or ``default`` if the key is missing
        """
        i = self._find(key)
        if i is None:
            return default
        return self.values[i]

    def set(self, key: str, value: Any) -> bool:
        """
        Replace the value of an existing key. Never inserts.

        Returns:
            True if the key existed, False otherwise
        """
        i = self._find(key)
        if i is None:
            return False
        self.values[i] = value
        return True

    def insert(self, key: str, value: Any) -> bool:
        """
        Insert a new key at its sorted position.

        Args:
            key: The key to insert
            value: The value to store under the key

        Returns:
            True if inserted, False if the key already exists (the dict
            is left unchanged)
        """
        i = self.index(key)
        if i < len(self.keys) and self.keys[i] == key:
            return False

        self.keys.insert(i, key)
        self.values.insert(i, value)
        return True

    def remove(self, key: str, default: Any = None) -> Any:
        """
        Remove a key and return its value.

        Args:
            key: The key to remove
            default: Returned when the key does not exist

        Returns:
            The removed value, or ``default`` if the key is missing
        """
        i = self._find(key)
        if i is None:
            return default

        # del shrinks both lists so the vacated slot holds no reference
        del self.keys[i]
        value = self.values[i]
        del self.values[i]
        return value

    def search(self, predicate: Filter) -> List[int]:
        """
        Collect the indices of values matching a predicate.

        Args:
            predicate: Function called with each value in key order

        Returns:
            Ascending list of matching indices (empty for an empty dict)
        """
        return [i for i, value in enumerate(self.values) if predicate(value)]

    def clear(self, capacity: int = None) -> None:
        """
        Reset to an empty dict.

        Args:
            capacity: New capacity hint (default from settings.INITIAL_CAPACITY)
        """
        self.keys = []
        self.values = []
        self.capacity = capacity if capacity is not None else settings.INITIAL_CAPACITY

    def items(self) -> Iterator[Tuple[str, Any]]:
        """Iterate over (key, value) pairs in key order."""
        return zip(self.keys, self.values)

    def __len__(self) -> int:
        return len(self.keys)

    def __contains__(self, key: str) -> bool:
        return self._find(key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"OrderedDict({{{pairs}}})"
