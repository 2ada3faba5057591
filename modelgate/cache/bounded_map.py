"""
Bounded ordered map.

Sandi Metz Principles:
- Single Responsibility: Capacity bounding with an eviction policy
- Open/Closed: FIFO today, LRU by configuration
- Memory-bounded: Never holds more than max_size items
"""

from collections import OrderedDict
from enum import Enum
from typing import Callable, Generic, Iterator, List, Optional, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class EvictionPolicy(str, Enum):
    """Which entry leaves first when the map is full."""

    FIFO = "fifo"
    LRU = "lru"


class BoundedOrderedMap(Generic[K, V]):
    """
    Insertion-ordered map with a hard capacity.

    Under FIFO, reads never change order; under LRU, reads move the key to
    the back. Writes always place the key at the back.
    """

    def __init__(
        self,
        max_size: int,
        policy: EvictionPolicy = EvictionPolicy.FIFO,
        on_evict: Optional[Callable[[K, V], None]] = None,
    ):
        """
        Initialize map.

        Args:
            max_size: Maximum number of items
            policy: Eviction policy
            on_evict: Called with (key, value) for every capacity eviction
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._policy = policy
        self._on_evict = on_evict
        self._items: "OrderedDict[K, V]" = OrderedDict()

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Get value, applying the policy's read behaviour."""
        if key not in self._items:
            return default
        if self._policy is EvictionPolicy.LRU:
            self._items.move_to_end(key)
        return self._items[key]

    def peek(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Get value without touching order."""
        return self._items.get(key, default)

    def put(self, key: K, value: V) -> List[Tuple[K, V]]:
        """
        Insert or replace a key at the back of the order.

        Args:
            key: Key
            value: Value

        Returns:
            Items evicted to make room
        """
        if key in self._items:
            del self._items[key]
        self._items[key] = value
        return self._evict_overflow()

    def pop(self, key: K, default: Optional[V] = None) -> Optional[V]:
        return self._items.pop(key, default)

    def oldest(self) -> Optional[Tuple[K, V]]:
        """Entry that would be evicted next."""
        for key, value in self._items.items():
            return key, value
        return None

    def clear(self) -> None:
        self._items.clear()

    def keys(self) -> List[K]:
        return list(self._items.keys())

    def values(self) -> List[V]:
        return list(self._items.values())

    def items(self) -> List[Tuple[K, V]]:
        return list(self._items.items())

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def policy(self) -> EvictionPolicy:
        return self._policy

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._items))

    def _evict_overflow(self) -> List[Tuple[K, V]]:
        evicted = []
        while len(self._items) > self._max_size:
            key, value = self._items.popitem(last=False)
            evicted.append((key, value))
            if self._on_evict is not None:
                self._on_evict(key, value)
        return evicted
