# dlx/trail.py: LIFO stacks of cell handles
from typing import Iterator, List, Optional


class Trail:
    """Stack of cell handles; the solution trail also carries ``complete``."""

    __slots__ = ("_items", "complete")

    def __init__(self) -> None:
        self._items: List[int] = []
        self.complete = False

    def push(self, x: int) -> None:
        self._items.append(x)

    def pop(self) -> int:
        return self._items.pop()

    def top(self) -> Optional[int]:
        return self._items[-1] if self._items else None

    def get(self, i: int) -> int:
        return self._items[i]

    def index(self, x: int) -> int:
        """Position of ``x`` counted from the bottom of the stack."""
        return self._items.index(x)

    def size(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> None:
        self._items.clear()
        self.complete = False

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[int]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"Trail({self._items!r}, complete={self.complete})"
