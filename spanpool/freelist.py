"""Free list of block addresses."""


class FreeList:
    """Last-in, first-out list of free block addresses.

    ``max_size`` is the batch size used when blocks are fetched or returned.
    """

    __slots__ = ("_items", "max_size")

    def __init__(self):
        self._items = []
        self.max_size = 1

    def front(self):
        """Return the address at the front without removing it."""
        if not self._items:
            raise IndexError("front of an empty free list")
        return self._items[-1]

    def push_front(self, address):
        """Put ``address`` at the front."""
        self._items.append(address)

    def pop_front(self):
        """Remove and return the address at the front."""
        if not self._items:
            raise IndexError("pop from an empty free list")
        return self._items.pop()

    def clear(self):
        """Drop every address and reset ``max_size`` to 1."""
        self._items.clear()
        self.max_size = 1

    def __iter__(self):
        return iter(self._items[::-1])

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)

    def __repr__(self):
        return f"FreeList(size={len(self._items)}, max_size={self.max_size})"