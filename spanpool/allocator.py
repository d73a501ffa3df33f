"""Typed allocator on top of the calling thread's cache."""

from spanpool.thread_cache import get_thread_cache

SIZE_MAX = 2**64 - 1
"""Largest byte count a request may describe."""


class Allocator:
    """Allocates arrays of items of ``item_size`` bytes each."""

    def __init__(self, item_size, thread_cache=None):
        if item_size < 1:
            raise ValueError(f"item size must be positive: {item_size}")
        self.item_size = item_size
        self.thread_cache = thread_cache if thread_cache is not None else get_thread_cache()

    def allocate(self, n):
        """Return the address of room for ``n`` items, or ``None`` when ``n`` is zero."""
        if n < 0:
            raise ValueError(f"item count must not be negative: {n}")
        if n > self.max_size():
            raise OverflowError(f"item count exceeds the maximum: {n}")
        if n == 0:
            return None
        return self.thread_cache.allocate(n * self.item_size)

    def deallocate(self, address, n):
        """Give back room for ``n`` items at ``address``; ``None`` is ignored."""
        if address is None:
            return
        self.thread_cache.deallocate(address, n * self.item_size)

    def max_size(self):
        """Return the largest item count a single request may ask for."""
        return SIZE_MAX // self.item_size

    def __eq__(self, other):
        if not isinstance(other, Allocator):
            return NotImplemented
        return self.thread_cache is other.thread_cache

    def __hash__(self):
        return id(self.thread_cache)