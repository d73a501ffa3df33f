"""Per-thread cache of free blocks, refilled from the central cache in batches."""

import threading
import weakref

from spanpool.central_cache import get_central_cache
from spanpool.freelist import FreeList
from spanpool.platform import aligned_free, aligned_malloc
from spanpool.size_class import (
    MAX_ARRAY_SIZE,
    MAX_BLOCK_NUM,
    MAX_MEMORY_SIZE,
    index_to_size,
    round_up,
    size_to_index,
)

# Alignment of requests too large for the pool, which go straight to the system.
_LARGE_ALIGNMENT = 16


def _return_batch(free_list, index, count, central):
    batch = [free_list.pop_front() for _ in range(count)]
    central.return_range(index_to_size(index), batch)


def _release_all(free_lists, central):
    for index, free_list in enumerate(free_lists):
        if free_list:
            _return_batch(free_list, index, len(free_list), central)


class ThreadCache:
    """Free lists of blocks, one per size class, used by a single thread.

    Every block still held is handed back to the central cache when the
    cache is closed or garbage collected.
    """

    def __init__(self, central_cache=None):
        self._central = central_cache if central_cache is not None else get_central_cache()
        self._free_lists = [FreeList() for _ in range(MAX_ARRAY_SIZE)]
        self._finalizer = weakref.finalize(self, _release_all, self._free_lists, self._central)

    def allocate(self, size):
        """Return the address of a block of at least ``size`` bytes.

        A size of zero yields ``None``.
        """
        if size < 0:
            raise ValueError(f"size must not be negative: {size}")
        if size == 0:
            return None
        if size > MAX_MEMORY_SIZE:
            return aligned_malloc(_LARGE_ALIGNMENT, size)

        rounded = round_up(size)
        free_list = self._free_lists[size_to_index(rounded)]
        if not free_list:
            self._fetch_from_central_cache(rounded)
        if not free_list:
            raise MemoryError(f"no block of {rounded} bytes available")
        return free_list.pop_front()

    def deallocate(self, address, size):
        """Give back a block obtained from :meth:`allocate` with the same ``size``."""
        if size < 0:
            raise ValueError(f"size must not be negative: {size}")
        if size == 0:
            return
        if size > MAX_MEMORY_SIZE:
            aligned_free(address)
            return

        index = size_to_index(round_up(size))
        free_list = self._free_lists[index]
        free_list.push_front(address)
        if len(free_list) >= free_list.max_size * 2:
            _return_batch(free_list, index, free_list.max_size, self._central)

    def close(self):
        """Hand every cached block back to the central cache."""
        _release_all(self._free_lists, self._central)

    def _fetch_from_central_cache(self, size):
        free_list = self._free_lists[size_to_index(size)]
        count = min(free_list.max_size, MAX_BLOCK_NUM)
        for address in self._central.fetch_range(size, count):
            free_list.push_front(address)
        free_list.max_size = count + 1


_local = threading.local()


def get_thread_cache():
    """Return the cache that belongs to the calling thread."""
    try:
        return _local.cache
    except AttributeError:
        cache = _local.cache = ThreadCache()
        return cache