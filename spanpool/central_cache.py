"""Central cache: cuts spans into blocks of one size class and shares them."""

import threading

from spanpool.page_cache import get_page_cache
from spanpool.size_class import MAX_ARRAY_SIZE, MAX_BLOCK_NUM, MAX_PAGE_NUM, PAGE_SIZE, size_to_index
from spanpool.span import SpanList, id_to_ptr


class CentralCache:
    """One span list per size class, each guarded by its own lock."""

    def __init__(self, page_cache=None):
        self._page_cache = page_cache if page_cache is not None else get_page_cache()
        self._spans = [SpanList() for _ in range(MAX_ARRAY_SIZE)]

    def fetch_range(self, size, count):
        """Take up to ``count`` free blocks of ``size`` bytes from one span.

        Fewer blocks are returned when the span runs out.
        """
        bucket = self._spans[size_to_index(size)]
        taken = []
        with bucket:
            span = self._get_free_span(bucket, size)
            while len(taken) < count and span.free_list:
                taken.append(span.free_list.pop_front())
                span.used += 1
        taken.reverse()
        return taken

    def return_range(self, size, addresses):
        """Give blocks back; spans with no blocks in use go to the page cache."""
        bucket = self._spans[size_to_index(size)]
        for address in addresses:
            span = self._page_cache.object_to_span(address)
            if span is None:
                continue
            with bucket:
                span.free_list.push_front(address)
                span.used -= 1
                release = span.used == 0
                if release:
                    bucket.erase(span)
                    span.free_list.clear()
            if release:
                self._page_cache.return_span(span)

    def _get_free_span(self, bucket, size):
        """Return a span with free blocks; the bucket lock must be held."""
        for span in bucket:
            if span.free_list:
                return span

        bucket.lock.release()
        try:
            pages = min(-(-size * MAX_BLOCK_NUM // PAGE_SIZE), MAX_PAGE_NUM)
            span = self._page_cache.fetch_span(pages)
            start = id_to_ptr(span.page_id)
            for offset in range(0, span.page_count * PAGE_SIZE // size * size, size):
                span.free_list.push_front(start + offset)
        finally:
            bucket.lock.acquire()

        bucket.push_front(span)
        return span


_instance = None
_instance_lock = threading.Lock()


def get_central_cache():
    """Return the process-wide central cache."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = CentralCache()
        return _instance