"""Page cache: hands out spans of whole pages and coalesces them on return."""

import threading
from bisect import bisect_left, bisect_right, insort

from spanpool.platform import aligned_free, aligned_malloc
from spanpool.size_class import MAX_PAGE_NUM, PAGE_SHIFT, PAGE_SIZE
from spanpool.span import Span, SpanList, ptr_to_id


def _last_page(span):
    return span.page_id + span.page_count - 1


class PageCache:
    """Keeps free spans by page count and tracks the spans handed out."""

    def __init__(self):
        self._lock = threading.Lock()
        self._reset()

    def _reset(self):
        self._spans = [SpanList() for _ in range(MAX_PAGE_NUM)]
        # First and last page number of every free span.
        self._free_span_map = {}
        # First page number of every busy span, kept sorted for range lookups.
        self._busy_starts = []
        self._busy_spans = {}
        self._align_pointers = []

    def _mark_busy(self, span):
        insort(self._busy_starts, span.page_id)
        self._busy_spans[span.page_id] = span

    def _unmark_busy(self, span):
        if self._busy_spans.get(span.page_id) is not span:
            raise ValueError(f"span at page {span.page_id} is not in use")
        del self._busy_spans[span.page_id]
        del self._busy_starts[bisect_left(self._busy_starts, span.page_id)]

    def _mark_free(self, span):
        self._free_span_map[span.page_id] = span
        self._free_span_map[_last_page(span)] = span

    def _unmark_free(self, span):
        self._free_span_map.pop(span.page_id, None)
        self._free_span_map.pop(_last_page(span), None)

    def fetch_span(self, pages):
        """Return a span of exactly ``pages`` pages, marked as in use."""
        if not 1 <= pages <= MAX_PAGE_NUM:
            raise ValueError(f"page count must be between 1 and {MAX_PAGE_NUM}: {pages}")
        with self._lock:
            exact = self._spans[pages - 1]
            if exact:
                span = exact.pop_front()
                self._unmark_free(span)
                self._mark_busy(span)
                return span

            for count in range(pages + 1, MAX_PAGE_NUM + 1):
                bucket = self._spans[count - 1]
                if not bucket:
                    continue
                bigger = bucket.pop_front()
                self._free_span_map.pop(_last_page(bigger), None)
                bigger.page_count = count - pages
                split = Span(page_id=bigger.page_id + bigger.page_count, page_count=pages)
                self._spans[bigger.page_count - 1].push_front(bigger)
                self._free_span_map[_last_page(bigger)] = bigger
                self._mark_busy(split)
                return split

            address = aligned_malloc(PAGE_SIZE, MAX_PAGE_NUM << PAGE_SHIFT)
            self._align_pointers.append(address)
            first_page = ptr_to_id(address)

            if pages == MAX_PAGE_NUM:
                span = Span(page_id=first_page, page_count=MAX_PAGE_NUM)
                self._mark_busy(span)
                return span

            rest = Span(page_id=first_page, page_count=MAX_PAGE_NUM - pages)
            self._spans[rest.page_count - 1].push_front(rest)
            self._mark_free(rest)

            split = Span(page_id=first_page + MAX_PAGE_NUM - pages, page_count=pages)
            self._mark_busy(split)
            return split

    def return_span(self, span):
        """Take back a span, merging it with free neighbours up to the size limit."""
        with self._lock:
            self._unmark_busy(span)

            while (prev := self._free_span_map.get(span.page_id - 1)) is not None:
                if span.page_count + prev.page_count > MAX_PAGE_NUM:
                    break
                self._spans[prev.page_count - 1].erase(prev)
                self._unmark_free(prev)
                span.page_id = prev.page_id
                span.page_count += prev.page_count

            while (following := self._free_span_map.get(span.page_id + span.page_count)) is not None:
                if span.page_count + following.page_count > MAX_PAGE_NUM:
                    break
                self._spans[following.page_count - 1].erase(following)
                self._unmark_free(following)
                span.page_count += following.page_count

            self._mark_free(span)
            self._spans[span.page_count - 1].push_front(span)

    def object_to_span(self, address):
        """Return the in-use span that holds ``address``, or ``None``."""
        page_id = ptr_to_id(address)
        with self._lock:
            position = bisect_right(self._busy_starts, page_id)
            if position == 0:
                return None
            span = self._busy_spans[self._busy_starts[position - 1]]
            if page_id >= span.page_id + span.page_count:
                return None
            return span

    def close(self):
        """Release every range taken from the system and forget all spans."""
        with self._lock:
            for address in self._align_pointers:
                aligned_free(address)
            self._reset()


_instance = None
_instance_lock = threading.Lock()


def get_page_cache():
    """Return the process-wide page cache."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = PageCache()
        return _instance