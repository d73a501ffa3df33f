"""Spans of pages and the doubly linked lists that hold them."""

import threading
from dataclasses import dataclass, field
from typing import Optional

from spanpool.freelist import FreeList
from spanpool.size_class import PAGE_SHIFT


def ptr_to_id(address):
    """Return the page number that holds ``address``."""
    return address >> PAGE_SHIFT


def id_to_ptr(page_id):
    """Return the start address of page ``page_id``."""
    return page_id << PAGE_SHIFT


@dataclass(eq=False)
class Span:
    """A run of contiguous pages, with the free blocks cut from it."""

    page_id: int = 0
    page_count: int = 0
    used: int = 0
    free_list: FreeList = field(default_factory=FreeList)
    _prev: Optional["Span"] = field(default=None, init=False, repr=False)
    _next: Optional["Span"] = field(default=None, init=False, repr=False)


class SpanList:
    """Doubly linked list of spans, guarded by its own lock.

    Use the list as a context manager, or ``lock`` directly, to hold the lock.
    """

    def __init__(self):
        self._head = Span()
        self._head._prev = self._head
        self._head._next = self._head
        self.lock = threading.Lock()

    def front(self):
        """Return the first span."""
        if not self:
            raise IndexError("front of an empty span list")
        return self._head._next

    def back(self):
        """Return the last span."""
        if not self:
            raise IndexError("back of an empty span list")
        return self._head._prev

    def push_front(self, span):
        """Insert ``span`` at the front."""
        first = self._head._next
        span._next = first
        span._prev = self._head
        first._prev = span
        self._head._next = span

    def pop_front(self):
        """Remove and return the first span."""
        span = self.front()
        self.erase(span)
        return span

    def erase(self, span):
        """Unlink ``span`` from the list."""
        if span._prev is None or span._next is None or span is self._head:
            raise ValueError("span is not linked into a list")
        span._prev._next = span._next
        span._next._prev = span._prev
        span._prev = None
        span._next = None

    def __iter__(self):
        node = self._head._next
        while node is not self._head:
            following = node._next
            yield node
            node = following

    def __bool__(self):
        return self._head._next is not self._head

    def __enter__(self):
        self.lock.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.lock.release()
        return False