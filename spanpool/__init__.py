"""A three-tier size-class memory pool over a simulated page-aligned address space."""

__version__ = "0.1.0"
__all__ = [
    "allocator",
    "benchmark",
    "central_cache",
    "freelist",
    "page_cache",
    "platform",
    "size_class",
    "span",
    "thread_cache",
]