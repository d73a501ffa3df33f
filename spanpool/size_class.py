"""Layout constants and the mapping between block sizes and size classes."""

PAGE_SIZE = 4096
"""Size of one page in bytes."""

PAGE_SHIFT = 12
"""Shift that turns an address into a page number."""

MAX_PAGE_NUM = 128
"""Largest span, in pages, that the page cache manages."""

MAX_ARRAY_SIZE = 208
"""Number of size classes."""

MAX_MEMORY_SIZE = PAGE_SIZE * MAX_PAGE_NUM // 2
"""Largest request served from the pool; larger ones go to the system."""

MAX_BLOCK_NUM = 512
"""Most blocks a thread cache fetches from the central cache at once."""

# Each band: first index, last index, size just below the band, step.
_BANDS = (
    (0, 15, 0, 8),
    (16, 71, 128, 16),
    (72, 127, 1024, 128),
    (128, 183, 8192, 1024),
    (184, 207, 65536, 8192),
)


def index_to_size(index):
    """Return the block size of the size class at ``index``."""
    for first, last, below, step in _BANDS:
        if first <= index <= last:
            return below + step * (index - first + 1)
    raise ValueError(f"size class index out of range: {index}")


def size_to_index(size):
    """Return the size class index of an already rounded ``size``."""
    if size < 1:
        raise ValueError(f"size must be positive: {size}")
    for first, last, below, step in _BANDS:
        upper = below + step * (last - first + 1)
        if size <= upper:
            return first + (size - below - 1) // step
    raise ValueError(f"size exceeds the largest size class: {size}")


def round_up(size):
    """Round ``size`` up to the alignment of its size class."""
    if size < 0:
        raise ValueError(f"size must not be negative: {size}")
    step = _BANDS[-1][3]
    for first, last, below, band_step in _BANDS:
        if size <= below + band_step * (last - first + 1):
            step = band_step
            break
    return -(-size // step) * step