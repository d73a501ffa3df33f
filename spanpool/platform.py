"""Aligned allocation of address ranges from a simulated address space."""

import threading

_BASE_ADDRESS = 0x1000_0000

_lock = threading.Lock()
_blocks = {}
_next_address = _BASE_ADDRESS


def aligned_malloc(alignment, size):
    """Reserve ``size`` bytes starting at a multiple of ``alignment``.

    Returns the start address of the reserved range.
    """
    global _next_address
    if alignment <= 0 or alignment & (alignment - 1):
        raise ValueError(f"alignment must be a power of two: {alignment}")
    if size < 0:
        raise ValueError(f"size must not be negative: {size}")
    with _lock:
        address = -(-_next_address // alignment) * alignment
        _blocks[address] = size
        _next_address = address + max(size, 1)
    return address


def aligned_free(address):
    """Release a range reserved by :func:`aligned_malloc`; ``None`` is ignored."""
    if address is None:
        return
    with _lock:
        try:
            del _blocks[address]
        except KeyError:
            raise ValueError(f"address was not allocated: {address:#x}") from None