# spanpool

`spanpool` models a three-tier memory pool in pure Python. Use it to study how a
size-class allocator behaves: how requests are rounded, how blocks move between the
caches, and how page spans are split and merged again.

The three tiers are:

- **Thread cache** (`spanpool.thread_cache`): one per thread, returned by
  `get_thread_cache()`. It serves `allocate` and `deallocate` from one free list per
  size class. Blocks are fetched from the central cache in batches that grow with use,
  up to 512 blocks. When a free list holds twice its batch size, one batch goes back.
- **Central cache** (`spanpool.central_cache`): one per process, returned by
  `get_central_cache()`. It cuts page spans into blocks of a single size class. Each
  size class has its own lock.
- **Page cache** (`spanpool.page_cache`): one per process, returned by
  `get_page_cache()`. It takes 128-page regions from the simulated platform heap
  (`spanpool.platform`) and splits them into spans. When spans are returned, it merges
  adjacent free spans, up to 128 pages.

## Simulated memory

Addresses are plain integers in a simulated address space. `spanpool.platform.aligned_malloc`
reserves an aligned range and returns the start address. `aligned_free` releases the
range, and raises `ValueError` for an address that was never reserved.

The package does not hand out real memory. No bytes can be stored at the addresses it
returns. It models the bookkeeping of the pool only.

## Size classes

Requests of up to 256 KiB (`MAX_MEMORY_SIZE`) are rounded to one of 208 size classes:

| Range (bytes)     | Alignment |
|-------------------|-----------|
| 1 – 128           | 8         |
| 129 – 1024        | 16        |
| 1025 – 8192       | 128       |
| 8193 – 65536      | 1024      |
| 65537 – 262144    | 8192      |

```python
from spanpool.size_class import round_up, size_to_index, index_to_size

round_up(13)                      # 16
size_to_index(16)                 # 1
index_to_size(size_to_index(144)) # 144
```

Sizes and indexes that fall outside the table raise `ValueError`.

The thread cache sends requests larger than `MAX_MEMORY_SIZE` straight to
`aligned_malloc`, and frees them with `aligned_free`.

## Allocating

```python
from spanpool.allocator import Allocator

alloc = Allocator(128)            # item size in bytes
address = alloc.allocate(10)      # room for 10 items
alloc.deallocate(address, 10)
```

The allocator behaves as follows:

- `allocate(0)` returns `None`.
- `deallocate(None, n)` does nothing.
- A count above `max_size()` raises `OverflowError`.
- Two allocators compare equal when they share a thread cache.

You can also use a thread cache directly:

```python
from spanpool.thread_cache import get_thread_cache

cache = get_thread_cache()
address = cache.allocate(8)
cache.deallocate(address, 8)
```

`close()` hands every cached block back to the central cache. The same happens when the
cache is garbage collected.

## Lower tiers

```python
from spanpool.central_cache import get_central_cache
from spanpool.page_cache import get_page_cache
from spanpool.span import id_to_ptr

blocks = get_central_cache().fetch_range(8, 512)   # list of up to 512 addresses
get_central_cache().return_range(8, blocks)

page_cache = get_page_cache()
span = page_cache.fetch_span(4)                    # a 4-page span
page_cache.object_to_span(id_to_ptr(span.page_id)) # -> span
page_cache.return_span(span)
```

- `fetch_range` takes all its blocks from one span, so it may return fewer than asked.
- `PageCache.close()` releases every region the page cache took from the platform heap
  and forgets all spans.

## Benchmark

The benchmark times several threads that each run rounds of allocating and freeing. It
first uses plain Python buffers (`bytearray`), then the pool:

```
spanpool-benchmark
spanpool-benchmark --threads 4 --rounds 1000 --times 1000 --size 128
spanpool-benchmark --analyze
```

`--analyze` runs only a two-thread workload of 512-byte and 1024-byte blocks.

The same runs are available as functions in `spanpool.benchmark`:

- `run_malloc_benchmark`
- `run_pool_benchmark`
- `run_analysis`

Each returns the elapsed time in milliseconds.

## Tests

```
pip install -e ".[test]"
pytest
```