import threading

import pytest

from spanpool.central_cache import CentralCache, get_central_cache
from spanpool.page_cache import PageCache
from spanpool.size_class import MAX_BLOCK_NUM, PAGE_SIZE


@pytest.fixture
def page_cache():
    cache = PageCache()
    yield cache
    cache.close()


@pytest.fixture
def central_cache(page_cache):
    return CentralCache(page_cache)


def test_single_thread_fetch_and_return(central_cache, page_cache):
    blocks_512 = central_cache.fetch_range(8, 512)
    assert len(blocks_512) == 512
    assert len(set(blocks_512)) == 512

    blocks_500 = central_cache.fetch_range(16, 500)
    assert len(blocks_500) == 500

    blocks_20 = central_cache.fetch_range(16, 20)
    assert len(blocks_20) == 12
    assert set(blocks_20).isdisjoint(blocks_500)

    central_cache.return_range(8, blocks_512)
    assert page_cache.object_to_span(blocks_512[0]) is None

    central_cache.return_range(16, blocks_500)
    span = page_cache.object_to_span(blocks_500[0])
    assert span is not None and span.used == 12

    central_cache.return_range(16, blocks_20)
    assert page_cache.object_to_span(blocks_20[0]) is None


def test_blocks_lie_in_one_span(central_cache, page_cache):
    blocks = central_cache.fetch_range(48, 10)
    spans = {id(page_cache.object_to_span(b)) for b in blocks}
    assert len(spans) == 1
    span = page_cache.object_to_span(blocks[0])
    base = span.page_id * PAGE_SIZE
    assert all((b - base) % 48 == 0 for b in blocks)
    assert span.used == 10


def test_zero_count_returns_nothing(central_cache):
    assert central_cache.fetch_range(8, 0) == []


def test_get_central_cache_roundtrip():
    cache = get_central_cache()
    assert cache is get_central_cache()
    blocks = cache.fetch_range(64, 3)
    assert len(blocks) == 3
    cache.return_range(64, blocks)


def test_multi_thread_fetch_and_return(central_cache, page_cache):
    thread_num = 4
    count = 50
    lengths = []
    returned = []
    lock = threading.Lock()

    def work(i):
        size = 8 * i + 8
        batches = []
        for _ in range(count):
            blocks = central_cache.fetch_range(size, MAX_BLOCK_NUM)
            with lock:
                lengths.append(len(blocks))
            batches.append(blocks)
        for blocks in batches:
            central_cache.return_range(size, blocks)
        with lock:
            returned.append(batches[0][0])

    threads = [threading.Thread(target=work, args=(i,)) for i in range(thread_num)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert lengths == [MAX_BLOCK_NUM] * (thread_num * count)
    assert len(returned) == thread_num
    assert [page_cache.object_to_span(address) for address in returned] == [None] * thread_num

    blocks = central_cache.fetch_range(8, MAX_BLOCK_NUM)
    assert len(blocks) == MAX_BLOCK_NUM
    assert page_cache.object_to_span(blocks[0]).used == MAX_BLOCK_NUM
    central_cache.return_range(8, blocks)
    assert page_cache.object_to_span(blocks[0]) is None