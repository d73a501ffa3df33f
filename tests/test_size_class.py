import pytest

from spanpool import size_class
from spanpool.size_class import index_to_size, round_up, size_to_index


def test_constants_fit_together():
    assert size_class.PAGE_SIZE == 1 << size_class.PAGE_SHIFT
    assert size_class.MAX_MEMORY_SIZE == index_to_size(size_class.MAX_ARRAY_SIZE - 1)


def test_band_edges():
    assert index_to_size(0) == 8
    assert index_to_size(15) == 128
    assert index_to_size(71) == 1024
    assert index_to_size(127) == 8192
    assert index_to_size(183) == 65536
    assert index_to_size(207) == 262144


@pytest.mark.parametrize("index", range(size_class.MAX_ARRAY_SIZE))
def test_index_round_trip(index):
    assert size_to_index(index_to_size(index)) == index


def test_sizes_strictly_increase():
    sizes = [index_to_size(i) for i in range(size_class.MAX_ARRAY_SIZE)]
    assert sizes == sorted(set(sizes))


@pytest.mark.parametrize(
    "size", [1, 7, 8, 9, 127, 128, 129, 1000, 1024, 1025, 8191, 8193, 65535, 65537, 262144]
)
def test_round_up_lands_on_class_size(size):
    rounded = round_up(size)
    assert rounded >= size
    assert index_to_size(size_to_index(rounded)) == rounded


def test_round_up_is_idempotent():
    for size in range(0, 20000, 37):
        once = round_up(size)
        assert round_up(once) == once


def test_round_up_beyond_pool_uses_largest_step():
    assert round_up(262145) % 8192 == 0
    assert round_up(262145) >= 262145


def test_round_up_zero():
    assert round_up(0) == 0


@pytest.mark.parametrize("index", [-1, 208, 1000])
def test_index_to_size_rejects_bad_index(index):
    with pytest.raises(ValueError):
        index_to_size(index)


@pytest.mark.parametrize("size", [0, -8, 262145])
def test_size_to_index_rejects_bad_size(size):
    with pytest.raises(ValueError):
        size_to_index(size)


def test_round_up_rejects_negative():
    with pytest.raises(ValueError):
        round_up(-1)