"""Tests for the pooled scratch buffers."""

import numpy as np
import pytest

from huepoint.engine.buffer_pool import BufferPool


def test_shapes_and_dtypes():
    pool = BufferPool(30, 20)
    assert pool.acquire("rgb").shape == (20, 30, 3)
    assert pool.acquire("mask").dtype == np.bool_
    assert pool.acquire("labels").dtype == np.int32
    assert pool.allocations == 3


def test_released_buffer_is_reused():
    pool = BufferPool(10, 10)
    buf = pool.acquire("gray")
    pool.release("gray", buf)
    assert pool.acquire("gray") is buf
    assert pool.allocations == 1


def test_pool_is_bounded():
    pool = BufferPool(10, 10, max_per_kind=2)
    buffers = [pool.acquire("float") for _ in range(4)]
    for buf in buffers:
        pool.release("float", buf)
    assert pool.free_count("float") == 2


def test_wrong_shape_discarded():
    pool = BufferPool(10, 10)
    pool.release("mask", np.zeros((5, 5), dtype=bool))
    assert pool.free_count("mask") == 0


def test_double_release_ignored():
    pool = BufferPool(10, 10)
    buf = pool.acquire("mask")
    pool.release("mask", buf)
    pool.release("mask", buf)
    assert pool.free_count("mask") == 1


def test_borrow_returns_on_error():
    pool = BufferPool(10, 10)
    with pytest.raises(RuntimeError):
        with pool.borrow("labels"):
            raise RuntimeError
    assert pool.free_count("labels") == 1


def test_unknown_kind():
    with pytest.raises(KeyError):
        BufferPool(10, 10).acquire("complex")


def test_fits_and_clear():
    pool = BufferPool(10, 20)
    assert pool.fits(10, 20)
    assert not pool.fits(20, 10)
    pool.release("rgb", pool.acquire("rgb"))
    pool.clear()
    assert pool.free_count("rgb") == 0
