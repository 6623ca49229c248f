import pytest

from puppet.frame import default_frame
from puppet.store import FrameStore


def _frame(body):
    frame = default_frame()
    frame.bones.body = body
    return frame


def test_seeded_store_serves_the_seed():
    seed = default_frame()
    store = FrameStore(4)
    store.seed(seed)
    assert store.seeded
    assert store.last_complete() is seed
    assert store.frames() == (seed,)


def test_first_record_displaces_the_seed():
    store = FrameStore(4)
    store.seed(default_frame())
    store.record(_frame(1))
    assert not store.seeded
    assert [f.bones.body for f in store.frames()] == [1]


def test_fifo_eviction_keeps_newest():
    store = FrameStore(4)
    store.seed(default_frame())
    for body in range(1, 7):
        store.record(_frame(body))
        assert len(store) <= 4
    assert [f.bones.body for f in store.frames()] == [3, 4, 5, 6]
    assert store.last_complete().bones.body == 6


def test_capacity_one_holds_only_latest():
    store = FrameStore(1)
    store.seed(default_frame())
    store.record(_frame(1))
    store.record(_frame(2))
    assert [f.bones.body for f in store.frames()] == [2]


def test_resize_keeps_newest_frames():
    store = FrameStore(4)
    for body in range(4):
        store.record(_frame(body))
    store.resize(2)
    assert store.capacity == 2
    assert [f.bones.body for f in store.frames()] == [2, 3]
    store.resize(5)
    store.record(_frame(9))
    assert [f.bones.body for f in store.frames()] == [2, 3, 9]


@pytest.mark.parametrize("capacity", [0, -1])
def test_invalid_capacity(capacity):
    with pytest.raises(ValueError):
        FrameStore(capacity)
    with pytest.raises(ValueError):
        FrameStore(2).resize(capacity)
