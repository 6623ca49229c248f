import logging
from collections import deque
from typing import Tuple

from puppet.frame import PuppetFrame

logger = logging.getLogger(__name__)


class FrameStore:
    """
    The most recent complete frames, oldest first.

    A FIFO ring: record() appends and, once more than `capacity` frames are
    held, the oldest is dropped. In "latest" mode the capacity is 1 and the
    store is just the current frame.

    SEEDING:
        seed() fills the store with the default frame so last_complete() and
        frames() always have something to return. The seed is a placeholder:
        the first record() replaces it, so an average only ever covers frames
        that producers actually sent.

    Frames handed to record() are owned by the store from then on and must not
    be mutated by the caller.
    """

    def __init__(self, capacity: int = 4):
        if capacity < 1:
            raise ValueError(f"FrameStore capacity must be >= 1, got {capacity}")
        self._frames = deque(maxlen=capacity)
        self.seeded = False

    @property
    def capacity(self) -> int:
        return self._frames.maxlen

    def __len__(self):
        return len(self._frames)

    def seed(self, frame: PuppetFrame):
        self._frames.clear()
        self._frames.append(frame)
        self.seeded = True

    def record(self, frame: PuppetFrame):
        if self.seeded:
            self._frames.clear()
            self.seeded = False
        self._frames.append(frame)

    def last_complete(self) -> PuppetFrame:
        """Fallback source for the next incoming frame's missing fields."""
        return self._frames[-1]

    def frames(self) -> Tuple[PuppetFrame, ...]:
        return tuple(self._frames)

    def resize(self, capacity: int):
        """Change the window size, keeping the newest frames."""
        if capacity < 1:
            raise ValueError(f"FrameStore capacity must be >= 1, got {capacity}")
        if capacity == self.capacity:
            return
        logger.info(f"Resizing frame window {self.capacity} -> {capacity}")
        self._frames = deque(self._frames, maxlen=capacity)
