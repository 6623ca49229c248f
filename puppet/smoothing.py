import logging
from typing import Optional, Sequence

import numpy as np

from puppet.config import SmoothingConfig
from puppet.frame import FIELDS, FieldKind, FrameUpdate, PuppetFrame, default_frame, get_path, set_path
from puppet.merge import merge_frame
from puppet.metrics import IngestRate
from puppet.store import FrameStore

logger = logging.getLogger(__name__)

EYE_PATHS = (("face", "eyes", "left"), ("face", "eyes", "right"))


# ── Pure frame computations ───────────────────────────────────────────────────

def _window_mean(values: np.ndarray) -> np.ndarray:
    """Mean along the window axis. Finite inputs always give a finite mean."""
    with np.errstate(over="ignore", invalid="ignore"):
        mean = values.mean(axis=0)
    if not np.all(np.isfinite(mean)):
        # the running sum overflowed; divide before summing
        mean = (values / len(values)).sum(axis=0)
    return mean


def average_frames(frames: Sequence[PuppetFrame], newest: PuppetFrame) -> PuppetFrame:
    """
    Field-wise mean of `frames`, returned as a new frame.

    SCALAR leaves:  arithmetic mean over all frames.
    VECTOR leaves:  component-wise mean of the 3-vectors.
    CATEGORICAL and AXIS leaves: copied from `newest`; a bitmask or a
                    rotation axis has no meaningful average.
    DERIVED leaves: copied from `newest`; recompute with derive_fields().

    The denominator is len(frames). Results are not clamped.
    """
    if not frames:
        raise ValueError("cannot average an empty window")

    out = newest.copy()
    for spec in FIELDS:
        if spec.kind == FieldKind.SCALAR:
            values = np.array([get_path(f, spec.attr) for f in frames], dtype=float)
            set_path(out, spec.attr, float(_window_mean(values)))
        elif spec.kind == FieldKind.VECTOR:
            vectors = np.array([get_path(f, spec.attr) for f in frames], dtype=float)
            set_path(out, spec.attr, tuple(float(c) for c in _window_mean(vectors)))
    return out


def derive_fields(frame: PuppetFrame, blink_threshold: float = 0.4) -> PuppetFrame:
    """Return a copy of frame with every derived field recomputed."""
    out = frame.copy()
    for eye_path in EYE_PATHS:
        eye = get_path(out, eye_path)
        eye.blink = bool(eye.openness < blink_threshold)
    return out


# ── Engine ────────────────────────────────────────────────────────────────────

class SmoothingEngine:
    """
    Owns the frame store and the served output frame.

    UPDATE FLOW (one producer POST):
        1. merge the update against store.last_complete()
        2. record the merged frame in the store
        3. "average" mode: average the window, categorical fields from the merged frame
           "latest" mode:  take the merged frame as-is
        4. recompute derived fields
        5. publish by assigning self._output once

    The output frame is never modified after it is published, so a reader
    holding a reference always sees one consistent frame. Callers serialize
    update() calls (server/routes/puppet_data.py holds state.lock).

    Config hot-reload:
        self.cfg is the shared SmoothingConfig. update() reads it on every call
        unless the caller passes a snapshot, so /api/config changes apply to
        the next frame. A mode or window_size change resizes the store,
        keeping its newest frames.
    """

    def __init__(self, config: Optional[SmoothingConfig] = None):
        self.cfg = config or SmoothingConfig()
        self.seed_frame = default_frame()
        self.store = FrameStore(self._capacity(self.cfg))
        self.ingest_rate = IngestRate(alpha=self.cfg.rate_smoothing_factor)
        self.frames_received = 0
        self._output = None
        self.seed()

    @staticmethod
    def _capacity(cfg: SmoothingConfig) -> int:
        return int(cfg.window_size) if cfg.mode == "average" else 1

    @property
    def output(self) -> PuppetFrame:
        return self._output

    def seed(self):
        """Reset to the default frame, as at process start."""
        self.store.seed(self.seed_frame)
        self.ingest_rate.reset()
        self.frames_received = 0
        self._output = derive_fields(self.seed_frame, self.cfg.blink_threshold)

    def update(self, update: FrameUpdate, settings: Optional[SmoothingConfig] = None) -> PuppetFrame:
        cfg = settings or self.cfg
        self.store.resize(self._capacity(cfg))

        merged = merge_frame(update, self.store.last_complete(), self.seed_frame, cfg.merge)
        self.store.record(merged)

        if cfg.mode == "average":
            result = average_frames(self.store.frames(), merged)
        else:
            result = merged

        output = derive_fields(result, cfg.blink_threshold)
        self._output = output

        self.frames_received += 1
        self.ingest_rate.alpha = max(0.0, min(1.0, cfg.rate_smoothing_factor))
        self.ingest_rate.tick()
        return output
