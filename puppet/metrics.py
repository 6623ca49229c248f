import time


class IngestRate:
    """
    Exponential moving average of how often producers POST, in frames/second.

        rate = alpha * (1 / dt) + (1 - alpha) * rate

    alpha = 0.2 (default): smooth, slow to follow a change in producer rate.
    alpha = 0.8:           responsive but jittery.

    value stays None until two frames have arrived (one interval measured).
    The first measured interval seeds the average directly.
    """

    def __init__(self, alpha=0.2):
        self.alpha = max(0.0, min(1.0, alpha))
        self.value = None
        self._last = None

    def tick(self, now=None):
        now = time.monotonic() if now is None else now
        last, self._last = self._last, now
        if last is None or now <= last:
            return self.value

        sample = 1.0 / (now - last)
        if self.value is None:
            self.value = sample
        else:
            self.value = self.alpha * sample + (1 - self.alpha) * self.value
        return self.value

    def reset(self):
        self.value = None
        self._last = None
