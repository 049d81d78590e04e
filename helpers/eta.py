import math
import time

import streamlit as st


class ETAEstimator:
    """Progress bar with a rough remaining-time estimate for a batch run."""

    def __init__(self, total: int, label: str = "Classifying products…"):
        self.total = max(int(total), 1)
        self.label = label
        self.start_time = time.time()
        self.bar = st.progress(0.0, text=label)
        self.placeholder = st.empty()
        self.last_update_time: float | None = None

    def estimate_text(self, done: int) -> str:
        elapsed = time.time() - self.start_time
        if done <= 0 or elapsed <= 0:
            return "ETA: calculating..."
        remaining = elapsed / done * (self.total - done)
        if remaining < 60:
            return f"ETA: ~{int(math.ceil(remaining))} sec"
        minutes = math.ceil(remaining / 60.0)
        return f"ETA: ~{minutes} minute{'s' if minutes != 1 else ''}"

    def update(self, done: int, total: int | None = None) -> None:
        if total:
            self.total = max(int(total), 1)
        fraction = min(done / self.total, 1.0)
        self.bar.progress(fraction, text=f"{self.label} {done}/{self.total}")
        now = time.time()
        # refresh the text at most every 5 seconds
        if self.last_update_time is None or (now - self.last_update_time) >= 5:
            self.placeholder.caption(self.estimate_text(done))
            self.last_update_time = now

    def close(self) -> None:
        self.bar.empty()
        self.placeholder.empty()
