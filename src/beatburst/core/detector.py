"""
Adaptive multi-band onset detection.

Each band keeps its own statistical threshold (mean plus scaled spread
of recent energy) and its own cooldown, so a bass kick and a hi-hat in
the same callback both register without masking each other.
"""

import logging
from collections import deque
from dataclasses import dataclass

import numpy as np

from beatburst.config import DetectorConfig

logger = logging.getLogger(__name__)

_COOLDOWN_TOLERANCE_MS = 1e-6


@dataclass(frozen=True)
class OnsetEvent:
    """A detected energy onset in one frequency band."""

    band_index: int
    intensity: float
    speed: float
    frequency_position: float  # band_index / num_bands, in [0, 1)
    timestamp: float  # seconds, caller's clock
    energy: float = 0.0
    threshold: float = 0.0


@dataclass
class BandState:
    """Mutable per-band detector state."""

    last_fire: float = float("-inf")
    fire_count: int = 0


class EnergyHistory:
    """Ring buffer of recent band-energy frames."""

    def __init__(self, capacity: int, num_bands: int):
        if capacity < 2:
            raise ValueError(f"History capacity must be >= 2, got {capacity}")
        self.capacity = capacity
        self.num_bands = num_bands
        self._frames: deque = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._frames)

    def push(self, energies: np.ndarray):
        self._frames.append(np.array(energies, dtype=np.float64))

    def baseline(self) -> np.ndarray:
        """
        Frames preceding the current one, shape (n, num_bands).

        At most capacity - 1 frames are returned so that the frame being
        judged plus its baseline never exceed the history capacity.
        """
        if not self._frames:
            return np.empty((0, self.num_bands))
        frames = list(self._frames)[-(self.capacity - 1):]
        return np.stack(frames)

    def clear(self):
        self._frames.clear()


class OnsetDetector:
    """
    Emits OnsetEvents when a band's energy jumps above its adaptive threshold.

    The threshold for band b is ``avg + max(threshold_floor, stddev * variance_multiplier)``
    over the preceding history. Three independent guards must all pass:
    the statistical outlier test, a minimum increase over the average, and
    an absolute energy floor.
    """

    def __init__(self, config: DetectorConfig | None = None):
        self.cfg = config or DetectorConfig()
        if self.cfg.num_bands < 1:
            raise ValueError(f"num_bands must be >= 1, got {self.cfg.num_bands}")

        if self.cfg.history_size - 1 < self.cfg.min_history:
            raise ValueError(
                f"history_size ({self.cfg.history_size}) must leave at least "
                f"min_history ({self.cfg.min_history}) preceding frames"
            )

        self.cooldown_ms = self.cfg.cooldown_ms
        self.history = EnergyHistory(self.cfg.history_size, self.cfg.num_bands)
        self.bands = [BandState() for _ in range(self.cfg.num_bands)]

    @property
    def num_bands(self) -> int:
        return self.cfg.num_bands

    @property
    def warmed_up(self) -> bool:
        return len(self.history.baseline()) >= self.cfg.min_history

    def reset(self):
        """Forget history and cooldowns (new track)."""
        self.history.clear()
        self.bands = [BandState() for _ in range(self.cfg.num_bands)]

    def detect(self, band_energy, now: float) -> list[OnsetEvent]:
        """
        Judge one frame of band energies.

        Args:
            band_energy: Sequence of num_bands energies for this callback.
            now: Monotonic timestamp in seconds.

        Returns:
            Events fired this callback, in band order. Possibly empty.
        """
        energies = np.asarray(band_energy, dtype=np.float64)
        if energies.shape != (self.num_bands,):
            raise ValueError(
                f"Expected {self.num_bands} band energies, got shape {energies.shape}"
            )

        baseline = self.history.baseline()
        events: list[OnsetEvent] = []

        if len(baseline) >= self.cfg.min_history:
            averages = baseline.mean(axis=0)
            deviations = baseline.std(axis=0)

            for b, state in enumerate(self.bands):
                if self._cooling_down(state, now):
                    continue
                event = self._judge(b, energies[b], averages[b], deviations[b], now)
                if event is not None:
                    state.last_fire = now
                    state.fire_count += 1
                    events.append(event)

        # Every band above used the same pre-update history
        self.history.push(energies)
        return events

    def _cooling_down(self, state: BandState, now: float) -> bool:
        # A gap of exactly cooldown_ms counts as elapsed (0.18 - 0.10 < 0.08 in floats)
        elapsed_ms = (now - state.last_fire) * 1000.0
        return elapsed_ms + _COOLDOWN_TOLERANCE_MS < self.cooldown_ms

    def _judge(
        self,
        band: int,
        energy: float,
        avg: float,
        stddev: float,
        now: float,
    ) -> OnsetEvent | None:
        cfg = self.cfg
        threshold = avg + max(cfg.threshold_floor, stddev * cfg.variance_multiplier)
        increase = energy - avg

        if not (
            energy > threshold
            and increase > cfg.increase_floor
            and energy > cfg.energy_floor
        ):
            return None

        event = OnsetEvent(
            band_index=band,
            intensity=float(min(energy / cfg.intensity_divisor, cfg.max_intensity)),
            speed=float(min(cfg.speed_base + increase / cfg.speed_divisor, cfg.max_speed)),
            frequency_position=band / self.num_bands,
            timestamp=now,
            energy=float(energy),
            threshold=float(threshold),
        )
        logger.debug(
            f"Onset band={band} energy={energy:.1f} threshold={threshold:.1f} "
            f"intensity={event.intensity:.2f} speed={event.speed:.2f}"
        )
        return event
