"""
Audio-to-fireworks session.

Wires the two independent callbacks together: the audio callback turns
spectrum frames into bursts, the render callback ages and retires them.
Both are expected to run on the same thread.
"""

import logging

import numpy as np

from beatburst.config import BeatburstConfig
from beatburst.core.bands import compute_band_energies
from beatburst.core.detector import OnsetDetector, OnsetEvent
from beatburst.effects.director import EffectDirector
from beatburst.effects.manager import EffectHandle, EffectManager, RenderSink

logger = logging.getLogger(__name__)


class BeatSession:
    """Owns the detector, director and effect manager for one sink."""

    def __init__(
        self,
        config: BeatburstConfig | None = None,
        sink: RenderSink | None = None,
        seed: int | None = None,
    ):
        self.cfg = config or BeatburstConfig()
        self.rng = np.random.default_rng(seed)

        self.detector = OnsetDetector(self.cfg.detector)
        self.director = EffectDirector(
            self.cfg.director,
            rng=self.rng,
            max_intensity=self.cfg.detector.max_intensity,
        )
        self.sink = sink
        self.manager = None
        if sink is not None:
            self.manager = EffectManager(sink, self.cfg.particles, rng=self.rng)

        self.playing = False
        self.onset_count = 0
        self._last_onset: float | None = None

    def on_spectrum(self, spectrum, now: float) -> list[OnsetEvent]:
        """
        Audio callback: analyse one spectrum frame and spawn bursts.

        Args:
            spectrum: Byte frequency frame.
            now: Monotonic timestamp in seconds.

        Returns:
            Onset events detected in this frame (including any over the spawn cap).
        """
        energies = compute_band_energies(spectrum, self.detector.num_bands)
        events = self.detector.detect(energies, now)
        if not events:
            return events

        self.onset_count += len(events)
        self._last_onset = now

        if self.manager is not None:
            for request in self.director.on_events(events):
                self.manager.create(request)
        return events

    def on_frame(self, playing: bool | None = None) -> list[EffectHandle]:
        """
        Render callback: maybe launch an ambient burst, then age everything.

        Returns:
            Handles retired this frame.
        """
        if self.manager is None:
            return []

        if playing is None:
            playing = self.playing
        if playing and self.rng.random() < self.cfg.ambient_spawn_chance:
            self.manager.create(self.director.ambient_request())

        return self.manager.advance_all()

    def status(self, now: float) -> str:
        """Short text for the HUD."""
        if self._last_onset is not None and now - self._last_onset < self.cfg.boom_duration:
            return "BOOM!"
        return "Playing..." if self.playing else "Paused"

    def reset(self):
        """Start fresh for a new track. Live bursts are disposed."""
        self.detector.reset()
        if self.manager is not None:
            self.manager.clear()
        self.onset_count = 0
        self._last_onset = None
