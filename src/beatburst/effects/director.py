"""
Onset to burst mapping.

Translates detector output into concrete spawn parameters: where the burst
appears, its colour, how many particles it has, how fast they fly and how
long it lives.
"""

import colorsys
import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from beatburst.config import DirectorConfig
from beatburst.core.detector import OnsetEvent

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float]

# Literal component bounds (r, g, b) for the outer thirds of the spectrum
WARM_RANGE = ((0.8, 1.0), (0.2, 0.6), (0.0, 0.2))
COOL_RANGE = ((0.0, 0.3), (0.5, 0.9), (0.8, 1.0))


@dataclass(frozen=True)
class SpawnRequest:
    """Everything needed to create one particle burst."""

    position: Tuple[float, float, float]
    color: Color
    particle_count: int
    point_size: float
    speed: float
    max_age: int
    band_index: int = -1


def pick_color(frequency_position: float, rng: np.random.Generator) -> Color:
    """
    Choose a burst colour from the band's place in the spectrum.

    Low third: warm reds/oranges. Mid third: any fully saturated hue.
    High third: cool blues/cyans.
    """
    if frequency_position < 1.0 / 3.0:
        bounds = WARM_RANGE
    elif frequency_position < 2.0 / 3.0:
        return colorsys.hsv_to_rgb(float(rng.random()), 1.0, 1.0)
    else:
        bounds = COOL_RANGE
    return tuple(float(rng.uniform(lo, hi)) for lo, hi in bounds)


class EffectDirector:
    """Maps OnsetEvents to SpawnRequests with a per-callback spawn cap."""

    def __init__(
        self,
        config: DirectorConfig | None = None,
        rng: np.random.Generator | None = None,
        max_intensity: float = 1.5,
    ):
        self.cfg = config or DirectorConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_intensity = max_intensity
        self.dropped = 0

    def on_events(self, events: Iterable[OnsetEvent]) -> list[SpawnRequest]:
        """
        Build spawn requests for one audio callback's events.

        Events beyond max_spawns_per_frame are dropped, not queued.
        """
        events = list(events)
        kept = events[: self.cfg.max_spawns_per_frame]

        overflow = len(events) - len(kept)
        if overflow:
            self.dropped += overflow
            logger.debug(f"Dropped {overflow} onset(s) over the spawn cap")

        return [self.request_for(event) for event in kept]

    def request_for(self, event: OnsetEvent) -> SpawnRequest:
        cfg = self.cfg
        level = min(max(event.intensity / self.max_intensity, 0.0), 1.0)
        count = int(round(cfg.min_particles + (cfg.max_particles - cfg.min_particles) * level))

        return SpawnRequest(
            position=self._random_position(),
            color=pick_color(event.frequency_position, self.rng),
            particle_count=count,
            point_size=cfg.base_point_size + event.intensity * cfg.point_size_gain,
            speed=event.speed,
            max_age=self._lifetime(event.speed),
            band_index=event.band_index,
        )

    def ambient_request(self) -> SpawnRequest:
        """A random-coloured burst not tied to any onset."""
        color = tuple(float(c) for c in self.rng.random(3))
        cfg = self.cfg
        return SpawnRequest(
            position=self._random_position(),
            color=color,
            particle_count=int(round((cfg.min_particles + cfg.max_particles) / 2)),
            point_size=cfg.base_point_size + 0.5 * cfg.point_size_gain,
            speed=1.0,
            max_age=self._lifetime(1.0),
        )

    def _random_position(self) -> Tuple[float, float, float]:
        x = float(self.rng.uniform(*self.cfg.x_range))
        y = float(self.rng.uniform(*self.cfg.y_range))
        return (x, y, 0.0)

    def _lifetime(self, speed: float) -> int:
        # Fast onsets give short bursts, slow ones linger
        speed = max(speed, 1e-3)
        return max(self.cfg.min_lifetime, int(self.cfg.base_lifetime / speed))
