"""
Particle bursts.

A burst is a fixed set of point particles that fly outward from a spawn
point, sag under gravity and fade linearly until they die.
"""

import enum
import logging
import math
from typing import Callable, Optional

import numpy as np

from beatburst.config import ParticleConfig
from beatburst.effects.director import SpawnRequest

logger = logging.getLogger(__name__)


class EffectState(enum.Enum):
    ALIVE = "alive"
    DEAD = "dead"


class ParticleEffect:
    """
    One burst of particles with an Alive -> Dead lifecycle.

    The transition to DEAD happens on the max_age-th advance() and runs the
    release hook exactly once. Advancing a dead effect is a caller bug.
    """

    def __init__(
        self,
        request: SpawnRequest,
        config: ParticleConfig | None = None,
        rng: np.random.Generator | None = None,
        on_dispose: Optional[Callable[["ParticleEffect"], None]] = None,
    ):
        self.cfg = config or ParticleConfig()
        rng = rng if rng is not None else np.random.default_rng()

        n = int(request.particle_count)
        self.color = request.color
        self.point_size = request.point_size
        self.band_index = request.band_index
        self.age = 0
        self.max_age = int(request.max_age)
        self.opacity = 1.0
        self.state = EffectState.ALIVE

        self.positions = np.tile(np.asarray(request.position, dtype=np.float32), (n, 1))

        # Random spherical directions; speed varies per particle so the
        # burst is not a rigid shell.
        theta = rng.uniform(0.0, 2.0 * math.pi, n)
        phi = rng.uniform(0.0, math.pi, n)
        speed = (rng.random(n) * self.cfg.speed_variance + self.cfg.base_speed) * request.speed
        self.velocities = np.stack(
            [
                np.sin(phi) * np.cos(theta) * speed,
                np.sin(phi) * np.sin(theta) * speed,
                np.cos(phi) * speed,
            ],
            axis=1,
        ).astype(np.float32)

        self._on_dispose = on_dispose
        self._disposed = False

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def alive(self) -> bool:
        return self.state is EffectState.ALIVE

    @property
    def disposed(self) -> bool:
        return self._disposed

    def advance(self) -> bool:
        """
        Step the simulation by one frame.

        Returns:
            True while the effect is still alive.
        """
        if self.state is EffectState.DEAD:
            raise RuntimeError("advance() called on a dead ParticleEffect")

        self.age += 1
        self.positions += self.velocities
        self.velocities[:, 1] -= self.cfg.gravity

        if self.max_age > 0:
            self.opacity = max(0.0, 1.0 - self.age / self.max_age)
        else:
            self.opacity = 0.0

        if self.age >= self.max_age:
            self.state = EffectState.DEAD
            self.dispose()
            return False
        return True

    def dispose(self):
        """Release drawable resources and mark the burst dead. Safe to call more than once."""
        if self._disposed:
            return
        self.state = EffectState.DEAD
        self._disposed = True
        if self._on_dispose is not None:
            self._on_dispose(self)
        logger.debug(f"Disposed burst of {len(self)} particles after {self.age} frames")
