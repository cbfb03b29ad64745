"""
Live effect bookkeeping.

The manager is the only owner of ParticleEffects. It registers each new
burst with the render sink, advances every burst once per render frame
and retires dead ones through their dispose hook.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Iterator, Protocol

import numpy as np

from beatburst.config import ParticleConfig
from beatburst.effects.director import SpawnRequest
from beatburst.effects.particle import ParticleEffect

logger = logging.getLogger(__name__)


class RenderSink(Protocol):
    """What the manager needs from a renderer."""

    def add_drawable(self, effect: ParticleEffect) -> None: ...

    def remove_drawable(self, effect: ParticleEffect) -> None: ...

    def set_viewport(self, width: int, height: int) -> None: ...

    def draw(self) -> None: ...


@dataclass(frozen=True)
class EffectHandle:
    id: int


class EffectManager:
    """Owns the live set of bursts."""

    def __init__(
        self,
        sink: RenderSink,
        config: ParticleConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.sink = sink
        self.cfg = config or ParticleConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self._live: dict[EffectHandle, ParticleEffect] = {}
        self._ids = itertools.count()

        # Lifetime counters
        self.created = 0
        self.retired = 0

    def __len__(self) -> int:
        return len(self._live)

    def __contains__(self, handle: EffectHandle) -> bool:
        return handle in self._live

    def __iter__(self) -> Iterator[ParticleEffect]:
        return iter(list(self._live.values()))

    @property
    def effects(self) -> list[ParticleEffect]:
        return list(self._live.values())

    def get(self, handle: EffectHandle) -> ParticleEffect | None:
        return self._live.get(handle)

    def create(self, request: SpawnRequest) -> EffectHandle:
        """Spawn a burst and register it with the sink."""
        effect = ParticleEffect(
            request,
            config=self.cfg,
            rng=self.rng,
            on_dispose=self.sink.remove_drawable,
        )
        handle = EffectHandle(next(self._ids))
        self.sink.add_drawable(effect)
        self._live[handle] = effect
        self.created += 1
        return handle

    def advance_all(self) -> list[EffectHandle]:
        """
        Advance every live burst exactly once and retire the ones that died.

        Returns:
            Handles of the bursts retired during this call.
        """
        retired = []
        for handle, effect in list(self._live.items()):
            if not effect.advance():
                del self._live[handle]
                retired.append(handle)

        self.retired += len(retired)
        return retired

    def clear(self):
        """Dispose every live burst without advancing it."""
        for effect in self._live.values():
            effect.dispose()
        self.retired += len(self._live)
        self._live.clear()
