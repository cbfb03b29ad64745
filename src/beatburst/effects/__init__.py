"""Particle bursts and their lifecycle."""

from beatburst.effects.director import EffectDirector, SpawnRequest
from beatburst.effects.manager import EffectHandle, EffectManager
from beatburst.effects.particle import EffectState, ParticleEffect

__all__ = [
    "EffectDirector",
    "SpawnRequest",
    "EffectHandle",
    "EffectManager",
    "EffectState",
    "ParticleEffect",
]
