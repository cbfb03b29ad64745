"""Beat-synchronised particle fireworks driven by real-time onset detection."""

from beatburst.config import BeatburstConfig, load_config
from beatburst.core.bands import compute_band_energies
from beatburst.core.detector import OnsetDetector, OnsetEvent
from beatburst.effects.director import EffectDirector, SpawnRequest
from beatburst.effects.manager import EffectHandle, EffectManager
from beatburst.effects.particle import EffectState, ParticleEffect
from beatburst.session import BeatSession

__version__ = "0.1.0"
__all__ = [
    "BeatburstConfig",
    "load_config",
    "compute_band_energies",
    "OnsetDetector",
    "OnsetEvent",
    "EffectDirector",
    "SpawnRequest",
    "EffectHandle",
    "EffectManager",
    "EffectState",
    "ParticleEffect",
    "BeatSession",
]
