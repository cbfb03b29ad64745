"""
Configuration for the beatburst engine.

Every tunable lives in a dataclass section with a literal default.
Sections can be overridden from a JSON file with the same nesting.
"""

import json
import logging
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Tuple, Union

logger = logging.getLogger(__name__)


@dataclass
class AnalysisConfig:
    """Spectrum source settings (mirrors a browser AnalyserNode)."""

    fft_size: int = 2048
    smoothing: float = 0.6  # smoothingTimeConstant
    min_db: float = -100.0
    max_db: float = -30.0
    sample_rate: int | None = None  # None keeps the file's native rate
    analysis_rate: float = 60.0  # audio callbacks per second

    @property
    def n_bins(self) -> int:
        return self.fft_size // 2


@dataclass
class DetectorConfig:
    """Adaptive per-band onset detection thresholds."""

    num_bands: int = 8
    history_size: int = 10
    cooldown_ms: float = 80.0
    min_history: int = 3

    # Gating. These are tuning defaults, not derived constants.
    threshold_floor: float = 8.0
    variance_multiplier: float = 1.5
    increase_floor: float = 5.0
    energy_floor: float = 20.0

    # Event metadata mapping
    speed_base: float = 0.8
    speed_divisor: float = 30.0
    max_speed: float = 2.5
    intensity_divisor: float = 80.0
    max_intensity: float = 1.5


@dataclass
class DirectorConfig:
    """Onset to burst mapping."""

    max_spawns_per_frame: int = 3
    x_range: Tuple[float, float] = (-4.0, 4.0)
    y_range: Tuple[float, float] = (0.0, 4.0)
    min_particles: int = 80
    max_particles: int = 140
    base_point_size: float = 0.08
    point_size_gain: float = 0.06
    base_lifetime: int = 120  # frames at speed 1.0
    min_lifetime: int = 1


@dataclass
class ParticleConfig:
    """Burst physics."""

    gravity: float = 0.001  # per frame, subtracted from vy
    base_speed: float = 0.02
    speed_variance: float = 0.05


@dataclass
class SceneConfig:
    """Window, camera and star field."""

    width: int = 1280
    height: int = 720
    fps: int = 60
    star_count: int = 3000
    star_spread: float = 2000.0
    fov: float = 75.0
    near: float = 0.1
    far: float = 1000.0
    camera_z: float = 5.0
    background: Tuple[int, int, int] = (0, 0, 0)


@dataclass
class BeatburstConfig:
    """Top-level configuration."""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    director: DirectorConfig = field(default_factory=DirectorConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
    scene: SceneConfig = field(default_factory=SceneConfig)

    # Random idle launch probability per render frame while playing
    ambient_spawn_chance: float = 0.01
    boom_duration: float = 0.1  # seconds the status shows "BOOM!"

    def validate(self):
        """Raise ValueError on settings that cannot work."""
        if self.detector.num_bands < 1:
            raise ValueError(f"num_bands must be >= 1, got {self.detector.num_bands}")
        if self.detector.history_size < 2:
            raise ValueError(
                f"history_size must be >= 2, got {self.detector.history_size}"
            )
        if self.detector.min_history < 1:
            raise ValueError(f"min_history must be >= 1, got {self.detector.min_history}")
        if self.detector.history_size - 1 < self.detector.min_history:
            raise ValueError(
                f"history_size ({self.detector.history_size}) must leave at least "
                f"min_history ({self.detector.min_history}) preceding frames"
            )
        if self.detector.cooldown_ms < 0:
            raise ValueError(f"cooldown_ms must be >= 0, got {self.detector.cooldown_ms}")
        if self.analysis.fft_size < 2 or self.analysis.fft_size & (self.analysis.fft_size - 1):
            raise ValueError(f"fft_size must be a power of two, got {self.analysis.fft_size}")
        if self.analysis.n_bins < self.detector.num_bands:
            raise ValueError(
                f"{self.analysis.n_bins} frequency bins cannot hold "
                f"{self.detector.num_bands} bands"
            )
        if not 0.0 <= self.analysis.smoothing < 1.0:
            raise ValueError(f"smoothing must be in [0, 1), got {self.analysis.smoothing}")
        if self.analysis.analysis_rate <= 0:
            raise ValueError(
                f"analysis_rate must be positive, got {self.analysis.analysis_rate}"
            )
        if self.director.max_spawns_per_frame < 0:
            raise ValueError("max_spawns_per_frame must be >= 0")
        if self.director.min_particles > self.director.max_particles:
            raise ValueError("min_particles must not exceed max_particles")
        for name in ("x_range", "y_range"):
            lo, hi = getattr(self.director, name)
            if lo > hi:
                raise ValueError(f"{name} must be (low, high), got ({lo}, {hi})")
        if self.director.min_lifetime < 1:
            raise ValueError(f"min_lifetime must be >= 1, got {self.director.min_lifetime}")
        if self.director.base_lifetime < self.director.min_lifetime:
            raise ValueError(
                f"base_lifetime ({self.director.base_lifetime}) must be >= "
                f"min_lifetime ({self.director.min_lifetime})"
            )
        if not 0.0 <= self.ambient_spawn_chance <= 1.0:
            raise ValueError(
                f"ambient_spawn_chance must be in [0, 1], got {self.ambient_spawn_chance}"
            )
        return self

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BeatburstConfig":
        """
        Build a config from a nested dict.

        Sections and keys match the dataclass field names. Missing keys keep
        their defaults; unknown keys raise ValueError.
        """
        return _build(cls, data, path="").validate()

    def to_dict(self) -> dict[str, Any]:
        return _dump(self)


def _build(cls, data: dict[str, Any], path: str):
    if not isinstance(data, dict):
        raise ValueError(f"Expected an object for '{path or 'config'}', got {type(data).__name__}")

    known = {f.name: f for f in fields(cls)}
    unknown = set(data) - set(known)
    if unknown:
        where = f" in '{path}'" if path else ""
        raise ValueError(f"Unknown config keys{where}: {', '.join(sorted(unknown))}")

    kwargs = {}
    for name, value in data.items():
        default = getattr(cls(), name)
        if is_dataclass(default):
            kwargs[name] = _build(type(default), value, f"{path}.{name}" if path else name)
        elif isinstance(default, tuple):
            kwargs[name] = tuple(value)
        else:
            kwargs[name] = value
    return cls(**kwargs)


def _dump(obj) -> dict[str, Any]:
    out = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if is_dataclass(value):
            out[f.name] = _dump(value)
        elif isinstance(value, tuple):
            out[f.name] = list(value)
        else:
            out[f.name] = value
    return out


def load_config(path: Union[str, Path, None] = None) -> BeatburstConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: JSON file path. None returns the defaults.

    Returns:
        Validated BeatburstConfig.
    """
    if path is None:
        return BeatburstConfig().validate()

    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    logger.info(f"Loaded config from {path}")
    return BeatburstConfig.from_dict(data)
