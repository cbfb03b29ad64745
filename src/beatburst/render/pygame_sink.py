"""
pygame render sink.

Draws the live particle bursts over a static star field. The sink only
reads effect state; the EffectManager decides when drawables come and go.
"""

import logging

import numpy as np
import pygame

from beatburst.config import SceneConfig
from beatburst.effects.particle import ParticleEffect
from beatburst.render.camera import PerspectiveCamera

logger = logging.getLogger(__name__)


class PygameRenderSink:
    """
    Renders registered ParticleEffects onto a pygame Surface.

    The target surface can be the display or any off-screen Surface.
    """

    STAR_COLOR = (255, 255, 255)

    def __init__(
        self,
        surface: pygame.Surface,
        config: SceneConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.cfg = config or SceneConfig()
        self.surface = surface
        rng = rng if rng is not None else np.random.default_rng()

        self.camera = PerspectiveCamera(
            fov=self.cfg.fov,
            near=self.cfg.near,
            far=self.cfg.far,
            z=self.cfg.camera_z,
        )
        self.stars = (rng.random((self.cfg.star_count, 3)) - 0.5) * self.cfg.star_spread

        self._drawables: dict[int, ParticleEffect] = {}
        self._background: pygame.Surface | None = None
        self.width, self.height = surface.get_size()
        self.set_viewport(self.width, self.height)

    def __len__(self) -> int:
        return len(self._drawables)

    def __contains__(self, effect: ParticleEffect) -> bool:
        return id(effect) in self._drawables

    def add_drawable(self, effect: ParticleEffect):
        self._drawables[id(effect)] = effect

    def remove_drawable(self, effect: ParticleEffect):
        del self._drawables[id(effect)]

    def set_viewport(self, width: int, height: int):
        """Resize the projection and rebuild the star background."""
        self.width, self.height = width, height
        self.camera.set_aspect(width, height)
        self._background = self._render_background()
        logger.debug(f"Viewport set to {width}x{height}")

    def _render_background(self) -> pygame.Surface:
        background = pygame.Surface((self.width, self.height))
        background.fill(self.cfg.background)

        pixels, _, visible = self.camera.project(self.stars, self.width, self.height)
        for x, y in pixels[visible].astype(int):
            if 0 <= x < self.width and 0 <= y < self.height:
                background.set_at((int(x), int(y)), self.STAR_COLOR)
        return background

    def draw(self):
        """Paint the star field and every registered burst."""
        self.surface.blit(self._background, (0, 0))
        for effect in list(self._drawables.values()):
            self._draw_effect(effect)

    def _draw_effect(self, effect: ParticleEffect):
        if effect.opacity <= 0.0:
            return

        pixels, depth, visible = self.camera.project(effect.positions, self.width, self.height)
        if not visible.any():
            return

        # Additive over black: fading is a scale toward the background
        color = tuple(int(round(c * 255 * effect.opacity)) for c in effect.color)
        radii = self.camera.point_radius(effect.point_size, depth[visible], self.height)

        for (x, y), r in zip(pixels[visible], radii):
            pygame.draw.circle(self.surface, color, (int(x), int(y)), int(round(r)))
