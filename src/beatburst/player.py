"""
Real-time player.

Plays an audio file through pygame.mixer and runs two cadences on the
pygame event loop: a timer-driven audio analysis callback and a
display-rate render callback.

Controls:
    Space   play / pause
    Esc     quit
"""

import logging
import time
from pathlib import Path
from typing import Union

import numpy as np
import pygame

from beatburst.config import BeatburstConfig
from beatburst.core.spectrum import FileSpectrumSource
from beatburst.render.pygame_sink import PygameRenderSink
from beatburst.session import BeatSession

logger = logging.getLogger(__name__)

ANALYSIS_EVENT = pygame.USEREVENT + 1


class Player:
    """Interactive beat-synchronised fireworks window."""

    def __init__(
        self,
        audio_path: Union[str, Path],
        config: BeatburstConfig | None = None,
        seed: int | None = None,
    ):
        self.cfg = config or BeatburstConfig()
        self.audio_path = Path(audio_path)
        self.seed = seed

        self.source: FileSpectrumSource | None = None
        self.session: BeatSession | None = None
        self.sink: PygameRenderSink | None = None
        self._font: pygame.font.Font | None = None
        self._paused = False

    def _setup(self):
        scene = self.cfg.scene

        self.source = FileSpectrumSource(self.audio_path, self.cfg.analysis)

        pygame.mixer.pre_init(frequency=self.source.sr)
        pygame.init()
        screen = pygame.display.set_mode((scene.width, scene.height), pygame.RESIZABLE)
        pygame.display.set_caption(f"beatburst - {self.audio_path.name}")
        self._font = pygame.font.Font(None, 28)

        self.sink = PygameRenderSink(screen, scene, rng=np.random.default_rng(self.seed))
        self.session = BeatSession(self.cfg, self.sink, seed=self.seed)

        pygame.mixer.music.load(str(self.audio_path))
        interval_ms = max(1, int(round(1000.0 / self.cfg.analysis.analysis_rate)))
        pygame.time.set_timer(ANALYSIS_EVENT, interval_ms)
        logger.info(f"Analysis every {interval_ms} ms, rendering at {scene.fps} fps")

    def play(self):
        """Resume a paused stream, otherwise start the track from the top."""
        if self._paused:
            pygame.mixer.music.unpause()
        else:
            pygame.mixer.music.play()
        self._paused = False
        self.session.playing = True
        logger.info("Playing")

    def pause(self):
        pygame.mixer.music.pause()
        self._paused = True
        self.session.playing = False
        logger.info("Paused")

    def toggle(self):
        if self.session.playing:
            self.pause()
        else:
            self.play()

    def _on_analysis(self):
        # Paused: no signal, no events. Cooldowns and history stay as they are.
        if not self.session.playing:
            return
        t = pygame.mixer.music.get_pos() / 1000.0
        self.session.on_spectrum(self.source.frame_at(t), time.monotonic())

    def _check_track_end(self):
        if self.session.playing and not pygame.mixer.music.get_busy():
            logger.info("Track finished")
            self.session.playing = False
            self._paused = False

    def _on_resize(self, width: int, height: int):
        self.sink.surface = pygame.display.get_surface()
        self.sink.set_viewport(width, height)

    def _draw_hud(self):
        text = self.session.status(time.monotonic())
        label = self._font.render(text, True, (220, 220, 220))
        self.sink.surface.blit(label, (16, 16))

    def run(self):
        """Open the window and block until the user quits."""
        self._setup()
        clock = pygame.time.Clock()
        self.play()

        running = True
        try:
            while running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        running = False
                    elif event.type == pygame.KEYDOWN:
                        if event.key == pygame.K_ESCAPE:
                            running = False
                        elif event.key == pygame.K_SPACE:
                            self.toggle()
                    elif event.type == pygame.VIDEORESIZE:
                        self._on_resize(event.w, event.h)
                    elif event.type == ANALYSIS_EVENT:
                        self._on_analysis()

                self._check_track_end()

                self.session.on_frame()
                self.sink.draw()
                self._draw_hud()
                pygame.display.flip()
                clock.tick(self.cfg.scene.fps)
        finally:
            pygame.time.set_timer(ANALYSIS_EVENT, 0)
            self.session.manager.clear()
            pygame.quit()
