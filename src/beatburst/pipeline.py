"""
Offline onset analysis.

Walks an audio file at the live callback rate and runs the exact same
band/detector chain the player uses, with playback time as the clock.
"""

import logging
from pathlib import Path
from typing import Any, Union

from beatburst.config import BeatburstConfig
from beatburst.core.spectrum import FileSpectrumSource
from beatburst.io.exporter import EventExporter
from beatburst.session import BeatSession

logger = logging.getLogger(__name__)


class OnsetPipeline:
    """Audio file to onset event list."""

    def __init__(self, config: BeatburstConfig | None = None):
        self.cfg = config or BeatburstConfig()
        self.exporter = EventExporter()

    def process(
        self,
        audio_path: Union[str, Path],
        output_path: Union[str, Path] | None = None,
        rate: float | None = None,
        max_duration: float | None = None,
        progress_callback=None,
    ) -> dict[str, Any]:
        """
        Detect onsets across a whole file.

        Args:
            audio_path: Input audio file.
            output_path: Optional JSON destination.
            rate: Analysis callbacks per second (defaults to config).
            max_duration: Only analyse the first N seconds.
            progress_callback: Optional callback(current_frame, total_frames).

        Returns:
            Dict with the export document, event objects and run info.
        """
        rate = rate or self.cfg.analysis.analysis_rate
        source = FileSpectrumSource(audio_path, self.cfg.analysis)
        session = BeatSession(self.cfg)

        duration = source.duration
        if max_duration is not None:
            duration = min(duration, max_duration)
        total = int(duration * rate)

        events = []
        for i, (t, spectrum) in enumerate(source.frames(rate=rate, max_duration=duration)):
            events.extend(session.on_spectrum(spectrum, t))
            if progress_callback:
                progress_callback(i + 1, total)

        logger.info(f"Detected {len(events)} onsets in {duration:.2f}s")

        num_bands = self.cfg.detector.num_bands
        result = {
            "document": self.exporter.to_dict(events, duration, num_bands, rate),
            "events": events,
            "duration": duration,
            "n_frames": total,
        }

        if output_path:
            written = self.exporter.export_json(events, duration, num_bands, rate, output_path)
            result["output_path"] = str(written)

        return result
