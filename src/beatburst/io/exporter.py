"""
Onset event serialization.

Exports detected onsets to a JSON document with a small metadata header,
so offline analysis runs can be inspected or replayed elsewhere.
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable, Union

from beatburst.core.detector import OnsetEvent

logger = logging.getLogger(__name__)


@dataclass
class EventMetadata:
    """Header for an exported event list."""

    duration: float
    n_events: int
    num_bands: int
    analysis_rate: float
    schema_version: str = "1.0"


class EventExporter:
    """Serializes OnsetEvents to dicts and JSON files."""

    def __init__(self, precision: int = 4):
        """
        Args:
            precision: Decimal places for floating point values.
        """
        self.precision = precision

    def _round(self, value: float) -> float:
        return round(float(value), self.precision)

    def _build_event(self, event: OnsetEvent) -> dict[str, Any]:
        return {
            "time": self._round(event.timestamp),
            "band_index": event.band_index,
            "frequency_position": self._round(event.frequency_position),
            "intensity": self._round(event.intensity),
            "speed": self._round(event.speed),
            "energy": self._round(event.energy),
            "threshold": self._round(event.threshold),
        }

    def to_dict(
        self,
        events: Iterable[OnsetEvent],
        duration: float,
        num_bands: int,
        analysis_rate: float,
    ) -> dict[str, Any]:
        """Build the complete export document."""
        events = list(events)
        metadata = EventMetadata(
            duration=self._round(duration),
            n_events=len(events),
            num_bands=num_bands,
            analysis_rate=self._round(analysis_rate),
        )

        per_band = [0] * num_bands
        for event in events:
            per_band[event.band_index] += 1

        return {
            "metadata": asdict(metadata),
            "band_counts": per_band,
            "events": [self._build_event(e) for e in events],
        }

    def export_json(
        self,
        events: Iterable[OnsetEvent],
        duration: float,
        num_bands: int,
        analysis_rate: float,
        output_path: Union[str, Path],
        indent: int = 2,
    ) -> Path:
        """
        Write events to a JSON file.

        Returns:
            Path to the written file.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        document = self.to_dict(events, duration, num_bands, analysis_rate)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=indent)

        logger.info(f"Wrote {document['metadata']['n_events']} events to {output_path}")
        return output_path
