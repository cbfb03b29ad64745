"""End-to-end tests for the audio and render callbacks."""

import pytest

from beatburst.session import BeatSession
from conftest import flat_spectrum, spiked_spectrum

FRAME = 1 / 60


@pytest.fixture
def session(config, sink) -> BeatSession:
    return BeatSession(config, sink, seed=42)


class TestScenario:
    def test_flat_then_bass_spike(self, session):
        """Flat 10 for five callbacks, then band 0 jumps to 200."""
        for i in range(5):
            assert session.on_spectrum(flat_spectrum(10), i * FRAME) == []

        events = session.on_spectrum(spiked_spectrum(0, level=200), 5 * FRAME)

        assert len(events) == 1
        event = events[0]
        assert event.band_index == 0
        assert event.frequency_position == 0.0
        assert event.intensity == pytest.approx(min(1.5, 200 / 80))
        assert event.speed == pytest.approx(min(2.5, 0.8 + 190 / 30))

        # Sustained spike on the next callback is inside the cooldown
        assert session.on_spectrum(spiked_spectrum(0, level=200), 6 * FRAME) == []

    def test_onset_spawns_a_burst(self, session, sink):
        for i in range(5):
            session.on_spectrum(flat_spectrum(10), i * FRAME)
        session.on_spectrum(spiked_spectrum(3, level=120), 5 * FRAME)

        assert len(session.manager) == 1
        assert len(sink.drawables) == 1
        assert session.onset_count == 1

    def test_treble_spike_maps_to_top_band(self, session):
        for i in range(4):
            session.on_spectrum(flat_spectrum(10), i * FRAME)
        events = session.on_spectrum(spiked_spectrum(7, level=90), 4 * FRAME)
        assert [e.band_index for e in events] == [7]
        assert events[0].frequency_position == pytest.approx(7 / 8)

    def test_spawn_cap_applies_per_callback(self, session):
        for i in range(4):
            session.on_spectrum(flat_spectrum(10), i * FRAME)
        events = session.on_spectrum(flat_spectrum(200), 4 * FRAME)

        assert len(events) == 8
        assert len(session.manager) == 3
        assert session.director.dropped == 5


class TestRenderCallback:
    def test_bursts_age_and_retire(self, session, sink):
        for i in range(5):
            session.on_spectrum(flat_spectrum(10), i * FRAME)
        session.on_spectrum(spiked_spectrum(0, level=200), 5 * FRAME)
        effect = session.manager.effects[0]

        frames = 0
        while len(session.manager):
            session.on_frame(playing=True)
            frames += 1
        assert frames == effect.max_age
        assert sink.removed == [effect]

    def test_render_without_audio_is_safe(self, session):
        for _ in range(10):
            assert session.on_frame(playing=False) == []

    def test_paused_effects_keep_aging(self, session):
        for i in range(5):
            session.on_spectrum(flat_spectrum(10), i * FRAME)
        session.on_spectrum(spiked_spectrum(0, level=200), 5 * FRAME)

        session.on_frame(playing=False)
        assert session.manager.effects[0].age == 1

    def test_ambient_launch_only_while_playing(self, config, sink):
        config.ambient_spawn_chance = 1.0
        session = BeatSession(config, sink, seed=1)

        session.on_frame(playing=False)
        assert len(session.manager) == 0

        session.on_frame(playing=True)
        assert len(session.manager) == 1
        assert session.manager.effects[0].age == 1

    def test_headless_session_has_no_manager(self, config):
        session = BeatSession(config)
        assert session.manager is None
        assert session.on_frame(playing=True) == []


class TestStatus:
    def test_boom_after_onset(self, session):
        session.playing = True
        assert session.status(0.0) == "Playing..."

        for i in range(5):
            session.on_spectrum(flat_spectrum(10), i * FRAME)
        session.on_spectrum(spiked_spectrum(0, level=200), 1.0)

        assert session.status(1.05) == "BOOM!"
        assert session.status(1.2) == "Playing..."

    def test_paused(self, session):
        assert session.status(0.0) == "Paused"

    def test_reset(self, session, sink):
        for i in range(5):
            session.on_spectrum(flat_spectrum(10), i * FRAME)
        session.on_spectrum(spiked_spectrum(0, level=200), 5 * FRAME)

        session.reset()
        assert len(session.manager) == 0
        assert sink.drawables == []
        assert session.onset_count == 0
        assert len(session.detector.history) == 0
