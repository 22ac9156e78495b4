import io
import wave

import numpy as np
import pytest

from dayflow.models import Signal
from dayflow.tones import CHIMES, SAMPLE_RATE, Tone, clip_length, render_chime, render_samples


@pytest.mark.parametrize(
    ("signal", "frames"),
    [(Signal.TASK_COMPLETE, 19845), (Signal.BREAK_FINISHED, 22050)],
)
def test_render_chime_writes_mono_wav(signal: Signal, frames: int) -> None:
    data = render_chime(signal)
    assert data[:4] == b"RIFF"

    with wave.open(io.BytesIO(data), "rb") as reader:
        assert reader.getnchannels() == 1
        assert reader.getsampwidth() == 2
        assert reader.getframerate() == SAMPLE_RATE
        assert reader.getnframes() == frames
        payload = np.frombuffer(reader.readframes(frames), dtype="<i2")

    assert payload.size == frames
    assert np.abs(payload).max() > 0


def test_samples_stay_in_range() -> None:
    for tones in CHIMES.values():
        samples = render_samples(tones, sample_rate=8000)
        assert samples.size > 0
        assert samples.min() >= -1.0
        assert samples.max() <= 1.0
        assert np.any(samples != 0.0)


def test_break_chime_has_silent_gaps() -> None:
    tones = CHIMES[Signal.BREAK_FINISHED]
    samples = render_samples(tones, sample_rate=1000)
    assert clip_length(tones) == pytest.approx(1.0)
    assert np.all(samples[160:290] == 0.0)


def test_tone_fades_from_volume_towards_floor() -> None:
    tone = Tone(frequency=250.0, start=0.0, duration=1.0, volume=0.5)
    samples = render_samples((tone,), sample_rate=1000)
    # Peaks of a 250 Hz sine at 1 kHz sit on every fourth sample.
    peaks = samples[1::4]
    assert peaks[0] == pytest.approx(0.5, rel=0.01)
    assert peaks[-1] == pytest.approx(0.001, abs=0.0005)
    assert np.all(np.diff(peaks) < 0)


def test_loud_overlapping_tones_are_clipped() -> None:
    tones = (Tone(100.0, 0.0, 0.1, 1.0), Tone(100.0, 0.0, 0.1, 1.0))
    samples = render_samples(tones, sample_rate=4000)
    assert samples.max() == 1.0
    assert samples.min() == -1.0
