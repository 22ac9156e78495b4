"""Synthesized notification chimes rendered to in-memory WAV clips."""
from __future__ import annotations

import io
import math
import wave
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from .models import Signal

SAMPLE_RATE = 22050
_DECAY_FLOOR = 0.001
_MAX_AMPLITUDE = 32767


@dataclass(frozen=True)
class Tone:
    frequency: float
    start: float  # seconds from clip start
    duration: float
    volume: float = 0.1


CHIMES: Dict[Signal, Tuple[Tone, ...]] = {
    # Ascending C5 - E5 - G5 triad.
    Signal.TASK_COMPLETE: (
        Tone(523.25, 0.0, 0.3),
        Tone(659.25, 0.15, 0.3),
        Tone(783.99, 0.3, 0.6),
    ),
    # Three alarm beeps.
    Signal.BREAK_FINISHED: (
        Tone(880.0, 0.0, 0.15, 0.15),
        Tone(880.0, 0.3, 0.15, 0.15),
        Tone(880.0, 0.6, 0.4, 0.15),
    ),
}


def clip_length(tones: Tuple[Tone, ...]) -> float:
    return max(tone.start + tone.duration for tone in tones)


def render_samples(tones: Tuple[Tone, ...], sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Mix sine tones with an exponential fade into float samples in [-1, 1]."""
    total = int(math.ceil(clip_length(tones) * sample_rate))
    samples = np.zeros(total, dtype=np.float64)
    for tone in tones:
        first = int(tone.start * sample_rate)
        count = min(int(tone.duration * sample_rate), total - first)
        if count <= 0:
            continue
        t = np.arange(count) / sample_rate
        envelope = tone.volume * (_DECAY_FLOOR / tone.volume) ** (t / tone.duration)
        samples[first:first + count] += envelope * np.sin(2 * np.pi * tone.frequency * t)
    return np.clip(samples, -1.0, 1.0)


def render_chime(signal: Signal, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Return a mono 16-bit WAV clip for the given notification kind."""
    samples = render_samples(CHIMES[signal], sample_rate)
    frames = (samples * _MAX_AMPLITUDE).astype("<i2").tobytes()
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as writer:
        writer.setnchannels(1)
        writer.setsampwidth(2)
        writer.setframerate(sample_rate)
        writer.writeframes(frames)
    return buffer.getvalue()
