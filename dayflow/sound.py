"""Chime playback for task and break notifications."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from .models import Signal
from .tones import render_chime

logger = logging.getLogger(__name__)


class ChimePlayer(QObject):
    """Render each chime once into the cache directory and play it on demand."""

    def __init__(self, cache_dir: Path | str, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.cache_dir = Path(cache_dir)
        self._effects: Dict[Signal, QSoundEffect] = {}

    def play(self, signal: Signal) -> None:
        try:
            effect = self._effects.get(signal) or self._load(signal)
            if effect.isPlaying():
                effect.stop()
            effect.play()
            logger.debug("Playing %s chime", signal.name)
        except OSError:
            # Best effort only.
            logger.exception("Could not play %s chime", signal.name)

    def _load(self, signal: Signal) -> QSoundEffect:
        path = self.cache_dir / f"chime_{signal.value.lower()}.wav"
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(render_chime(signal))
        effect = QSoundEffect(self)
        effect.setSource(QUrl.fromLocalFile(str(path)))
        effect.setVolume(1.0)
        self._effects[signal] = effect
        return effect
