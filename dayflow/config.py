"""Application defaults and environment overrides."""
from __future__ import annotations

import logging
import os
from pathlib import Path

TICK_INTERVAL_MS = 1000
QUOTE_ROTATION_MS = 5 * 60 * 1000
DEFAULT_TASK_MINUTES = 60
DELAY_STEP_MINUTES = 5
BREAK_PRESETS = (5, 10, 15, 20, 30, 45)
DEFAULT_BREAK_MINUTES = 10
MAX_BREAK_MINUTES = 240

MOTIVATIONAL_QUOTES = (
    "Consistency is the key to achieving your dreams.",
    "Focus on being productive instead of busy.",
    "Small daily improvements are the key to staggering long-term results.",
    "The secret of your future is hidden in your daily routine.",
    "Don't watch the clock; do what it does. Keep going.",
    "Discipline is choosing between what you want now and what you want most.",
    "Success is the sum of small efforts, repeated day in and day out.",
    "Your direction is more important than your speed.",
    "The only way to do great work is to love what you do.",
    "Action is the foundational key to all success.",
)

_HOME_ENV = "DAYFLOW_HOME"
_LOG_LEVEL_ENV = "DAYFLOW_LOG_LEVEL"
_DEFAULT_HOME = Path.home() / ".dayflow"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def data_dir() -> Path:
    """Directory holding the saved plan, history, notes and chime cache."""
    override = os.environ.get(_HOME_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return _DEFAULT_HOME


def configure_logging(level: str | None = None) -> None:
    """Set up root logging once, honouring DAYFLOW_LOG_LEVEL."""
    name = (level or os.environ.get(_LOG_LEVEL_ENV) or "WARNING").upper()
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(level=numeric, format=_LOG_FORMAT)
