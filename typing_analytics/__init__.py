# ABOUTME: Package initialization for the real-time typing analytics engine
"""
Real-time Typing Analytics

Turns the keystroke stream of a timed typing test into accuracy, rhythm,
error and personality metrics plus prioritized improvement tips.
"""

__version__ = "1.0.0"
__description__ = (
    "Real-time typing test analytics with correction-aware accuracy and coaching tips"
)

from .analyzer import TypingAnalytics
from .session import TypingSession, load_keystroke_log, replay_events, write_report
from .utils import KeystrokeEvent, ConfigManager, BACKSPACE

__all__ = [
    "TypingAnalytics",
    "TypingSession",
    "KeystrokeEvent",
    "ConfigManager",
    "BACKSPACE",
    "load_keystroke_log",
    "replay_events",
    "write_report",
]
