# ABOUTME: Real-time typing analytics engine fed one keystroke at a time during a typing test
from typing import List, Dict, Any, Optional
import logging

import numpy as np

from .insights import SessionMetrics, build_personality_profile, build_tips
from .utils import (
    Clock,
    ConfigManager,
    CorrectionEvent,
    KeystrokeEvent,
    PauseEvent,
    round_half_up,
    system_clock,
)


class TypingAnalytics:
    """Stateful accuracy, rhythm, error and personality analytics for one test attempt.

    The host calls ``record_keystroke`` for every typed character, correction
    and named key, then reads ``get_summary`` (or the individual calculators)
    whenever it needs numbers. Reads never change state.
    """

    def __init__(
        self, config: Optional[ConfigManager] = None, clock: Optional[Clock] = None
    ):
        self.config = config
        self.clock = clock or system_clock

        self.rhythm_min_samples = self._setting("rhythm_min_samples", 10)
        self.rhythm_max_interval = self._setting("rhythm_max_interval_ms", 2000)
        self.pause_threshold = self._setting("pause_threshold_ms", 1000)
        self.correction_bonus_cap = self._setting("correction_bonus_cap", 5)
        self.problem_character_limit = self._setting("problem_character_limit", 5)
        self.min_tips = self._setting("min_tips", 4)
        self.max_tips = self._setting("max_tips", 6)

        self.reset()

    def _setting(self, name: str, default: Any) -> Any:
        if self.config is None:
            return default
        return self.config.get(f"analytics.{name}", default)

    def reset(self) -> None:
        """Clear all state back to the constructed-empty condition."""
        self.key_events: List[KeystrokeEvent] = []
        self.corrections: List[CorrectionEvent] = []
        self.pause_events: List[PauseEvent] = []
        self.problem_characters: Dict[str, int] = {}
        self.character_velocities: Dict[str, List[float]] = {}
        self.rhythm_samples: List[float] = []

        self.last_key_time: Optional[float] = None
        self.current_position = 0
        self.total_backspaces = 0
        self.consecutive_errors = 0
        self.max_consecutive_errors = 0
        self.flow_interruptions = 0

        # Real-time accuracy tracking
        self.total_characters_typed = 0
        self.correct_characters_typed = 0
        self.errors_committed = 0
        self.corrections_made = 0

    def record_keystroke(
        self,
        key: str,
        target: Optional[str] = None,
        is_correct: bool = False,
        timestamp: Optional[float] = None,
        position: int = 0,
    ) -> KeystrokeEvent:
        """Record a keystroke, a Backspace correction or a named key."""
        now = self.clock() if timestamp is None else timestamp
        time_delta = now - self.last_key_time if self.last_key_time is not None else 0

        event = KeystrokeEvent(
            key=key,
            target=target,
            is_correct=is_correct,
            timestamp=now,
            position=position,
            time_delta=time_delta,
        )
        self.key_events.append(event)

        if event.is_deletion:
            self._record_correction(now, position)
        else:
            if event.is_character:
                self._record_character(event)
            self._record_timing(event)

        self.last_key_time = now
        self.current_position = position
        logging.debug(
            f"Recorded {key!r} at position {position} (delta {time_delta}ms)"
        )
        return event

    def _record_correction(self, timestamp: float, position: int) -> None:
        self.total_backspaces += 1
        self.corrections.append(
            CorrectionEvent(
                timestamp=timestamp,
                position=position,
                correction_index=len(self.corrections),
            )
        )
        self.corrections_made += 1

    def _record_character(self, event: KeystrokeEvent) -> None:
        self.total_characters_typed += 1

        if event.is_correct:
            self.correct_characters_typed += 1
            self.consecutive_errors = 0
            if event.target:
                self.character_velocities.setdefault(event.target, []).append(
                    event.time_delta
                )
        else:
            self.errors_committed += 1
            if event.target:
                self.problem_characters[event.target] = (
                    self.problem_characters.get(event.target, 0) + 1
                )
            self.consecutive_errors += 1
            self.max_consecutive_errors = max(
                self.max_consecutive_errors, self.consecutive_errors
            )

    def _record_timing(self, event: KeystrokeEvent) -> None:
        if 0 < event.time_delta < self.rhythm_max_interval:
            self.rhythm_samples.append(event.time_delta)

        if event.time_delta > self.pause_threshold:
            self.flow_interruptions += 1
            self.pause_events.append(
                PauseEvent(
                    timestamp=event.timestamp,
                    duration=event.time_delta,
                    position=event.position,
                )
            )

    def calculate_true_accuracy(self) -> Dict[str, Any]:
        """First-pass accuracy plus a capped bonus for correcting mistakes."""
        if self.total_characters_typed == 0:
            return {
                "raw": 100,
                "adjusted": 100,
                "correction_bonus": 0,
                "corrections": 0,
                "errors_committed": 0,
                "correct_typed": 0,
                "total_typed": 0,
            }

        base_accuracy = (
            self.correct_characters_typed / self.total_characters_typed * 100
        )
        correction_ratio = self.corrections_made / max(self.errors_committed, 1)
        correction_bonus = min(
            correction_ratio * self.correction_bonus_cap, self.correction_bonus_cap
        )
        adjusted_accuracy = min(100, base_accuracy + correction_bonus)

        return {
            "raw": round_half_up(base_accuracy),
            "adjusted": round_half_up(adjusted_accuracy),
            "correction_bonus": round_half_up(correction_bonus, 1),
            "corrections": self.corrections_made,
            "errors_committed": self.errors_committed,
            "correct_typed": self.correct_characters_typed,
            "total_typed": self.total_characters_typed,
        }

    def analyze_rhythm(self) -> Dict[str, Any]:
        """Timing steadiness from the coefficient of variation of keystroke intervals."""
        if len(self.rhythm_samples) < self.rhythm_min_samples:
            return {
                "consistency": 0,
                "average_interval": 0,
                "variance": 0,
                "standard_deviation": 0,
            }

        intervals = np.asarray(self.rhythm_samples, dtype=float)
        average = float(np.mean(intervals))
        variance = float(np.var(intervals))
        standard_deviation = float(np.sqrt(variance))
        consistency = max(0.0, 100 - (standard_deviation / average * 100))

        return {
            "consistency": round_half_up(consistency),
            "average_interval": round_half_up(average),
            "variance": round_half_up(variance),
            "standard_deviation": round_half_up(standard_deviation),
        }

    def get_problem_characters(self) -> List[Dict[str, Any]]:
        """Characters with the most errors; ties keep first-error order."""
        ranked = sorted(
            self.problem_characters.items(), key=lambda item: item[1], reverse=True
        )
        return [
            {"char": char, "errors": errors}
            for char, errors in ranked[: self.problem_character_limit]
        ]

    def get_character_speeds(self) -> Dict[str, Dict[str, Any]]:
        speeds = {}
        for char, times in self.character_velocities.items():
            if not times:
                continue
            average_time = sum(times) / len(times)
            speed = 60000 / average_time if average_time > 0 else 0
            speeds[char] = {
                "average_time": round_half_up(average_time),
                "speed": round_half_up(speed),
                "samples": len(times),
            }
        return speeds

    def average_pause_duration(self) -> int:
        if not self.pause_events:
            return 0
        total = sum(pause.duration for pause in self.pause_events)
        return round_half_up(total / len(self.pause_events))

    def session_metrics(self) -> SessionMetrics:
        """Snapshot of the aggregates the personality and tip rules work from."""
        return SessionMetrics(
            key_events=len(self.key_events),
            total_backspaces=self.total_backspaces,
            corrections_made=self.corrections_made,
            errors_committed=self.errors_committed,
            total_characters_typed=self.total_characters_typed,
            flow_interruptions=self.flow_interruptions,
            max_consecutive_errors=self.max_consecutive_errors,
            average_pause=self.average_pause_duration(),
            accuracy=self.calculate_true_accuracy(),
            rhythm=self.analyze_rhythm(),
            problem_characters=self.get_problem_characters(),
        )

    def generate_personality_profile(self) -> Dict[str, Any]:
        return build_personality_profile(self.session_metrics())

    def generate_tips(self) -> List[Dict[str, str]]:
        return build_tips(
            self.session_metrics(), min_tips=self.min_tips, max_tips=self.max_tips
        )

    def get_summary(self) -> Dict[str, Any]:
        """Everything the results screen consumes, in one read-only call."""
        logging.debug(f"Building analytics summary for {len(self.key_events)} events")
        metrics = self.session_metrics()
        return {
            "key_events": len(self.key_events),
            "corrections": len(self.corrections),
            "backspaces": self.total_backspaces,
            "pause_events": len(self.pause_events),
            "flow_interruptions": self.flow_interruptions,
            "max_consecutive_errors": self.max_consecutive_errors,
            "accuracy": metrics.accuracy,
            "rhythm": metrics.rhythm,
            "problem_characters": metrics.problem_characters,
            "character_speeds": self.get_character_speeds(),
            "personality": build_personality_profile(metrics),
            "tips": build_tips(metrics, min_tips=self.min_tips, max_tips=self.max_tips),
        }
