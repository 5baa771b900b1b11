# ABOUTME: Headless typing-test harness, keystroke log replay and report output for the analytics engine
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from .analyzer import TypingAnalytics
from .utils import (
    BACKSPACE,
    NAMED_KEYS,
    Clock,
    ConfigManager,
    KeystrokeEvent,
    build_char_stats,
    char_label,
    compute_wpm,
    format_time,
    setup_logging,
)


class TypingSession:
    """Drives a TypingAnalytics engine the way the typing-test screen does.

    Tracks the typed text against a target passage, works out the expected
    character, correctness and stream position for each keystroke, and hands
    them to the engine. ``finish`` merges the engine summary with the
    screen-owned numbers (WPM, character-class stats) into a results payload.
    """

    def __init__(
        self,
        target_text: str,
        analytics: Optional[TypingAnalytics] = None,
        clock: Optional[Clock] = None,
    ):
        self.target_text = target_text
        self.analytics = analytics or TypingAnalytics(clock=clock)
        self.typed = ""
        self.keystrokes = 0

    @property
    def is_complete(self) -> bool:
        return len(self.typed) >= len(self.target_text)

    def handle_key(
        self, key: str, timestamp: Optional[float] = None
    ) -> Optional[KeystrokeEvent]:
        """Route a raw key to the matching action; unknown keys are ignored."""
        if key == BACKSPACE:
            return self.backspace(timestamp)
        if len(key) == 1:
            return self.type_char(key, timestamp)
        if key in NAMED_KEYS:
            return self.press(key, timestamp)
        logging.debug(f"Ignoring unsupported key {key!r}")
        return None

    def type_char(
        self, char: str, timestamp: Optional[float] = None
    ) -> Optional[KeystrokeEvent]:
        if self.is_complete:
            return None
        target_char = self.target_text[len(self.typed)]
        self.typed += char
        self.keystrokes += 1
        return self.analytics.record_keystroke(
            char, target_char, char == target_char, timestamp, len(self.typed)
        )

    def backspace(self, timestamp: Optional[float] = None) -> Optional[KeystrokeEvent]:
        # Nothing to delete means the input did not change.
        if not self.typed:
            return None
        self.typed = self.typed[:-1]
        self.keystrokes += 1
        return self.analytics.record_keystroke(
            BACKSPACE, None, True, timestamp, len(self.typed)
        )

    def press(self, key: str, timestamp: Optional[float] = None) -> KeystrokeEvent:
        """Log a named key such as Enter or Shift."""
        return self.analytics.record_keystroke(
            key, None, True, timestamp, len(self.typed)
        )

    def restart(self) -> None:
        self.typed = ""
        self.keystrokes = 0
        self.analytics.reset()

    def finish(self, elapsed_seconds: float) -> Dict[str, Any]:
        """Results payload for the results screen."""
        analytics = self.analytics.get_summary()
        enhanced_accuracy = analytics["accuracy"]
        logging.info(
            f"Session finished after {format_time(elapsed_seconds)} "
            f"with {analytics['key_events']} key events"
        )
        return {
            "wpm": compute_wpm(self.typed, elapsed_seconds),
            "accuracy": enhanced_accuracy["adjusted"],
            "enhanced_accuracy": enhanced_accuracy,
            "errors": enhanced_accuracy["errors_committed"],
            "keystrokes": self.keystrokes,
            "elapsed": format_time(elapsed_seconds),
            "char_stats": build_char_stats(self.typed, self.target_text),
            "analytics": analytics,
            "date": datetime.now().isoformat(),
        }


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _optional_number(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if pd.isna(value):
        return None
    return float(value)


def replay_events(
    records: Iterable[Dict[str, Any]], analytics: Optional[TypingAnalytics] = None
) -> TypingAnalytics:
    """Feed recorded keystroke dicts into an engine, in order."""
    analytics = analytics or TypingAnalytics()
    for record in records:
        analytics.record_keystroke(
            str(record["key"]),
            record.get("target") or None,
            _as_bool(record.get("is_correct", False)),
            _optional_number(record.get("timestamp")),
            int(_optional_number(record.get("position")) or 0),
        )
    return analytics


def load_keystroke_log(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Load a keystroke log from a JSON list or a CSV file."""
    path = Path(path)
    try:
        if path.suffix.lower() == ".csv":
            frame = pd.read_csv(
                path, dtype={"key": str, "target": str}, keep_default_na=False
            )
            records = frame.to_dict(orient="records")
        else:
            with open(path, "r") as f:
                records = json.load(f)
    except (OSError, json.JSONDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logging.error(f"Error loading {path}: {e}")
        return []

    if not isinstance(records, list):
        logging.error(f"Error loading {path}: expected a list of keystrokes")
        return []

    valid = [r for r in records if isinstance(r, dict) and r.get("key") not in (None, "")]
    if len(valid) != len(records):
        logging.warning(f"Skipped {len(records) - len(valid)} malformed keystrokes in {path}")
    logging.info(f"Loaded {len(valid)} keystrokes from {path}")
    return valid


def write_report(payload: Dict[str, Any], reports_dir: Union[str, Path]) -> Path:
    """Write a timestamped JSON report and return its path."""
    reports_dir = Path(reports_dir)
    reports_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = reports_dir / f"typing_analytics_{timestamp}.json"
    with open(filename, "w") as f:
        json.dump(payload, f, indent=2, default=str)

    logging.info(f"Generated report: {filename}")
    return filename


def print_summary(summary: Dict[str, Any]) -> None:
    accuracy = summary["accuracy"]
    rhythm = summary["rhythm"]
    personality = summary["personality"]

    print("\n=== Typing Analytics Summary ===")
    print(f"Key Events: {summary['key_events']:,}")
    print(
        f"Accuracy: {accuracy['adjusted']}% "
        f"(raw {accuracy['raw']}%, correction bonus +{accuracy['correction_bonus']})"
    )
    print(
        f"Rhythm: {rhythm['consistency']}% consistency, "
        f"{rhythm['average_interval']}ms average interval"
    )
    print(f"Flow Interruptions: {summary['flow_interruptions']}")
    print(f"Max Consecutive Errors: {summary['max_consecutive_errors']}")

    if summary["problem_characters"]:
        problems = ", ".join(
            f"'{char_label(p['char'])}' ({p['errors']})"
            for p in summary["problem_characters"]
        )
        print(f"Problem Characters: {problems}")

    print(f"\n=== {personality['type']} ===")
    for trait in personality["traits"]:
        print(f"  - {trait}")
    for finding in personality["key_findings"]:
        print(f"  * {finding}")

    print("\n=== Tips ===")
    for i, tip in enumerate(summary["tips"], 1):
        print(f"  {i}. [{tip['priority'].upper()}] {tip['category']}: {tip['title']}")
        print(f"     {tip['description']}")


def main(argv: Optional[List[str]] = None) -> int:
    """Replay a recorded keystroke log and report its analytics."""
    import argparse

    parser = argparse.ArgumentParser(description="Typing analytics replay")
    parser.add_argument("log", help="Keystroke log (.json or .csv)")
    parser.add_argument(
        "--config", default="config.yaml", help="Configuration file path"
    )
    parser.add_argument("--output", help="Output directory for the JSON report")
    parser.add_argument(
        "--no-report", action="store_true", help="Only print the summary"
    )
    args = parser.parse_args(argv)

    config = ConfigManager(args.config)
    setup_logging(config.get("output.log_level", "INFO"))

    records = load_keystroke_log(args.log)
    if not records:
        print("No keystrokes found in the log.")
        return 1

    analytics = replay_events(records, TypingAnalytics(config=config))
    summary = analytics.get_summary()
    print_summary(summary)

    if not args.no_report:
        reports_dir = args.output or config.get(
            "output.reports_directory", "./reports"
        )
        print(f"\nReport: {write_report(summary, reports_dir)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
