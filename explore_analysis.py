# ABOUTME: Simulated typing tests showing how different typists are profiled
import random

from typing_analytics import TypingSession
from typing_analytics.utils import BACKSPACE

SAMPLE_TEXT = (
    "The quick brown fox jumps over the lazy dog. Pack my box with five dozen "
    "liquor jugs. How vexingly quick daft zebras jump! Sphinx of black quartz, "
    "judge my vow. The five boxing wizards jump quickly at dawn."
)


def explore_different_scenarios(seed: int = 7):
    """Explore how different typing styles affect the analysis."""

    scenarios = {
        "careful_perfectionist": {
            "desc": "Careful typist who fixes every slip",
            "interval_ms": (180, 240),
            "error_rate": 0.04,
            "fix_rate": 1.0,
            "pause_rate": 0.01,
        },
        "speed_demon": {
            "desc": "Fast typist who rarely looks back",
            "interval_ms": (120, 160),
            "error_rate": 0.03,
            "fix_rate": 0.2,
            "pause_rate": 0.0,
        },
        "hunt_and_peck": {
            "desc": "Beginner searching for each key",
            "interval_ms": (250, 900),
            "error_rate": 0.12,
            "fix_rate": 0.6,
            "pause_rate": 0.08,
        },
    }

    print("🎭 TYPING SCENARIO EXPLORER")
    print("=" * 50)

    rng = random.Random(seed)
    for name, scenario in scenarios.items():
        print(f"🎯 Analyzing: {scenario['desc']}")

        session = TypingSession(SAMPLE_TEXT)
        elapsed_ms = simulate_typing(session, scenario, rng)
        results = session.finish(elapsed_ms / 1000)
        analytics = results["analytics"]

        print(f"   ⚡ WPM: {results['wpm']}")
        print(f"   🎯 Accuracy: {results['accuracy']}%")
        print(f"   🥁 Rhythm: {analytics['rhythm']['consistency']}%")
        print(f"   ⏸️  Pauses: {analytics['flow_interruptions']}")
        print(f"   🔄 Corrections: {analytics['corrections']}")
        print(f"   🧬 Profile: {analytics['personality']['type']}")
        print(f"   💡 Top tip: {analytics['tips'][0]['title']}")
        print()


def simulate_typing(session, scenario, rng):
    """Type the whole passage with scenario-specific timing and mistakes."""
    timestamp = 0.0
    while not session.is_complete:
        timestamp += rng.uniform(*scenario["interval_ms"])
        if rng.random() < scenario["pause_rate"]:
            timestamp += rng.uniform(1100, 2500)

        expected = session.target_text[len(session.typed)]
        if rng.random() < scenario["error_rate"]:
            session.handle_key(rng.choice("asdfjkl;"), timestamp)
            if rng.random() < scenario["fix_rate"]:
                timestamp += rng.uniform(150, 300)
                session.handle_key(BACKSPACE, timestamp)
            continue

        session.handle_key(expected, timestamp)
    return timestamp


if __name__ == "__main__":
    explore_different_scenarios()
