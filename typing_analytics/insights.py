# ABOUTME: Rule tables that turn session metrics into a typing personality and improvement tips
"""
Personality and tip synthesis.

Both outputs are driven by ordered rule tables rather than branch chains so
that each rule can be inspected and tested on its own:

* ``PERSONALITY_RULES`` is a list of rule groups. Groups are evaluated
  independently and in order; inside a group the first matching rule wins.
  A rule may set the archetype outright, or only while it is still the
  default.
* ``TIP_RULES`` is a flat list; every matching rule contributes a tip.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .utils import char_label, round_half_up

DEFAULT_ARCHETYPE = "Adaptive Typist"

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}


@dataclass
class SessionMetrics:
    """Aggregate snapshot of an engine, the only input the rules see."""

    key_events: int
    total_backspaces: int
    corrections_made: int
    errors_committed: int
    total_characters_typed: int
    flow_interruptions: int
    max_consecutive_errors: int
    average_pause: int
    accuracy: Dict[str, Any]
    rhythm: Dict[str, Any]
    problem_characters: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def correction_ratio(self) -> float:
        """Backspaces per recorded key event."""
        return self.total_backspaces / max(self.key_events, 1)

    @property
    def correction_percent(self) -> int:
        return round_half_up(self.correction_ratio * 100)

    @property
    def pause_frequency(self) -> float:
        """Flow interruptions per 50 key events."""
        return self.flow_interruptions / max(self.key_events / 50, 1)

    @property
    def average_interval(self) -> int:
        return self.rhythm["average_interval"]

    @property
    def has_rhythm(self) -> bool:
        """False until enough intervals were sampled to measure rhythm."""
        return self.average_interval > 0

    @property
    def avg_speed(self) -> int:
        """Characters per minute implied by the average keystroke interval."""
        if self.average_interval > 0:
            return round_half_up(60000 / self.average_interval)
        return 0


Predicate = Callable[[SessionMetrics], bool]
TextBuilder = Callable[[SessionMetrics], List[str]]


def _no_text(metrics: SessionMetrics) -> List[str]:
    return []


@dataclass(frozen=True)
class PersonalityRule:
    name: str
    predicate: Predicate
    archetype: Optional[str] = None
    only_if_default: bool = False
    traits: TextBuilder = _no_text
    findings: TextBuilder = _no_text


# Speed vs accuracy
PRECISION_PERFECTIONIST = PersonalityRule(
    name="precision_perfectionist",
    predicate=lambda m: m.accuracy["adjusted"] >= 98 and m.correction_ratio > 0.12,
    archetype="Precision Perfectionist",
    traits=lambda m: [
        "Maintains 98%+ accuracy through active correction",
        f"Self-corrects {m.correction_percent}% of keystrokes",
        f"Quality-focused approach with {m.corrections_made} total corrections",
    ],
    findings=lambda m: [
        f"High correction rate ({m.correction_percent}%) indicates strong self-monitoring"
    ],
)

VELOCITY_TYPIST = PersonalityRule(
    name="velocity_typist",
    # 300 CPM is roughly 60 WPM
    predicate=lambda m: m.avg_speed > 300 and m.accuracy["adjusted"] >= 92,
    archetype="Velocity Typist",
    traits=lambda m: [
        f"Achieves {m.avg_speed} characters per minute",
        f"Maintains {m.accuracy['adjusted']}% accuracy at high speed",
        f"Low correction rate ({m.correction_percent}%) shows confidence",
    ],
    findings=lambda m: ["Speed-accuracy balance favors velocity over perfection"],
)

# Consistency
RHYTHMIC_TYPIST = PersonalityRule(
    name="rhythmic_typist",
    predicate=lambda m: m.has_rhythm and m.rhythm["consistency"] >= 85,
    archetype="Rhythmic Typist",
    only_if_default=True,
    traits=lambda m: [
        f"Exceptional timing consistency ({m.rhythm['consistency']}%)",
        f"Standard deviation of {m.rhythm['standard_deviation']}ms between keystrokes",
        f"Reliable {m.average_interval}ms average keystroke interval",
    ],
    findings=lambda m: ["High rhythm consistency suggests developed muscle memory"],
)

VARIABLE_PACE_TYPIST = PersonalityRule(
    name="variable_pace_typist",
    predicate=lambda m: m.has_rhythm and m.rhythm["consistency"] < 50,
    archetype="Variable Pace Typist",
    only_if_default=True,
    traits=lambda m: [
        f"Highly variable timing ({m.rhythm['consistency']}% consistency)",
        "Adapts speed based on text complexity",
        f"Wide keystroke interval range (σ={m.rhythm['standard_deviation']}ms)",
    ],
    findings=lambda m: ["Variable pace may indicate strategic speed adjustment"],
)

# Flow
CONTEMPLATIVE_PAUSING = PersonalityRule(
    name="contemplative_pausing",
    predicate=lambda m: m.pause_frequency > 8,
    traits=lambda m: [
        f"Contemplative approach with {m.flow_interruptions} strategic pauses",
        f"Average pause duration: {m.average_pause}ms",
    ],
    findings=lambda m: ["Frequent pauses suggest text preview or planning behavior"],
)

SUSTAINED_FLOW = PersonalityRule(
    name="sustained_flow",
    predicate=lambda m: m.pause_frequency < 2,
    traits=lambda m: [
        "Sustained flow state with minimal interruptions",
        f"Only {m.flow_interruptions} pauses >1 second in entire session",
    ],
    findings=lambda m: ["Low pause frequency indicates strong sight-reading ability"],
)

# Error patterns
FOCUS_LAPSES = PersonalityRule(
    name="focus_lapses",
    predicate=lambda m: m.max_consecutive_errors > 5,
    findings=lambda m: [
        f"Max consecutive errors ({m.max_consecutive_errors}) suggests occasional focus lapses"
    ],
)

EXCELLENT_RECOVERY = PersonalityRule(
    name="excellent_recovery",
    predicate=lambda m: m.max_consecutive_errors <= 1,
    findings=lambda m: [
        f"Excellent error recovery - max {m.max_consecutive_errors} consecutive mistakes"
    ],
)

PRIMARY_CHALLENGE = PersonalityRule(
    name="primary_challenge",
    predicate=lambda m: len(m.problem_characters) > 0,
    findings=lambda m: [
        f"Primary challenge: '{char_label(m.problem_characters[0]['char'])}' "
        f"character ({m.problem_characters[0]['errors']} errors)"
    ],
)

PERSONALITY_RULES: List[List[PersonalityRule]] = [
    [PRECISION_PERFECTIONIST, VELOCITY_TYPIST],
    [RHYTHMIC_TYPIST, VARIABLE_PACE_TYPIST],
    [CONTEMPLATIVE_PAUSING, SUSTAINED_FLOW],
    [FOCUS_LAPSES, EXCELLENT_RECOVERY],
    [PRIMARY_CHALLENGE],
]

MAX_TRAITS = 4
MAX_FINDINGS = 3


def matching_personality_rules(
    metrics: SessionMetrics,
    rule_groups: Optional[List[List[PersonalityRule]]] = None,
) -> List[PersonalityRule]:
    """First matching rule of each group, in group order."""
    matched = []
    for group in rule_groups or PERSONALITY_RULES:
        for rule in group:
            if rule.predicate(metrics):
                matched.append(rule)
                break
    return matched


def build_personality_profile(metrics: SessionMetrics) -> Dict[str, Any]:
    """Classify a session into an archetype with supporting traits and findings."""
    archetype = DEFAULT_ARCHETYPE
    traits: List[str] = []
    findings: List[str] = []

    for rule in matching_personality_rules(metrics):
        if rule.archetype and (
            not rule.only_if_default or archetype == DEFAULT_ARCHETYPE
        ):
            archetype = rule.archetype
        traits.extend(rule.traits(metrics))
        findings.extend(rule.findings(metrics))

    logging.debug(f"Personality archetype resolved to {archetype}")

    return {
        "type": archetype,
        "traits": traits[:MAX_TRAITS],
        "key_findings": findings[:MAX_FINDINGS],
        "metrics": {
            "correction_rate": metrics.correction_percent,
            "rhythm_consistency": metrics.rhythm["consistency"],
            "pause_frequency": round_half_up(metrics.pause_frequency, 1),
            "max_consecutive_errors": metrics.max_consecutive_errors,
            "avg_speed": metrics.avg_speed,
            "accuracy": metrics.accuracy["adjusted"],
        },
    }


@dataclass(frozen=True)
class TipRule:
    name: str
    predicate: Predicate
    build: Callable[[SessionMetrics], Dict[str, str]]


def _top_problems(metrics: SessionMetrics) -> List[Dict[str, Any]]:
    return metrics.problem_characters[:3]


TIP_RULES: List[TipRule] = [
    TipRule(
        name="increase_velocity",
        predicate=lambda m: m.average_interval > 250,
        build=lambda m: {
            "category": "SPEED",
            "title": "Increase keystroke velocity",
            "description": (
                f"Your average keystroke interval is {m.average_interval}ms. "
                "Practice 30-second speed bursts to reduce this to under 200ms."
            ),
            "priority": "high",
            "metric": "WPM",
            "evidence": f"Current interval: {m.average_interval}ms, Target: <200ms",
        },
    ),
    TipRule(
        name="steady_rhythm",
        predicate=lambda m: m.rhythm["consistency"] < 70,
        build=lambda m: {
            "category": "SPEED",
            "title": "Develop consistent rhythm",
            "description": (
                f"Your rhythm consistency is {m.rhythm['consistency']}%. "
                "Use a metronome at 120 BPM to build steady timing patterns."
            ),
            "priority": "medium",
            "metric": "WPM",
            "evidence": f"Consistency: {m.rhythm['consistency']}%, Target: >80%",
        },
    ),
    TipRule(
        name="deliberate_accuracy",
        predicate=lambda m: m.accuracy["adjusted"] < 95,
        build=lambda m: {
            "category": "ACCURACY",
            "title": "Reduce error rate through deliberate practice",
            "description": (
                f"Your accuracy is {m.accuracy['adjusted']}%. Slow down 15-20% and "
                "focus on correct finger placement to reach 98%+."
            ),
            "priority": "high",
            "metric": "Accuracy",
            "evidence": (
                f"Current: {m.accuracy['adjusted']}%, "
                f"Errors: {m.errors_committed}/{m.total_characters_typed}"
            ),
        },
    ),
    TipRule(
        name="problem_characters",
        predicate=lambda m: len(m.problem_characters) > 0,
        build=lambda m: {
            "category": "ACCURACY",
            "title": "Target problem characters: "
            + ", ".join(char_label(p["char"]) for p in _top_problems(m)),
            "description": (
                f"These characters caused {sum(p['errors'] for p in _top_problems(m))} "
                "total errors. Practice them in isolation with custom drills."
            ),
            "priority": "high",
            "metric": "Accuracy",
            "evidence": "Error distribution: "
            + ", ".join(f"{p['char']}:{p['errors']}" for p in _top_problems(m)),
        },
    ),
    TipRule(
        name="correction_overhead",
        predicate=lambda m: m.correction_ratio > 0.15,
        build=lambda m: {
            "category": "EFFICIENCY",
            "title": "Minimize correction overhead",
            "description": (
                f"You made {m.corrections_made} corrections ({m.correction_percent}% "
                "correction rate). Preview upcoming text to reduce backspacing."
            ),
            "priority": "medium",
            "metric": "Keystrokes",
            "evidence": (
                f"Corrections: {m.corrections_made}, Backspaces: {m.total_backspaces}"
            ),
        },
    ),
    TipRule(
        name="error_cascades",
        predicate=lambda m: m.max_consecutive_errors > 3,
        build=lambda m: {
            "category": "EFFICIENCY",
            "title": "Break error cascades",
            "description": (
                f"Your max consecutive errors was {m.max_consecutive_errors}. "
                "When you make 2+ errors, pause briefly to reset focus."
            ),
            "priority": "medium",
            "metric": "Keystrokes",
            "evidence": f"Max consecutive errors: {m.max_consecutive_errors}",
        },
    ),
    TipRule(
        name="typing_interruptions",
        predicate=lambda m: m.flow_interruptions > 4,
        build=lambda m: {
            "category": "FLOW",
            "title": "Reduce typing interruptions",
            "description": (
                f"You paused {m.flow_interruptions} times for >1 second. Practice "
                "reading 2-3 words ahead to maintain continuous flow."
            ),
            "priority": "low",
            "metric": "Flow",
            "evidence": (
                f"Interruptions: {m.flow_interruptions}, Avg pause: {m.average_pause}ms"
            ),
        },
    ),
    TipRule(
        name="text_preview",
        # an empty session has no interval to speak of
        predicate=lambda m: 0 < m.average_interval < 200 and m.accuracy["adjusted"] > 95,
        build=lambda m: {
            "category": "ADVANCED",
            "title": "Focus on text preview skills",
            "description": (
                "You have solid fundamentals. Practice reading 4-5 words ahead "
                f"while maintaining your {m.avg_speed} CPM speed."
            ),
            "priority": "low",
            "metric": "Overall",
            "evidence": f"Speed: {m.avg_speed} CPM, Accuracy: {m.accuracy['adjusted']}%",
        },
    ),
    TipRule(
        name="complex_material",
        predicate=lambda m: m.rhythm["consistency"] > 85 and m.correction_ratio < 0.08,
        build=lambda m: {
            "category": "ADVANCED",
            "title": "Work on complex text patterns",
            "description": (
                f"Your consistency ({m.rhythm['consistency']}%) and low correction "
                f"rate ({m.correction_percent}%) suggest readiness for "
                "programming/technical content."
            ),
            "priority": "low",
            "metric": "Overall",
            "evidence": (
                f"Consistency: {m.rhythm['consistency']}%, "
                f"Correction rate: {m.correction_percent}%"
            ),
        },
    ),
    TipRule(
        name="posture",
        predicate=lambda m: m.key_events > 500,
        build=lambda m: {
            "category": "ERGONOMICS",
            "title": "Maintain proper posture during long sessions",
            "description": (
                f"You typed {m.key_events} keystrokes. Take breaks every "
                "500-1000 keystrokes to prevent RSI."
            ),
            "priority": "low",
            "metric": "Health",
            "evidence": f"Session keystrokes: {m.key_events}",
        },
    ),
]

# Filler tips used to top a sparse list up to the minimum; the first one
# takes its priority from how sparse the list was.
GENERAL_TIPS: List[Dict[str, str]] = [
    {
        "category": "GENERAL",
        "title": "Establish a structured daily drill block",
        "description": (
            "Do one 5-minute precision warmup, three focused speed bursts, and a "
            "cooldown passage to consolidate improvements."
        ),
        "metric": "Overall",
        "evidence": "Balanced regimen",
    },
    {
        "category": "GENERAL",
        "title": "Warm up with accuracy-first passages",
        "description": (
            "Start each session with a short passage typed at a deliberately "
            "relaxed pace before pushing for speed."
        ),
        "priority": "medium",
        "metric": "Accuracy",
        "evidence": "Warmup routine",
    },
    {
        "category": "GENERAL",
        "title": "Track results across sessions",
        "description": (
            "Compare accuracy and rhythm between attempts rather than chasing a "
            "single best run."
        ),
        "priority": "low",
        "metric": "Overall",
        "evidence": "Progress tracking",
    },
    {
        "category": "GENERAL",
        "title": "Vary your practice material",
        "description": (
            "Alternate prose, punctuation-heavy text and numbers so no character "
            "class falls behind."
        ),
        "priority": "low",
        "metric": "Overall",
        "evidence": "Material variety",
    },
]


def build_tips(
    metrics: SessionMetrics, min_tips: int = 4, max_tips: int = 6
) -> List[Dict[str, str]]:
    """Ranked improvement tips, highest priority first."""
    tips = [rule.build(metrics) for rule in TIP_RULES if rule.predicate(metrics)]
    fired = len(tips)

    for index, filler in enumerate(GENERAL_TIPS[: max(min_tips - fired, 0)]):
        tip = dict(filler)
        if index == 0:
            tip["priority"] = "high" if fired <= 2 else "medium"
        tips.append(tip)

    # sorted() is stable, so equal priorities keep rule order
    ranked = sorted(tips, key=lambda t: PRIORITY_ORDER[t["priority"]], reverse=True)
    logging.debug(f"Generated {fired} rule tips, returning {min(len(ranked), max_tips)}")
    return ranked[:max_tips]
