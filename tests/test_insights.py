# ABOUTME: Rule-by-rule tests for personality classification and tip generation
import pytest

from typing_analytics.insights import (
    CONTEMPLATIVE_PAUSING,
    DEFAULT_ARCHETYPE,
    PRECISION_PERFECTIONIST,
    PRIORITY_ORDER,
    RHYTHMIC_TYPIST,
    SUSTAINED_FLOW,
    TIP_RULES,
    VARIABLE_PACE_TYPIST,
    VELOCITY_TYPIST,
    SessionMetrics,
    build_personality_profile,
    build_tips,
    matching_personality_rules,
)


def make_metrics(**overrides):
    """Metrics for an unremarkable mid-length session; no rule group is forced."""
    values = dict(
        key_events=100,
        total_backspaces=5,
        corrections_made=5,
        errors_committed=5,
        total_characters_typed=95,
        flow_interruptions=4,
        max_consecutive_errors=2,
        average_pause=1200,
        accuracy={"raw": 95, "adjusted": 96, "correction_bonus": 5},
        rhythm={
            "consistency": 70,
            "average_interval": 220,
            "variance": 4356,
            "standard_deviation": 66,
        },
        problem_characters=[],
    )
    values.update(overrides)
    return SessionMetrics(**values)


def rule_names(metrics):
    return [rule.name for rule in matching_personality_rules(metrics)]


class TestSessionMetrics:
    """Test derived ratios."""

    def test_ratios(self):
        metrics = make_metrics(key_events=200, total_backspaces=30, flow_interruptions=6)

        assert metrics.correction_ratio == pytest.approx(0.15)
        assert metrics.correction_percent == 15
        assert metrics.pause_frequency == pytest.approx(1.5)
        assert metrics.avg_speed == 273

    def test_empty_session_ratios(self):
        metrics = make_metrics(
            key_events=0,
            total_backspaces=0,
            flow_interruptions=0,
            rhythm={"consistency": 0, "average_interval": 0, "variance": 0,
                    "standard_deviation": 0},
        )

        assert metrics.correction_ratio == 0
        assert metrics.pause_frequency == 0
        assert metrics.avg_speed == 0
        assert not metrics.has_rhythm


class TestPersonalityRules:
    """Test each personality rule and the archetype precedence."""

    def test_baseline_is_adaptive(self):
        profile = build_personality_profile(make_metrics())

        assert profile["type"] == DEFAULT_ARCHETYPE
        assert rule_names(make_metrics()) == []

    def test_precision_perfectionist_rule(self):
        metrics = make_metrics(
            total_backspaces=13, accuracy={"raw": 96, "adjusted": 98}
        )

        assert PRECISION_PERFECTIONIST.predicate(metrics)
        profile = build_personality_profile(metrics)
        assert profile["type"] == "Precision Perfectionist"
        assert "Self-corrects 13% of keystrokes" in profile["traits"]
        assert profile["key_findings"][0] == (
            "High correction rate (13%) indicates strong self-monitoring"
        )

    def test_perfectionist_takes_precedence_over_velocity(self):
        metrics = make_metrics(
            total_backspaces=20,
            accuracy={"raw": 95, "adjusted": 100},
            rhythm={"consistency": 70, "average_interval": 150, "variance": 0,
                    "standard_deviation": 0},
        )

        assert VELOCITY_TYPIST.predicate(metrics)
        assert "precision_perfectionist" in rule_names(metrics)
        assert "velocity_typist" not in rule_names(metrics)

    def test_velocity_typist_rule(self):
        metrics = make_metrics(
            rhythm={"consistency": 70, "average_interval": 180, "variance": 0,
                    "standard_deviation": 40},
        )

        profile = build_personality_profile(metrics)

        assert profile["type"] == "Velocity Typist"
        assert profile["traits"][0] == "Achieves 333 characters per minute"

    def test_velocity_needs_accuracy(self):
        metrics = make_metrics(
            accuracy={"raw": 85, "adjusted": 90},
            rhythm={"consistency": 70, "average_interval": 180, "variance": 0,
                    "standard_deviation": 40},
        )

        assert not VELOCITY_TYPIST.predicate(metrics)

    def test_rhythmic_typist_only_when_default(self):
        rhythmic = make_metrics(
            rhythm={"consistency": 90, "average_interval": 220, "variance": 0,
                    "standard_deviation": 22},
        )
        profile = build_personality_profile(rhythmic)
        assert profile["type"] == "Rhythmic Typist"
        assert profile["traits"][0] == "Exceptional timing consistency (90%)"

        both = make_metrics(
            total_backspaces=15,
            accuracy={"raw": 99, "adjusted": 100},
            rhythm={"consistency": 90, "average_interval": 220, "variance": 0,
                    "standard_deviation": 22},
        )
        profile = build_personality_profile(both)
        # archetype stays with the speed/accuracy rule, traits still accumulate
        assert profile["type"] == "Precision Perfectionist"
        assert "Exceptional timing consistency (90%)" in profile["traits"]
        assert (
            "High rhythm consistency suggests developed muscle memory"
            in profile["key_findings"]
        )

    def test_variable_pace_typist(self):
        metrics = make_metrics(
            rhythm={"consistency": 35, "average_interval": 260, "variance": 0,
                    "standard_deviation": 169},
        )

        assert VARIABLE_PACE_TYPIST.predicate(metrics)
        profile = build_personality_profile(metrics)
        assert profile["type"] == "Variable Pace Typist"
        assert "Wide keystroke interval range (σ=169ms)" in profile["traits"]

    def test_no_rhythm_data_is_not_variable_pace(self):
        metrics = make_metrics(
            rhythm={"consistency": 0, "average_interval": 0, "variance": 0,
                    "standard_deviation": 0},
        )

        assert not VARIABLE_PACE_TYPIST.predicate(metrics)
        assert not RHYTHMIC_TYPIST.predicate(metrics)

    def test_pause_rules(self):
        contemplative = make_metrics(key_events=50, flow_interruptions=10, average_pause=1800)
        assert CONTEMPLATIVE_PAUSING.predicate(contemplative)
        profile = build_personality_profile(contemplative)
        assert "Average pause duration: 1800ms" in profile["traits"]

        flowing = make_metrics(key_events=200, flow_interruptions=1)
        assert SUSTAINED_FLOW.predicate(flowing)
        profile = build_personality_profile(flowing)
        assert "Only 1 pauses >1 second in entire session" in profile["traits"]

    def test_error_pattern_findings(self):
        lapses = build_personality_profile(make_metrics(max_consecutive_errors=7))
        assert (
            "Max consecutive errors (7) suggests occasional focus lapses"
            in lapses["key_findings"]
        )

        recovery = build_personality_profile(make_metrics(max_consecutive_errors=1))
        assert (
            "Excellent error recovery - max 1 consecutive mistakes"
            in recovery["key_findings"]
        )

    def test_primary_challenge_labels_space(self):
        metrics = make_metrics(problem_characters=[{"char": " ", "errors": 4}])

        profile = build_personality_profile(metrics)

        assert profile["key_findings"] == ["Primary challenge: 'SPACE' character (4 errors)"]

    def test_traits_and_findings_are_truncated(self):
        metrics = make_metrics(
            key_events=500,
            total_backspaces=80,
            flow_interruptions=0,
            max_consecutive_errors=0,
            accuracy={"raw": 97, "adjusted": 99},
            rhythm={"consistency": 92, "average_interval": 180, "variance": 0,
                    "standard_deviation": 14},
            problem_characters=[{"char": "q", "errors": 2}],
        )

        profile = build_personality_profile(metrics)

        assert len(profile["traits"]) == 4
        assert len(profile["key_findings"]) == 3
        assert profile["key_findings"][0].startswith("High correction rate")

    def test_metrics_block(self):
        metrics = make_metrics(key_events=120, flow_interruptions=5)

        block = build_personality_profile(metrics)["metrics"]

        assert block == {
            "correction_rate": 4,
            "rhythm_consistency": 70,
            "pause_frequency": 2.1,
            "max_consecutive_errors": 2,
            "avg_speed": 273,
            "accuracy": 96,
        }


def tip_titles(tips):
    return [tip["title"] for tip in tips]


class TestTipRules:
    """Test tip generation, ranking and padding."""

    def test_every_rule_has_a_unique_name(self):
        names = [rule.name for rule in TIP_RULES]
        assert len(names) == len(set(names))

    def test_struggling_session(self):
        metrics = make_metrics(
            key_events=600,
            total_backspaces=120,
            corrections_made=120,
            errors_committed=60,
            total_characters_typed=480,
            flow_interruptions=10,
            max_consecutive_errors=6,
            average_pause=1500,
            accuracy={"raw": 88, "adjusted": 88},
            rhythm={"consistency": 40, "average_interval": 300, "variance": 0,
                    "standard_deviation": 180},
            problem_characters=[
                {"char": "e", "errors": 10},
                {"char": " ", "errors": 6},
                {"char": "t", "errors": 3},
                {"char": "a", "errors": 1},
            ],
        )

        tips = build_tips(metrics)

        assert len(tips) == 6
        assert tip_titles(tips) == [
            "Increase keystroke velocity",
            "Reduce error rate through deliberate practice",
            "Target problem characters: e, SPACE, t",
            "Develop consistent rhythm",
            "Minimize correction overhead",
            "Break error cascades",
        ]
        assert "19 total errors" in tips[2]["description"]
        assert tips[2]["evidence"] == "Error distribution: e:10,  :6, t:3"
        assert tips[1]["evidence"] == "Current: 88%, Errors: 60/480"

    def test_flow_tip_cites_pause_duration(self):
        metrics = make_metrics(flow_interruptions=7, average_pause=1432)

        tips = build_tips(metrics)
        flow = [tip for tip in tips if tip["category"] == "FLOW"]

        assert len(flow) == 1
        assert flow[0]["priority"] == "low"
        assert flow[0]["evidence"] == "Interruptions: 7, Avg pause: 1432ms"

    def test_advanced_tips(self):
        metrics = make_metrics(
            total_backspaces=2,
            flow_interruptions=0,
            accuracy={"raw": 98, "adjusted": 100},
            rhythm={"consistency": 88, "average_interval": 150, "variance": 0,
                    "standard_deviation": 18},
        )

        tips = build_tips(metrics)
        advanced = [tip["title"] for tip in tips if tip["category"] == "ADVANCED"]

        assert advanced == [
            "Focus on text preview skills",
            "Work on complex text patterns",
        ]
        assert any("400 CPM" in tip["description"] for tip in tips)

    def test_empty_session_text_preview_not_offered(self):
        metrics = make_metrics(
            key_events=0,
            total_backspaces=0,
            flow_interruptions=0,
            accuracy={"raw": 100, "adjusted": 100},
            rhythm={"consistency": 0, "average_interval": 0, "variance": 0,
                    "standard_deviation": 0},
        )

        tips = build_tips(metrics)

        assert "Focus on text preview skills" not in tip_titles(tips)
        assert len(tips) == 4

    def test_single_filler_priority_depends_on_sparseness(self):
        three = make_metrics(
            key_events=600,
            total_backspaces=0,
            flow_interruptions=0,
            accuracy={"raw": 100, "adjusted": 100},
            rhythm={"consistency": 100, "average_interval": 150, "variance": 0,
                    "standard_deviation": 0},
        )

        tips = build_tips(three)

        general = [tip for tip in tips if tip["category"] == "GENERAL"]
        assert len(general) == 1
        assert general[0]["priority"] == "medium"
        assert tips[0]["category"] == "GENERAL"

    def test_sparse_list_gets_high_priority_filler(self):
        tips = build_tips(make_metrics())

        assert len(tips) == 4
        assert tips[0]["title"] == "Establish a structured daily drill block"
        assert tips[0]["priority"] == "high"

    @pytest.mark.parametrize(
        "overrides",
        [
            {},
            {"key_events": 0, "total_backspaces": 0, "flow_interruptions": 0},
            {"max_consecutive_errors": 9, "flow_interruptions": 20},
            {"accuracy": {"raw": 70, "adjusted": 75}, "key_events": 900,
             "problem_characters": [{"char": "z", "errors": 30}]},
            {"rhythm": {"consistency": 10, "average_interval": 700, "variance": 0,
                        "standard_deviation": 630}, "total_backspaces": 40},
        ],
    )
    def test_tip_count_and_ordering(self, overrides):
        tips = build_tips(make_metrics(**overrides))

        assert 4 <= len(tips) <= 6
        ranks = [PRIORITY_ORDER[tip["priority"]] for tip in tips]
        assert ranks == sorted(ranks, reverse=True)
        for tip in tips:
            assert set(tip) == {
                "category", "title", "description", "priority", "metric", "evidence"
            }


if __name__ == "__main__":
    pytest.main([__file__])
