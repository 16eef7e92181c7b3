import pytest

from metacog.agents.registry import AgentRegistry
from metacog.stability.signals import FocusBiasDetector, StagnationTracker, StrategicSignals


class TestStagnation:

    def test_positive_extends_zero_resets(self):
        tracker = StagnationTracker()

        assert [tracker.update(level) for level in (2, 0, 1)] == [1, 0, 1]

    def test_chaos_at_threshold(self):
        tracker = StagnationTracker(chaos_threshold=3)
        for _ in range(2):
            tracker.update(1)
        assert not tracker.chaos_triggered

        tracker.update(4)
        assert tracker.chaos_triggered

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            StagnationTracker(chaos_threshold=0)


class TestFocusBias:

    def _detector(self, labels):
        detector = FocusBiasDetector(window=8, threshold=0.6)
        for label in labels:
            detector.record(label)
        return detector

    def test_dominant_label_over_full_window(self):
        detector = self._detector(["ALGEBRA"] * 5 + ["LOGIC", "GEOMETRY", "LOGIC"])

        assert detector.dominant_focus() == "ALGEBRA"
        assert "ALGEBRA" in detector.bias_warning()

    def test_no_warning_below_window(self):
        detector = self._detector(["ALGEBRA"] * 5 + ["LOGIC", "GEOMETRY"])

        assert detector.bias_warning() is None

    def test_balanced_history(self):
        detector = self._detector(["ALGEBRA", "LOGIC"] * 4)

        assert detector.dominant_focus() is None

    def test_only_last_window_counts(self):
        detector = self._detector(["ALGEBRA"] * 8 + ["LOGIC"] * 4 + ["GEOMETRY"] * 4)

        assert detector.dominant_focus() is None
        assert len(detector.history) == 16

    def test_recent_is_limited_to_display(self):
        detector = FocusBiasDetector(display=3)
        for label in "ABCDE":
            detector.record(label)

        assert detector.recent() == ["C", "D", "E"]


class TestStrategicSignals:

    def test_extract(self):
        agents = AgentRegistry()
        agents.deploy("a", "p")
        agents.record_contribution("a", 0.5)
        stagnation = StagnationTracker(chaos_threshold=1)
        stagnation.update(1)

        signals = StrategicSignals(stagnation, FocusBiasDetector(), agents).extract()

        assert signals["stagnation_counter"] == 1
        assert signals["chaos_intervention"] is True
        assert signals["bias_warning"] is None
        assert signals["performance"] == [{"id": "a", "avg_promise": 0.5}]
