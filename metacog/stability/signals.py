from collections import Counter
from typing import Any, Dict, Iterable, List, Optional


class StagnationTracker:
    """
    Counts consecutive cycles the architect judged as stagnant.

    Any positive stagnation level extends the streak; a level of zero
    resets it. Once the streak reaches `chaos_threshold` the next
    architect prompt carries a chaos-intervention directive.
    """

    def __init__(self, chaos_threshold: int = 5) -> None:
        if chaos_threshold < 1:
            raise ValueError("chaos_threshold must be >= 1")
        self.chaos_threshold = chaos_threshold
        self.counter = 0

    def update(self, stagnation_level: int) -> int:
        if stagnation_level > 0:
            self.counter += 1
        else:
            self.counter = 0
        return self.counter

    @property
    def chaos_triggered(self) -> bool:
        return self.counter >= self.chaos_threshold

    def reset(self) -> None:
        self.counter = 0


class FocusBiasDetector:
    """
    Watches the architect's strategic focus labels for tunnel vision.

    The full history is kept (it is persisted with the mission); only
    the last `window` labels are examined, and only once that many
    exist.
    """

    def __init__(self, window: int = 8, threshold: float = 0.6, display: int = 10) -> None:
        self.window = window
        self.threshold = threshold
        self.display = display
        self.history: List[str] = []

    def record(self, label: str) -> None:
        if label:
            self.history.append(label)

    def load(self, history: Iterable[str]) -> None:
        self.history = [h for h in history if h]

    def reset(self) -> None:
        self.history = []

    def recent(self) -> List[str]:
        return self.history[-self.display:]

    def dominant_focus(self) -> Optional[str]:
        """First label (by first appearance) holding at least `threshold` of the window."""
        sample = self.history[-self.window:]
        if len(sample) < self.window:
            return None

        for label, count in Counter(sample).items():
            if count / self.window >= self.threshold:
                return label
        return None

    def bias_warning(self) -> Optional[str]:
        label = self.dominant_focus()
        if label is None:
            return None
        return f"Potential Bias Detected: Strong focus on {label}. Consider diversification."


class StrategicSignals:
    """
    Aggregates the architect's metacognitive state.

    These signals feed the architect prompt and the status surface.
    """

    def __init__(self, stagnation: StagnationTracker, focus: FocusBiasDetector, agents) -> None:
        self._stagnation = stagnation
        self._focus = focus
        self._agents = agents

    def extract(self) -> Dict[str, Any]:
        """
        Produce structured strategic signals.

        Returns
        -------
        Dict[str, Any]
            stagnation counter, chaos flag, recent focus labels, bias
            warning (or None) and agent performance ranking.
        """

        return {
            "stagnation_counter": self._stagnation.counter,
            "chaos_intervention": self._stagnation.chaos_triggered,
            "recent_focus": self._focus.recent(),
            "dominant_focus": self._focus.dominant_focus(),
            "bias_warning": self._focus.bias_warning(),
            "performance": self._agents.ranking(),
        }
