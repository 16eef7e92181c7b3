import os


class MissionConfig:
    """
    Central configuration object for a research mission.
    Controls oracle backends, cycle cadence and strategic thresholds.
    """

    def __init__(
        self,
        goal: str = "the P vs NP problem",
        llm_backend: str = "openai",        # "openai" or "ollama"
        model: str = None,
        embedding_backend: str = "openai",  # "openai" or "ollama"
        embedding_model: str = None,
        storage_path: str = "mission_state.json",
        cycle_interval_seconds: float = 20.0,
        chaos_threshold: int = 5,
        bias_window: int = 8,
        bias_threshold: float = 0.6,
        focus_display: int = 10,
        max_tool_rounds: int = 10,
        max_specialist_workers: int = 8,
        completion_marker: str = "PROOF COMPLETE:",
    ):
        self.goal = goal
        self.llm_backend = llm_backend
        self.model = model
        self.embedding_backend = embedding_backend
        self.embedding_model = embedding_model
        self.storage_path = storage_path
        self.cycle_interval_seconds = cycle_interval_seconds
        self.chaos_threshold = chaos_threshold
        self.bias_window = bias_window
        self.bias_threshold = bias_threshold
        self.focus_display = focus_display
        self.max_tool_rounds = max_tool_rounds
        self.max_specialist_workers = max_specialist_workers
        self.completion_marker = completion_marker

        self._validate()

    @classmethod
    def from_env(cls, **overrides) -> "MissionConfig":
        """Build a config from METACOG_* environment variables."""

        env = {
            "goal": os.getenv("METACOG_GOAL"),
            "llm_backend": os.getenv("METACOG_LLM_BACKEND"),
            "model": os.getenv("METACOG_MODEL"),
            "embedding_backend": os.getenv("METACOG_EMBEDDING_BACKEND"),
            "embedding_model": os.getenv("METACOG_EMBEDDING_MODEL"),
            "storage_path": os.getenv("METACOG_STORAGE_PATH"),
        }
        kwargs = {k: v for k, v in env.items() if v}

        interval = os.getenv("METACOG_CYCLE_INTERVAL")
        if interval:
            kwargs["cycle_interval_seconds"] = float(interval)

        rounds = os.getenv("METACOG_MAX_TOOL_ROUNDS")
        if rounds:
            kwargs["max_tool_rounds"] = int(rounds)

        kwargs.update(overrides)
        return cls(**kwargs)

    def _validate(self):
        if self.llm_backend not in {"openai", "ollama"}:
            raise ValueError(f"Unsupported llm_backend: {self.llm_backend}")

        if self.embedding_backend not in {"openai", "ollama"}:
            raise ValueError(f"Unsupported embedding_backend: {self.embedding_backend}")

        if not self.goal:
            raise ValueError("Mission goal must be a non-empty string")

        if self.cycle_interval_seconds <= 0:
            raise ValueError("cycle_interval_seconds must be positive")

        if self.chaos_threshold < 1:
            raise ValueError("chaos_threshold must be >= 1")

        if self.bias_window < 1:
            raise ValueError("bias_window must be >= 1")

        if not 0.0 < self.bias_threshold <= 1.0:
            raise ValueError("bias_threshold must be in (0, 1]")

        if self.max_tool_rounds < 1:
            raise ValueError("max_tool_rounds must be >= 1")

        if self.max_specialist_workers < 1:
            raise ValueError("max_specialist_workers must be >= 1")

        if not self.completion_marker:
            raise ValueError("completion_marker must be a non-empty string")
