from typing import Optional

from .config import MissionConfig
from .agents.specialist import SpecialistRunner
from .architect.loop import ToolDispatchLoop
from .architect.prompt_builder import ArchitectPromptBuilder
from .architect.synthesis import SynthesisApplier
from .llm.client import GenerationClient
from .llm.embeddings import EmbeddingClient
from .llm.factory import create_oracle, create_embedder
from .mission.context import MissionContext
from .mission.persistence import JsonFileStore, KeyValueStore, MissionPersistence
from .mission.scheduler import CycleScheduler
from .sandbox.base import CodeSandbox
from .sandbox.subprocess_sandbox import SubprocessSandbox
from .tools.dispatcher import ToolDispatcher
from .tools.handlers import create_tool_registry


class MetacogApp:
    """
    Top-level facade for assembling a research mission.

    Everything external (generation oracle, embedding oracle, code
    sandbox, key-value store) can be supplied by the caller; whatever is
    omitted is built from the `MissionConfig`.

    The returned `CycleScheduler` is fully wired and Idle. Nothing runs
    until `start()` or `resume_from_snapshot()` is called.
    """

    @staticmethod
    def create(
        *,
        config: Optional[MissionConfig] = None,
        oracle: Optional[GenerationClient] = None,
        embedder: Optional[EmbeddingClient] = None,
        sandbox: Optional[CodeSandbox] = None,
        store: Optional[KeyValueStore] = None,
    ) -> CycleScheduler:
        """
        Construct a ready-to-start mission scheduler.

        Parameters
        ----------
        config : Optional[MissionConfig]
            Mission settings. Defaults to `MissionConfig()`.

        oracle : Optional[GenerationClient]
            Text generation backend shared by the architect and all
            specialists. Defaults to the `llm_backend` adapter.

        embedder : Optional[EmbeddingClient]
            Embedding backend for the semantic index. Defaults to the
            `embedding_backend` adapter.

        sandbox : Optional[CodeSandbox]
            Where `execute_python_code` runs. Defaults to a local
            isolated interpreter subprocess.

        store : Optional[KeyValueStore]
            Snapshot storage. Defaults to a JSON file at
            `config.storage_path`.

        Returns
        -------
        CycleScheduler
        """

        config = config or MissionConfig()

        oracle = oracle or create_oracle(config)
        embedder = embedder or create_embedder(config)
        sandbox = sandbox or SubprocessSandbox()
        store = store or JsonFileStore(config.storage_path)

        context = MissionContext(config, oracle, embedder, sandbox)

        # Architect side: tool registry → dispatcher → conversation loop
        dispatcher = ToolDispatcher(create_tool_registry())
        prompt_builder = ArchitectPromptBuilder(
            completion_marker=config.completion_marker,
            chaos_threshold=config.chaos_threshold,
        )
        architect = ToolDispatchLoop(
            oracle,
            dispatcher,
            prompt_builder,
            max_tool_rounds=config.max_tool_rounds,
        )

        specialists = SpecialistRunner(oracle, max_workers=config.max_specialist_workers)

        return CycleScheduler(
            context,
            specialists,
            architect,
            MissionPersistence(store),
            applier=SynthesisApplier(),
            interval_seconds=config.cycle_interval_seconds,
        )
