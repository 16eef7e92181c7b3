import json
import threading
from collections import deque

import pytest

from metacog.app import MetacogApp
from metacog.config import MissionConfig
from metacog.llm.client import GenerationClient, OracleError
from metacog.llm.embeddings import EmbeddingClient
from metacog.mission.context import MissionContext
from metacog.mission.persistence import InMemoryStore, MissionPersistence
from metacog.models.oracle import OracleResponse, GroundedAnswer, Source
from metacog.models.tool_call import ToolCall
from metacog.sandbox.base import CodeSandbox, SandboxResult


# ------------------------------------------------------------
# Fakes
# ------------------------------------------------------------

class FakeOracle(GenerationClient):
    """
    Scripted generation oracle.

    Architect turns (requests carrying a response schema) are served
    from `architect_script` in order; once it runs dry a plain synthesis
    is returned. Specialist turns always get `specialist_reply`.
    """

    def __init__(self):
        self.architect_script = deque()
        self.generate_script = deque()
        self.specialist_reply = "Specialist insight."
        self.search_answer = GroundedAnswer(
            "Recent results on circuit lower bounds.",
            [Source("https://example.org/paper", "A Paper")],
        )
        self.fail_with = None
        self.fail_search = False
        self.hook = None
        self.calls = []
        self._lock = threading.Lock()

    def script(self, *responses):
        self.architect_script.extend(responses)

    def converse(self, messages, tools=None, response_schema=None):
        with self._lock:
            self.calls.append(
                {"messages": list(messages), "tools": tools, "schema": response_schema}
            )

        if self.hook is not None:
            self.hook(response_schema)

        if self.fail_with is not None:
            raise self.fail_with

        if response_schema is None:
            return OracleResponse(text=self.specialist_reply)

        with self._lock:
            if self.architect_script:
                return self.architect_script.popleft()

        return OracleResponse(text=synthesis_text())

    def generate(self, prompt):
        if self.fail_with is not None:
            raise self.fail_with
        with self._lock:
            if self.generate_script:
                return self.generate_script.popleft()
        return "Generated response."

    def grounded_search(self, query):
        if self.fail_search:
            raise OracleError("search backend unavailable")
        return self.search_answer

    def architect_calls(self):
        return [c for c in self.calls if c["schema"] is not None]


class FakeEmbedder(EmbeddingClient):
    """Letter-frequency vectors, with exact overrides for chosen texts."""

    def __init__(self):
        self.vectors = {}
        self.fail = False

    def embed(self, text):
        if self.fail:
            raise OracleError("embedding backend unavailable")
        if text in self.vectors:
            return list(self.vectors[text])
        counts = [0.0] * 26
        for ch in text.lower():
            if "a" <= ch <= "z":
                counts[ord(ch) - ord("a")] += 1.0
        return counts


class FakeSandbox(CodeSandbox):

    def __init__(self, stdout="4\n", stderr=""):
        self.stdout = stdout
        self.stderr = stderr
        self.executed = []

    def run(self, code):
        self.executed.append(code)
        return SandboxResult(stdout=self.stdout, stderr=self.stderr)


# ------------------------------------------------------------
# Payload helpers
# ------------------------------------------------------------

def synthesis_text(
    summary="Cycle summary.",
    knowledge_update=None,
    focus="COMPLEXITY",
    vectors=None,
    stagnation_level=0,
):
    return json.dumps(
        {
            "metacognitive_reflection": {"strategic_insights": "none"},
            "knowledge_update": knowledge_update or [],
            "strategic_planning": {
                "strategic_focus": focus,
                "research_vectors": vectors
                if vectors is not None
                else [{"description": "Explore circuit lower bounds", "promise_score": 0.7}],
            },
            "strategic_assessment": {
                "stagnation_level": stagnation_level,
                "justification": "n/a",
            },
            "synthesis_summary": summary,
        }
    )


def final(**kwargs):
    return OracleResponse(text=synthesis_text(**kwargs))


def tool_request(name, **arguments):
    return OracleResponse(tool_calls=[ToolCall(tool_name=name, arguments=arguments)])


# ------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------

@pytest.fixture
def config():
    return MissionConfig(goal="the P vs NP problem", cycle_interval_seconds=3600)


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def sandbox():
    return FakeSandbox()


@pytest.fixture
def context(config, oracle, embedder, sandbox):
    return MissionContext(config, oracle, embedder, sandbox)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def persistence(store):
    return MissionPersistence(store)


@pytest.fixture
def scheduler(config, oracle, embedder, sandbox, store):
    scheduler = MetacogApp.create(
        config=config,
        oracle=oracle,
        embedder=embedder,
        sandbox=sandbox,
        store=store,
    )
    yield scheduler
    scheduler.stop()
