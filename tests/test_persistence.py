import json
import logging

import pytest

from metacog.knowledge.nodes import NodeType
from metacog.mission.context import MissionContext
from metacog.mission.persistence import (
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    MissionPersistence,
    SNAPSHOT_KEY,
)
from metacog.mission.snapshot import MissionSnapshot, SNAPSHOT_VERSION


class BrokenStore(KeyValueStore):

    def get(self, key):
        raise OSError("disk unavailable")

    def put(self, key, value):
        raise OSError("disk unavailable")

    def delete(self, key):
        raise OSError("disk unavailable")

    def clear(self):
        raise OSError("disk unavailable")


class TestStores:

    def test_json_file_store(self, tmp_path):
        path = tmp_path / "state" / "mission.json"
        store = JsonFileStore(path)

        store.put("a", {"x": 1})
        store.put("b", [1, 2])
        store.delete("b")

        assert JsonFileStore(path).get("a") == {"x": 1}
        assert json.loads(path.read_text()) == {"a": {"x": 1}}
        assert not (tmp_path / "state" / "mission.json.tmp").exists()

    def test_json_file_store_missing_file(self, tmp_path):
        store = JsonFileStore(tmp_path / "absent.json")

        assert store.get("a") is None
        store.clear()
        assert not (tmp_path / "absent.json").exists()

    def test_corrupt_file_is_replaced_on_write(self, tmp_path):
        path = tmp_path / "mission.json"
        path.write_text("{not json")
        persistence = MissionPersistence(JsonFileStore(path))

        assert persistence.load() is None
        assert persistence.save(MissionSnapshot(cycle_counter=2)) is True
        assert persistence.load().cycle_counter == 2

    def test_corrupt_file_is_cleared(self, tmp_path):
        path = tmp_path / "mission.json"
        path.write_text("[1, 2")
        persistence = MissionPersistence(JsonFileStore(path))

        persistence.clear()

        assert json.loads(path.read_text()) == {}
        assert not persistence.exists()

    def test_memory_store_returns_copies(self):
        store = InMemoryStore()
        value = {"nodes": [1]}
        store.put("k", value)
        value["nodes"].append(2)

        fetched = store.get("k")
        fetched["nodes"].append(3)

        assert store.get("k") == {"nodes": [1]}


class TestMissionPersistence:

    def test_save_failure_is_reported_not_raised(self):
        persistence = MissionPersistence(BrokenStore())

        assert persistence.save(MissionSnapshot()) is False
        assert persistence.load() is None
        assert persistence.exists() is False
        persistence.clear()

    def test_version_mismatch_ignored(self, store):
        store.put(SNAPSHOT_KEY, {"version": SNAPSHOT_VERSION + 1, "cycle_counter": 4})

        assert MissionPersistence(store).load() is None

    def test_non_mapping_ignored(self, store):
        store.put(SNAPSHOT_KEY, ["not", "a", "snapshot"])

        assert MissionPersistence(store).load() is None

    def test_save_load_clear(self, persistence):
        assert persistence.save(MissionSnapshot(cycle_counter=3, goal="g")) is True
        assert persistence.load().cycle_counter == 3

        persistence.clear()

        assert not persistence.exists()


class TestContextSnapshot:

    @pytest.fixture
    def populated(self, context):
        context.cycle = 4
        node = context.graph.create(NodeType.HYPOTHESIS, "h", created_by="specialist-2")
        context.graph.create(NodeType.REFUTATION, "r", relations=[f"REFUTES:{node.id}"])
        context.agents.record_contribution("specialist-2", 0.8)
        context.deploy_agent("tf-1", "prove", lifespan_cycles=3)
        context.stagnation.update(1)
        context.focus.record("ALGEBRA")
        context.objective = "Close the gap."
        context.research_vector = "Gap closing"
        return context

    def test_round_trip(self, populated, config, oracle, embedder, sandbox):
        snapshot = MissionSnapshot.from_dict(populated.snapshot().to_dict())

        restored = MissionContext(config, oracle, embedder, sandbox)
        restored.restore(snapshot)

        assert restored.cycle == 4
        assert restored.graph.counter == 2
        assert restored.graph.mark_invalidated() == populated.graph.mark_invalidated()
        assert restored.agents.get("tf-1").creation_cycle == 4
        assert restored.agents.metric("specialist-2").average == 0.8
        assert restored.stagnation.counter == 1
        assert restored.focus.history == ["ALGEBRA"]
        assert restored.objective == "Close the gap."
        assert restored.research_vector == "Gap closing"
        assert restored.journal.entries("tf-1")
        assert len(restored.index) == 0

    def test_goal_mismatch_warns(self, populated, config, oracle, embedder, sandbox, caplog):
        snapshot = populated.snapshot()
        snapshot.goal = "the Riemann hypothesis"

        restored = MissionContext(config, oracle, embedder, sandbox)
        with caplog.at_level(logging.WARNING, logger="metacog.mission.context"):
            restored.restore(snapshot)

        assert "differs from configured goal" in caplog.text
        assert restored.cycle == 4

    def test_unreadable_nodes_skipped(self, populated, config, oracle, embedder, sandbox):
        snapshot = populated.snapshot()
        snapshot.nodes.append({"id": "Q9", "type": "QUESTION", "content": "?"})

        restored = MissionContext(config, oracle, embedder, sandbox)
        restored.restore(snapshot)

        assert len(restored.graph) == 2
        assert not restored.graph.has("Q9")
