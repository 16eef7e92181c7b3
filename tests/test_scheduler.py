import threading
import time

import pytest

from conftest import final, tool_request
from metacog.agents.journal import ARCHITECT_STREAM
from metacog.agents.seeds import SEED_IDS
from metacog.app import MetacogApp
from metacog.knowledge.nodes import NodeType
from metacog.llm.client import OracleError
from metacog.mission.context import DEFAULT_OBJECTIVE, DEFAULT_RESEARCH_VECTOR
from metacog.mission.persistence import MissionPersistence
from metacog.mission.scheduler import SchedulerState, SchedulerStateError
from metacog.models.oracle import OracleResponse


def deploy_request(agent_id="tf-1", lifespan=None):
    args = dict(specialist_id=agent_id, mission_prompt="Prove lemma L5.", title="L5 Task Force")
    if lifespan is not None:
        args["lifespan_cycles"] = lifespan
    return tool_request("deploy_new_specialist_agent", **args)


HYPOTHESIS = {
    "type": "HYPOTHESIS",
    "content": "Explore circuit lower bounds via restrictions",
    "relations": [],
    "created_by": "specialist-1",
}


class TestStart:

    def test_first_cycle_runs_synchronously_and_persists(self, scheduler, oracle, store):
        oracle.script(deploy_request(), final(knowledge_update=[HYPOTHESIS]))

        scheduler.start()

        ctx = scheduler.context
        assert scheduler.state is SchedulerState.RUNNING
        assert ctx.cycle == 1
        assert ctx.agents.has("tf-1")

        snapshot = MissionPersistence(store).load()
        assert snapshot is not None
        assert snapshot.cycle_counter == 1
        assert "tf-1" in snapshot.active_agents

    def test_synthesis_is_applied(self, scheduler, oracle):
        directive = {"type": "DIRECTIVE", "content": "Attack monotone circuits."}
        oracle.script(final(knowledge_update=[HYPOTHESIS, directive], focus="CIRCUITS",
                            stagnation_level=2))

        scheduler.start()

        ctx = scheduler.context
        nodes = ctx.graph.all()
        assert [n.type for n in nodes] == [NodeType.HYPOTHESIS, NodeType.DIRECTIVE]
        assert nodes[0].promise_score == 0.7
        assert ctx.objective == "Attack monotone circuits."
        assert ctx.research_vector == "Explore circuit lower bounds"
        assert ctx.focus.history == ["CIRCUITS"]
        assert ctx.stagnation.counter == 1
        assert ctx.agents.metric("specialist-1").nodes_created == 1
        assert len(ctx.index) == 2

    def test_specialists_run_but_reactive_agents_do_not(self, scheduler, oracle):
        scheduler.start()

        specialist_calls = [c for c in oracle.calls if c["schema"] is None]
        assert len(specialist_calls) == 4
        assert scheduler.context.journal.entries("specialist-1")[-1].content == "Specialist insight."
        assert scheduler.context.journal.entries("specialist-5") == []

    def test_start_twice_rejected(self, scheduler):
        scheduler.start()

        with pytest.raises(SchedulerStateError):
            scheduler.start()

    def test_interval_ticks_run_more_cycles(self, config, oracle, embedder, sandbox, store):
        config.cycle_interval_seconds = 0.05
        scheduler = MetacogApp.create(
            config=config, oracle=oracle, embedder=embedder, sandbox=sandbox, store=store
        )

        try:
            scheduler.start()
            deadline = time.monotonic() + 5
            while scheduler.context.cycle < 3 and time.monotonic() < deadline:
                time.sleep(0.02)
        finally:
            scheduler.stop()

        assert scheduler.context.cycle >= 3


class TestLifespans:

    def test_temporary_agent_retired_on_expiry(self, scheduler, oracle):
        oracle.script(deploy_request(lifespan=1), final())
        scheduler.start()
        assert scheduler.context.agents.has("tf-1")

        scheduler.run_cycle()

        assert scheduler.context.cycle == 2
        assert not scheduler.context.agents.has("tf-1")
        notes = [e.content for e in scheduler.context.journal.entries(ARCHITECT_STREAM)]
        assert any("Agent Retired" in n and "tf-1" in n for n in notes)


class TestStopAndOverlap:

    def test_stop_during_cycle_abandons_without_saving(self, scheduler, oracle, store):
        def stop_at_architect(schema):
            if schema is not None:
                scheduler.stop()

        oracle.hook = stop_at_architect
        oracle.script(final(knowledge_update=[HYPOTHESIS]))

        scheduler.start()

        assert scheduler.state is SchedulerState.IDLE
        assert len(scheduler.context.graph) == 0
        assert MissionPersistence(store).load() is None

    def test_stop_when_idle_is_noop(self, scheduler):
        assert scheduler.stop() is False

    def test_overlapping_tick_skipped(self, scheduler):
        scheduler._cycle_lock.acquire()
        try:
            assert scheduler.run_cycle() is False
        finally:
            scheduler._cycle_lock.release()

        assert scheduler.context.cycle == 0


class TestCancelledCycleRaces:

    @pytest.fixture
    def blocked_architect(self, oracle):
        entered, release = threading.Event(), threading.Event()

        def block_first_synthesis(schema):
            if schema is not None and not entered.is_set():
                entered.set()
                release.wait(5)

        oracle.hook = block_first_synthesis
        yield entered, release
        release.set()

    def test_reset_waits_for_cancelled_cycle_that_then_fails(
        self, scheduler, oracle, blocked_architect
    ):
        entered, release = blocked_architect
        starter = threading.Thread(target=scheduler.start)
        starter.start()
        assert entered.wait(5)

        assert scheduler.stop() is True
        resetter = threading.Thread(target=scheduler.reset, kwargs={"confirm": True})
        resetter.start()
        oracle.fail_with = OracleError("late failure")
        release.set()

        starter.join(5)
        resetter.join(5)

        assert not starter.is_alive()
        assert not resetter.is_alive()
        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.last_error is None
        assert scheduler.context.cycle == 0
        assert scheduler.context.journal.entries(ARCHITECT_STREAM) == []
        assert scheduler.stop() is False

    def test_cancelled_cycle_failure_is_not_recorded(self, scheduler, oracle, blocked_architect):
        entered, release = blocked_architect
        starter = threading.Thread(target=scheduler.start)
        starter.start()
        assert entered.wait(5)

        scheduler.stop()
        oracle.fail_with = OracleError("late failure")
        release.set()
        starter.join(5)

        assert not starter.is_alive()
        assert scheduler.last_error is None
        assert all(e.kind != "chaos" for e in scheduler.context.journal.entries(ARCHITECT_STREAM))

    def test_restart_runs_a_fresh_cycle_and_drops_the_cancelled_one(
        self, scheduler, oracle, store, blocked_architect
    ):
        entered, release = blocked_architect
        stale = dict(HYPOTHESIS, content="stale")
        oracle.script(final(knowledge_update=[stale]))

        first = threading.Thread(target=scheduler.start)
        first.start()
        assert entered.wait(5)

        scheduler.stop()
        second = threading.Thread(target=scheduler.start)
        second.start()
        release.set()

        first.join(5)
        second.join(5)

        assert not first.is_alive()
        assert not second.is_alive()
        assert scheduler.state is SchedulerState.RUNNING
        assert scheduler.context.cycle == 2
        assert "stale" not in [n.content for n in scheduler.context.graph.all()]
        assert MissionPersistence(store).load().cycle_counter == 2


class TestFailures:

    def test_oracle_failure_halts(self, scheduler, oracle, store):
        oracle.fail_with = OracleError("quota exceeded")

        scheduler.start()

        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.last_error == "quota exceeded"
        entry = scheduler.context.journal.entries(ARCHITECT_STREAM)[-1]
        assert entry.kind == "chaos"
        assert "FATAL SYNTHESIS ERROR" in entry.content
        assert MissionPersistence(store).load() is None

    def test_malformed_synthesis_halts(self, scheduler, oracle):
        oracle.script(OracleResponse(text="I could not decide."))

        scheduler.start()

        assert scheduler.state is SchedulerState.IDLE
        assert "not valid JSON" in scheduler.last_error

    def test_can_start_again_after_halt(self, scheduler, oracle):
        oracle.fail_with = OracleError("temporary")
        scheduler.start()

        oracle.fail_with = None
        scheduler.start()

        assert scheduler.state is SchedulerState.RUNNING
        assert scheduler.last_error is None
        assert scheduler.context.cycle == 2


class TestCompletion:

    def test_terminal_marker_completes_mission(self, scheduler, oracle, store):
        oracle.script(final(summary="PROOF COMPLETE: The separation follows from L5."))

        scheduler.start()

        assert scheduler.state is SchedulerState.COMPLETED
        assert scheduler.final_proof == "The separation follows from L5."
        assert not MissionPersistence(store).exists()

        with pytest.raises(SchedulerStateError):
            scheduler.start()


class TestReset:

    def test_reset_clears_everything(self, scheduler, oracle, store):
        oracle.script(deploy_request(), final(knowledge_update=[HYPOTHESIS], stagnation_level=1))
        scheduler.start()
        scheduler.stop()

        assert scheduler.reset(confirm=True) is True

        ctx = scheduler.context
        assert len(ctx.graph) == 0
        assert ctx.graph.counter == 0
        assert len(ctx.index) == 0
        assert ctx.agents.active_ids() == list(SEED_IDS)
        assert ctx.cycle == 0
        assert ctx.stagnation.counter == 0
        assert ctx.focus.history == []
        assert ctx.objective == DEFAULT_OBJECTIVE
        assert ctx.research_vector == DEFAULT_RESEARCH_VECTOR
        assert ctx.journal.streams() == []
        assert not MissionPersistence(store).exists()

    def test_reset_requires_confirmation(self, scheduler, oracle):
        scheduler.start()
        scheduler.stop()

        assert scheduler.reset(confirm=False) is False
        assert scheduler.context.cycle == 1

    def test_reset_while_running_rejected(self, scheduler):
        scheduler.start()

        with pytest.raises(SchedulerStateError):
            scheduler.reset(confirm=True)

    def test_reset_after_completion(self, scheduler, oracle):
        oracle.script(final(summary="PROOF COMPLETE: done"))
        scheduler.start()

        scheduler.reset(confirm=True)

        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.final_proof is None


class TestResume:

    def test_resume_restores_state_and_rebuilds_index(
        self, scheduler, oracle, config, embedder, sandbox, store
    ):
        oracle.script(deploy_request(), final(knowledge_update=[HYPOTHESIS]))
        scheduler.start()
        scheduler.stop()

        fresh = MetacogApp.create(
            config=config, oracle=oracle, embedder=embedder, sandbox=sandbox, store=store
        )
        progress = []

        assert fresh.resume_from_snapshot(lambda done, total: progress.append(done)) is True

        ctx = fresh.context
        assert ctx.cycle == 1
        assert ctx.agents.has("tf-1")
        assert [n.id for n in ctx.graph.all()] == [n.id for n in scheduler.context.graph.all()]
        assert len(ctx.index) == 1
        assert progress == [1]
        assert ctx.journal.entries("tf-1")

    def test_resume_without_snapshot(self, scheduler):
        assert scheduler.resume_from_snapshot() is False

    def test_resume_while_running_rejected(self, scheduler):
        scheduler.start()

        with pytest.raises(SchedulerStateError):
            scheduler.resume_from_snapshot()


class TestStatus:

    def test_status_fields(self, scheduler):
        scheduler.start()

        status = scheduler.status()

        assert status["state"] == "running"
        assert status["cycle"] == 1
        assert status["has_snapshot"] is True
        assert status["active_agents"] == list(SEED_IDS)
        assert status["last_error"] is None
        assert status["recent_focus"] == ["COMPLEXITY"]
