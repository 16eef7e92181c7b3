import pytest

from metacog.agents.journal import ARCHITECT_STREAM
from metacog.agents.seeds import INTUITIONIST_ID, SKEPTIC_ID
from metacog.knowledge.nodes import NodeType
from metacog.models.tool_call import ToolCall
from metacog.tools.dispatcher import ToolDispatcher
from metacog.tools.handlers import create_tool_registry
from metacog.tools.verifier import ProofVerifier


class FixedRandom:

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

    def randint(self, a, b):
        return a


@pytest.fixture
def dispatcher():
    return ToolDispatcher(create_tool_registry())


def dispatch(dispatcher, context, name, **arguments):
    return dispatcher.dispatch(context, ToolCall(tool_name=name, arguments=arguments))


class TestDispatchOutcomes:

    def test_all_tools_registered(self, dispatcher):
        assert len(dispatcher.registry) == 9
        assert all(d["type"] == "function" for d in dispatcher.registry.declarations())

    def test_unknown_tool_blocked(self, dispatcher, context):
        result = dispatch(dispatcher, context, "launch_rocket")

        assert result.is_blocked
        assert result.to_response()["success"] is False

    def test_missing_argument_fails(self, dispatcher, context):
        result = dispatch(dispatcher, context, "retire_agent", agent_id="specialist-1")

        assert result.is_failure
        assert "reason" in result.error
        assert context.agents.has("specialist-1")

    def test_wrong_type_fails(self, dispatcher, context):
        result = dispatch(
            dispatcher, context, "deploy_new_specialist_agent",
            specialist_id="tf", mission_prompt="p", title="t", lifespan_cycles="three",
        )

        assert result.is_failure
        assert not context.agents.has("tf")


class TestMissingReferences:

    def test_challenge_unknown_node_names_id(self, dispatcher, context):
        context.graph.create(NodeType.HYPOTHESIS, "h")
        before = context.graph.to_records()

        result = dispatch(
            dispatcher, context, "challenge_with_skeptic",
            node_id_to_challenge="H9", reason_for_challenge="vet it",
        )

        assert result.is_failure
        assert "H9" in result.error
        assert context.graph.to_records() == before
        assert context.journal.entries(SKEPTIC_ID) == []

        note = context.journal.entries(ARCHITECT_STREAM)[-1]
        assert note.kind == "meta"
        assert "H9" in note.content

    def test_intuitionist_names_only_missing_ids(self, dispatcher, context):
        present = context.graph.create(NodeType.CONCEPT, "c")
        counter = context.graph.counter

        result = dispatch(
            dispatcher, context, "invoke_intuitionist",
            node_id_A=present.id, node_id_B="L42", reason_for_invocation="deadlock",
        )

        assert result.is_failure
        assert "L42" in result.error
        assert present.id not in result.error
        assert context.graph.counter == counter
        assert context.journal.entries(INTUITIONIST_ID) == []

    def test_verification_unknown_node(self, dispatcher, context):
        result = dispatch(
            dispatcher, context, "request_formal_verification",
            node_id="T5", proof_code="qed",
        )

        assert result.is_failure
        assert len(context.graph) == 0


class TestReactiveAgents:

    def test_skeptic_critique(self, dispatcher, context, oracle):
        target = context.graph.create(NodeType.HYPOTHESIS, "P != NP via circuits")
        oracle.generate_script.append("The circuit argument relativizes.")

        result = dispatch(
            dispatcher, context, "challenge_with_skeptic",
            node_id_to_challenge=target.id, reason_for_challenge="vet it",
        )

        assert result.output == {"critique": "The circuit argument relativizes."}
        assert context.journal.entries(SKEPTIC_ID)[-1].content == "The circuit argument relativizes."
        assert context.journal.entries(ARCHITECT_STREAM)[-1].kind == "challenge"

    def test_intuitionist_concept(self, dispatcher, context, oracle):
        a = context.graph.create(NodeType.CONCEPT, "symmetry")
        b = context.graph.create(NodeType.LEMMA, "counting")
        oracle.generate_script.append("Symmetry is counting in disguise.")

        result = dispatch(
            dispatcher, context, "invoke_intuitionist",
            node_id_A=a.id, node_id_B=b.id, reason_for_invocation="deadlock",
        )

        assert result.output == {"new_concept": "Symmetry is counting in disguise."}
        assert context.journal.entries(INTUITIONIST_ID)[-1].kind == "intuition"


class TestLifecycleTools:

    def test_deploy_and_duplicate(self, dispatcher, context):
        context.cycle = 3
        args = dict(specialist_id="tf-l5", mission_prompt="Prove L5", title="L5 Task Force",
                    lifespan_cycles=2, required_tools=["execute_python_code"])

        first = dispatch(dispatcher, context, "deploy_new_specialist_agent", **args)
        second = dispatch(dispatcher, context, "deploy_new_specialist_agent", **args)

        assert first.is_success
        assert second.is_failure
        agent = context.agents.get("tf-l5")
        assert agent.creation_cycle == 3
        assert agent.lifespan_cycles == 2
        assert "New Specialist Deployed" in context.journal.entries("tf-l5")[0].content

    def test_retire_always_succeeds(self, dispatcher, context):
        first = dispatch(dispatcher, context, "retire_agent", agent_id="specialist-2", reason="idle")
        again = dispatch(dispatcher, context, "retire_agent", agent_id="specialist-2", reason="idle")

        assert first.is_success and again.is_success
        assert not context.agents.has("specialist-2")
        assert "Agent Retired" in context.journal.entries(ARCHITECT_STREAM)[-1].content

    def test_retire_unknown_agent_writes_no_note(self, dispatcher, context):
        result = dispatch(dispatcher, context, "retire_agent", agent_id="ghost", reason="idle")

        assert result.is_success
        assert context.journal.entries(ARCHITECT_STREAM) == []

    def test_modify_prompt(self, dispatcher, context):
        result = dispatch(
            dispatcher, context, "modify_agent_prompt",
            agent_id="specialist-1", new_mission_prompt="Focus on lower bounds.", reason="drift",
        )

        assert result.is_success
        assert context.agents.get("specialist-1").mission_prompt == "Focus on lower bounds."
        assert context.journal.entries("specialist-1")[-1].kind == "meta"

    def test_modify_unknown_agent_fails(self, dispatcher, context):
        result = dispatch(
            dispatcher, context, "modify_agent_prompt",
            agent_id="ghost", new_mission_prompt="x", reason="y",
        )

        assert result.is_failure
        assert "ghost" in result.error


class TestVerificationAndExperiments:

    def test_verification_success_sets_flag(self, dispatcher, context):
        context.verifier = ProofVerifier(rng=FixedRandom(0.0))
        node = context.graph.create(NodeType.LEMMA, "lemma")

        result = dispatch(
            dispatcher, context, "request_formal_verification",
            node_id=node.id, proof_code="theorem l : true := trivial",
        )

        assert result.output["verified"] is True
        assert context.graph.get(node.id).verified is True

    def test_verification_failure_reports_line(self, dispatcher, context):
        context.verifier = ProofVerifier(rng=FixedRandom(0.99))
        node = context.graph.create(NodeType.LEMMA, "lemma")

        result = dispatch(
            dispatcher, context, "request_formal_verification",
            node_id=node.id, proof_code="x" * 900,
        )

        assert result.output["verified"] is False
        assert "line 1" in result.output["feedback"]
        assert context.graph.get(node.id).verified is False

    def test_success_chance_floor(self):
        assert ProofVerifier.success_chance("x" * 5000) == 0.1

    def test_execute_python_code(self, dispatcher, context, sandbox):
        result = dispatch(
            dispatcher, context, "execute_python_code",
            code="print(2 + 2)", reason="sanity check",
        )

        assert result.output == {"stdout": "4\n", "stderr": ""}
        assert sandbox.executed == ["print(2 + 2)"]
        assert "Code Execution Result" in context.journal.entries(ARCHITECT_STREAM)[-1].content

    def test_web_search_sources(self, dispatcher, context):
        result = dispatch(dispatcher, context, "perform_web_search", query="P vs NP 2024")

        assert result.output["sources"] == [{"uri": "https://example.org/paper", "title": "A Paper"}]

    def test_web_search_failure_is_reported(self, dispatcher, context, oracle):
        oracle.fail_search = True

        result = dispatch(dispatcher, context, "perform_web_search", query="P vs NP 2024")

        assert result.is_success
        assert result.output == {"summary": "Web search failed.", "sources": []}


class TestPeerReview:

    def test_review_written_to_three_journals(self, dispatcher, context, oracle):
        context.journal.append("specialist-3", "formal step")
        oracle.generate_script.append("Looks sound.")

        result = dispatch(
            dispatcher, context, "request_peer_review",
            reviewing_agent_id="specialist-1", target_agent_id="specialist-3",
            review_task="Check the formal step.",
        )

        assert result.output == {"review_summary": "Looks sound."}
        assert context.journal.entries(ARCHITECT_STREAM)[-1].kind == "peer"
        assert context.journal.entries("specialist-1")[-1].kind == "peer"
        assert "Looks sound." in context.journal.entries("specialist-3")[-1].content

    def test_review_unknown_agent(self, dispatcher, context):
        result = dispatch(
            dispatcher, context, "request_peer_review",
            reviewing_agent_id="specialist-1", target_agent_id="ghost", review_task="x",
        )

        assert result.is_failure
