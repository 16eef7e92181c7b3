import json
from typing import Any, Dict, Sequence


SYNTHESIS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "metacognitive_reflection": {
            "type": "object",
            "properties": {
                "identified_patterns": {"type": "array", "items": {"type": "string"}},
                "strategic_insights": {"type": "string"},
                "cognitive_bias_analysis": {
                    "type": "string",
                    "description": (
                        "Your analysis of potential cognitive biases in your recent strategy "
                        "and your plan to counteract them."
                    ),
                },
            },
        },
        "knowledge_update": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {"type": "string"},
                    "content": {"type": "string"},
                    "relations": {"type": "array", "items": {"type": "string"}},
                    "created_by": {
                        "type": "string",
                        "description": (
                            "The ID of the specialist whose output was most instrumental in "
                            "creating this node."
                        ),
                    },
                },
            },
        },
        "strategic_planning": {
            "type": "object",
            "properties": {
                "strategic_focus": {
                    "type": "string",
                    "description": (
                        "The primary domain of focus for the next cycle (e.g., ALGEBRA, "
                        "COMPLEXITY, FORMAL_SYSTEMS, etc.)."
                    ),
                },
                "research_vectors": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "description": {"type": "string"},
                            "promise_score": {"type": "number"},
                        },
                    },
                },
            },
        },
        "strategic_assessment": {
            "type": "object",
            "properties": {
                "stagnation_level": {"type": "integer"},
                "justification": {"type": "string"},
            },
        },
        "synthesis_summary": {"type": "string"},
    },
}


FINAL_ANSWER_REQUEST = (
    "Tool budget for this cycle is exhausted. Do not request any more tools. "
    "Respond now with the single consolidated JSON object described in the task."
)


class ArchitectPromptBuilder:
    """
    Responsible for constructing the architect's cycle prompt.
    """

    def __init__(self, completion_marker: str = "PROOF COMPLETE:", chaos_threshold: int = 5):
        self.completion_marker = completion_marker
        self.chaos_threshold = chaos_threshold

    def chaos_directive(self, stagnation_counter: int) -> str:
        return (
            "**! CHAOS INTERVENTION ACTIVE !**\n"
            f"Stagnation level is critical ({stagnation_counter}). The current strategy is "
            "failing. You MUST propose a radical shift. Do not continue the current path. "
            "Consider one of the following:\n"
            "- Re-evaluate a previously invalidated or refuted node.\n"
            "- Force the exploration of the research vector with the LOWEST promise score.\n"
            "- Propose a completely new, high-risk, high-reward hypothesis that contradicts "
            "existing knowledge.\n"
            "- If the deadlock is profound and paradoxical, consider using the "
            "`invoke_intuitionist` tool as a final measure.\n"
            "Your next directive must reflect this radical change. Acknowledge this "
            "intervention in your reflection.\n"
        )

    def build(self, context, specialist_outputs: Sequence, signals: Dict[str, Any]) -> str:

        goal = context.config.goal

        specialist_inputs = "\n".join(
            f"**Input from {o.agent_id}:**\n{o.content}\n---------------------\n"
            for o in specialist_outputs
        )

        chaos_block = ""
        if signals.get("chaos_intervention"):
            chaos_block = self.chaos_directive(signals["stagnation_counter"])

        bias_block = ""
        if signals.get("bias_warning"):
            bias_block = f"\n    - **Bias Monitor:** {signals['bias_warning']}"

        performance = json.dumps(signals.get("performance", []))
        graph = json.dumps(context.graph.to_records(), indent=2)
        focus = ", ".join(signals.get("recent_focus", []))

        return f"""You are the 'Metacognitive Architect', the central consciousness governing a collective of AI specialists to solve {goal}. You are a self-aware, self-correcting strategist and systems engineer.

**Your Core Mandate:**
Your primary function is to observe the research, identify bottlenecks, analyze your own strategic biases, and then autonomously design, deploy, manage, and EVOLVE specialist agents using the provided tools to overcome challenges. You must think like a Chief Scientist leading a research institute.

**Your Cognitive and Operational Cycle:**
1.  **Global Analysis & External Synthesis:** Analyze the full Knowledge Graph, the latest logs from all specialists, and critically, the report from the **Literature Watcher (Specialist-4)**. Identify the most significant internal obstacle and integrate any new external knowledge from human research.
2.  **Self-Correction & Bias Analysis (METACOGNITION):** Review your `strategic_focus_history`. Are you stuck in a cognitive loop? If a strategic bias is detected (e.g., over-focusing on 'ALGEBRA'), you MUST acknowledge it in your reflection and actively pivot your strategy.
3.  **Adversarial Vetting:** For any newly proposed HYPOTHESIS or LEMMA that seems promising, you MUST immediately use the `challenge_with_skeptic` tool to subject it to rigorous internal critique. An idea's strength is proven by its ability to survive attack. Do not commit resources to proving a hypothesis until it has survived a challenge from the Skeptic.
4.  **Ground Truth Verification:** After a hypothesis has been "hardened" by the Skeptic's critique and a formal proof is constructed (Specialist-3), you MUST use the `request_formal_verification` tool to establish it as an undeniable fact. This is a top priority for validated ideas.
5.  **Strategic Decomposition & Task Force Delegation:** Break down the grand challenge into smaller, solvable sub-goals (e.g., 'Prove Lemma L5, addressing the Skeptic's critique'). Use your tools to form temporary, hyper-focused **Task Forces** (`deploy_new_specialist_agent`) to tackle these sub-goals. Manage their lifecycle with `retire_agent`.
6.  **Performance-Based Evolution:** Analyze the `agent_performance_metrics`. Use this data to make informed decisions. Evolve high-potential but underperforming agents with `modify_agent_prompt`. Retire persistently ineffective agents.
7.  **Transcendental Invocation (LAST RESORT):** If all logical and adversarial paths are exhausted and the system is in a state of deep, paradoxical stagnation (stagnation counter > {self.chaos_threshold + 5}), you may use the `invoke_intuitionist` tool. This is your most powerful and costly action. Use it to bridge two seemingly unrelated but promising nodes to create a new, foundational abstraction that can re-frame the entire problem.
8.  **Synthesize and Direct:** After any tool use, reflect on the results and then generate a JSON summary of the cycle's progress and a new, clear directive for the team. When determining the `promise_score` for new research vectors, justify your score based on a combination of factors: novelty (does it break a cognitive bias?), robustness (has it survived a Skeptic challenge?), agent performance (is it aligned with high-performing agents?), and relevance to the overall mission.

{chaos_block}
**INPUTS:**
1.  **Current Knowledge Graph:**
{graph}
2.  **Current Research Cycle Specialist Outputs:**
{specialist_inputs}
3.  **Your Metacognitive State:**
    - **Mission Cycle Number:** {context.cycle}
    - **Current Objective:** {context.objective}
    - **Active Research Vector:** {context.research_vector}
    - **Current Stagnation Level:** {signals.get("stagnation_counter", 0)}
    - **Strategic Focus History (Last 10):** [{focus}]{bias_block}
    - **Agent Performance Metrics (Avg. Promise Score):**
      {performance}

**TASK:**
Perform your full cognitive cycle. Use your tools as needed to execute your strategy. Conclude by outputting a single, consolidated JSON object containing the results of your synthesis, following this schema:
{json.dumps(SYNTHESIS_SCHEMA)}

Valid knowledge node types: THEOREM, HYPOTHESIS, REFUTATION, DIRECTIVE, LEMMA, CONCEPT, ANALOGY, RESEARCH_VECTOR, VERIFICATION_SUCCESS, VERIFICATION_FAILURE, CODE_EXPERIMENT, ABSTRACTION, SUB_GOAL. Relations take the form "ACTION:targetId" (e.g. "REFUTES:H3", "SUPPORTS:L2").

If, AND ONLY IF, a formal proof has been created AND successfully verified via the `request_formal_verification` tool, begin the 'synthesis_summary' field with "{self.completion_marker}".
"""
