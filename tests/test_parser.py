import pytest

from metacog.architect.parser import SynthesisError, parse_synthesis
from metacog.architect.synthesis import ArchitectPayload


class TestParseSynthesis:

    def test_plain_json(self):
        assert parse_synthesis('{"synthesis_summary": "ok"}') == {"synthesis_summary": "ok"}

    def test_fenced_json(self):
        text = '```json\n{"synthesis_summary": "ok"}\n```'
        assert parse_synthesis(text)["synthesis_summary"] == "ok"

    def test_surrounding_prose_is_sliced(self):
        text = 'Here is my synthesis:\n{"a": {"b": 1}}\nThanks.'
        assert parse_synthesis(text) == {"a": {"b": 1}}

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_is_fatal(self, text):
        with pytest.raises(SynthesisError):
            parse_synthesis(text)

    def test_invalid_json_is_fatal(self):
        with pytest.raises(SynthesisError):
            parse_synthesis("{not json}")

    def test_non_object_is_fatal(self):
        with pytest.raises(SynthesisError):
            parse_synthesis("[1, 2, 3]")


class TestArchitectPayload:

    def test_lenient_decoding(self):
        payload = ArchitectPayload.from_dict(
            {
                "knowledge_update": [
                    {"type": "LEMMA", "content": "L", "relations": ["SUPPORTS:H1", 7]},
                    {"type": "LEMMA"},
                    "garbage",
                ],
                "strategic_planning": {
                    "strategic_focus": "LOGIC",
                    "research_vectors": [
                        {"description": "first", "promise_score": 0.4},
                        {"description": "broken"},
                    ],
                },
            }
        )

        assert len(payload.knowledge_update) == 1
        assert payload.knowledge_update[0].relations == ("SUPPORTS:H1",)
        assert [v.description for v in payload.research_vectors] == ["first"]
        assert payload.stagnation_level is None
        assert payload.summary == "No summary provided."

    def test_best_vector_first_wins_tie(self):
        payload = ArchitectPayload.from_dict(
            {
                "strategic_planning": {
                    "research_vectors": [
                        {"description": "a", "promise_score": 0.8},
                        {"description": "b", "promise_score": 0.8},
                        {"description": "c", "promise_score": 0.2},
                    ]
                }
            }
        )

        assert payload.best_vector().description == "a"

    def test_promise_inherited_from_vector_prefix(self):
        payload = ArchitectPayload.from_dict(
            {
                "strategic_planning": {
                    "research_vectors": [
                        {"description": "Explore monotone circuits", "promise_score": 0.9}
                    ]
                }
            }
        )

        assert payload.promise_for("We will Explore monotone circuits first") == 0.9
        assert payload.promise_for("Unrelated") == 0.5

    def test_terminal_marker(self):
        payload = ArchitectPayload.from_dict({"synthesis_summary": "PROOF COMPLETE: Q.E.D."})

        assert payload.is_terminal("PROOF COMPLETE:")
        assert payload.final_proof("PROOF COMPLETE:") == "Q.E.D."
