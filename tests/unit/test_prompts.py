"""
Unit tests for prompt instruction rendering and failure classification.
"""
import pytest
from google.genai import types

from scriptframe.providers.prompts import (
    PROMPT_SCHEMA,
    STYLE_ANALYSIS_INSTRUCTION,
    build_prompt_request,
)
from scriptframe.providers.safety import (
    EMPTY_RESPONSE_MESSAGE,
    RECITATION_FINISH_MESSAGE,
    SAFETY_FINISH_MESSAGE,
    describe_empty_response,
    finish_reason_name,
    is_safety_block,
)


class TestBuildPromptRequest:
    """Test the rendered instruction."""

    def test_niche_included(self):
        text = build_prompt_request("A storm rolls in.", "watercolor", "true crime", 4)
        assert "- **Storytelling Topic/Niche:** true crime\n" in text
        assert "- **Visual Style:** watercolor" in text

    @pytest.mark.parametrize("niche", ["", None])
    def test_niche_omitted(self, niche):
        text = build_prompt_request("A storm rolls in.", "watercolor", niche, 4)
        assert "**Storytelling Topic/Niche:**" not in text
        assert "**Context & Style:**\n- **Visual Style:** watercolor" in text

    def test_minimum_count_directive(self):
        text = build_prompt_request("A storm rolls in.", "noir", "", 7)
        assert "You MUST generate at least 7 unique and detailed prompts" in text
        assert "creative variations" in text

    def test_safety_and_format_directives(self):
        text = build_prompt_request("A storm rolls in.", "noir", "", 1)
        assert "IMPORTANT SAFETY RULE" in text
        assert "abstractly or symbolically" in text
        assert 'a single key "prompts"' in text

    def test_script_fenced_at_end(self):
        text = build_prompt_request("Line one.\nLine two.", "noir", "", 1)
        assert text.endswith("**SCRIPT TO ANALYZE:**\n---\nLine one.\nLine two.\n---\n")

    def test_schema_requires_prompt_array(self):
        assert PROMPT_SCHEMA.type == types.Type.OBJECT
        assert PROMPT_SCHEMA.required == ["prompts"]
        prompts = PROMPT_SCHEMA.properties["prompts"]
        assert prompts.type == types.Type.ARRAY
        assert prompts.items.type == types.Type.STRING

    def test_style_instruction_asks_for_keywords(self):
        assert "comma-separated" in STYLE_ANALYSIS_INSTRUCTION
        assert "Do not use full sentences" in STYLE_ANALYSIS_INSTRUCTION


class TestSafetyClassifier:
    """Test image provider safety-block detection."""

    @pytest.mark.parametrize("message", [
        "400 INVALID_ARGUMENT: The prompt contains sensitive words that violate Google's Responsible AI practices.",
        "prompt contains sensitive words",
        "Try rephrasing the prompt. Responsible AI practices",
    ])
    def test_matches_block_messages(self, message):
        assert is_safety_block(message)

    def test_ignores_other_errors(self):
        assert not is_safety_block("503 UNAVAILABLE: the service is overloaded")

    def test_custom_phrases(self):
        assert is_safety_block("content filtered", phrases=("filtered",))


class TestFinishReasons:
    """Test empty-response classification."""

    @pytest.mark.parametrize("reason,expected", [
        ("SAFETY", SAFETY_FINISH_MESSAGE),
        (types.FinishReason.SAFETY, SAFETY_FINISH_MESSAGE),
        ("RECITATION", RECITATION_FINISH_MESSAGE),
        (types.FinishReason.RECITATION, RECITATION_FINISH_MESSAGE),
        (None, EMPTY_RESPONSE_MESSAGE),
        ("STOP", EMPTY_RESPONSE_MESSAGE),
    ])
    def test_known_reasons(self, reason, expected):
        assert describe_empty_response(reason) == expected

    def test_other_reason_is_named(self):
        message = describe_empty_response(types.FinishReason.MAX_TOKENS)
        assert message.startswith("Prompt generation stopped unexpectedly")
        assert "Reason: MAX_TOKENS." in message

    def test_finish_reason_name(self):
        assert finish_reason_name(types.FinishReason.STOP) == "STOP"
        assert finish_reason_name("OTHER") == "OTHER"
        assert finish_reason_name(None) is None
