"""Tests for language detection and prompt templates."""
import pytest

from mednote.models.consultation import ChatContext, Language
from mednote.services.language import detect_language
from mednote.services.prompts import (
    build_diagnosis_prompt,
    default_explanation_text,
    render_chat_system_prompt,
    templates_for,
)


class TestDetectLanguage:

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_empty_input_defaults_to_portuguese(self, text):
        assert detect_language(text) == Language.PT

    def test_english_sentence(self):
        assert detect_language("I have a fever and pain") == Language.EN

    def test_portuguese_sentence(self):
        assert detect_language("Estou com febre e dor") == Language.PT

    def test_consultation_transcript_is_portuguese(self):
        assert detect_language("paciente relata dor de cabeça e febre há dois dias") == Language.PT

    def test_case_insensitive(self):
        assert detect_language("THE PATIENT HAS A COUGH") == Language.EN

    def test_tie_falls_back_to_portuguese(self):
        # "hospital" belongs to both word lists
        assert detect_language("hospital") == Language.PT

    def test_deterministic(self):
        text = "The doctor said I should take the medicine when the pain gets worse"
        results = {detect_language(text) for _ in range(20)}
        assert results == {Language.EN}


class TestPrompts:

    def test_diagnosis_prompt_lists_schema_fields(self):
        for language in Language:
            prompt = templates_for(language).diagnosis_prompt
            for field in ("diagnosis", "diseases", "exams", "medications", "explanation",
                          "reasoning", "confidence", "keySymptoms",
                          "differentialDiagnoses", "recommendationBasis"):
                assert f'"{field}"' in prompt
            assert "0.1" in prompt and "1.0" in prompt

    def test_templates_are_language_specific(self):
        assert "English" in templates_for(Language.EN).diagnosis_prompt
        assert "português" in templates_for(Language.PT).diagnosis_prompt
        assert templates_for("en") is templates_for(Language.EN)

    def test_diagnosis_prompt_embeds_transcript_verbatim(self):
        transcript = 'Paciente diz: "estou com tosse" há 3 dias'
        prompt = build_diagnosis_prompt(Language.PT, transcript)
        assert prompt.endswith(f'TRANSCRIÇÃO: "{transcript}"')

    def test_chat_prompt_interpolates_context(self):
        context = ChatContext(
            transcript="I have had a cough for a week",
            diagnosis="Acute bronchitis",
            diseases=["Bronchitis", "Common cold"],
            exams=["Chest X-ray"],
            medications=["Ibuprofen", "Rest"],
        )
        prompt = render_chat_system_prompt(Language.EN, context)
        assert "Transcription: I have had a cough for a week" in prompt
        assert "Diagnosis: Acute bronchitis" in prompt
        assert "Bronchitis, Common cold" in prompt
        assert "Chest X-ray" in prompt
        assert "Ibuprofen, Rest" in prompt
        assert "new diagnoses" in prompt
        assert "in-person" in prompt

    def test_default_explanation_text(self):
        reasoning, basis = default_explanation_text(Language.EN)
        assert reasoning.startswith("Analysis based on")
        reasoning_pt, basis_pt = default_explanation_text(Language.PT)
        assert reasoning_pt.startswith("Análise baseada")
        assert basis != basis_pt
