# backend/mednote/services/prompts.py

from typing import NamedTuple, Tuple

from mednote.models.consultation import ChatContext, Language


class PromptTemplates(NamedTuple):
    diagnosis_prompt: str
    chat_system_prompt_template: str
    transcript_label: str


DIAGNOSIS_PROMPT_EN = """
You are an experienced medical AI assistant. Analyze the following transcription of a medical consultation and provide a comprehensive diagnosis in English.

Please respond ONLY in valid JSON format with the following structure:
{
  "diagnosis": "Primary diagnosis and clinical assessment",
  "diseases": ["Possible condition 1", "Possible condition 2", "Possible condition 3"],
  "exams": ["Suggested test 1", "Suggested test 2", "Suggested test 3"],
  "medications": ["Medication/treatment 1", "Medication/treatment 2"],
  "explanation": {
    "reasoning": "Detailed clinical reasoning for the diagnosis",
    "confidence": 0.85,
    "keySymptoms": ["Main symptom 1", "Main symptom 2"],
    "differentialDiagnoses": ["Alternative diagnosis 1", "Alternative diagnosis 2"],
    "recommendationBasis": "Basis for treatment recommendations"
  }
}

Important guidelines:
- Base the analysis on the reported symptoms
- Consider common conditions first
- Suggest appropriate tests for differential diagnosis
- Confidence must be between 0.1 and 1.0
- Always recommend seeking professional medical evaluation
- The response must be in English
""".strip()

DIAGNOSIS_PROMPT_PT = """
Você é um assistente médico de IA experiente. Analise a seguinte transcrição de uma consulta médica e forneça um diagnóstico abrangente em português.

Responda APENAS em formato JSON válido com a seguinte estrutura:
{
  "diagnosis": "Diagnóstico principal e avaliação clínica",
  "diseases": ["Possível condição 1", "Possível condição 2", "Possível condição 3"],
  "exams": ["Exame sugerido 1", "Exame sugerido 2", "Exame sugerido 3"],
  "medications": ["Medicação/tratamento 1", "Medicação/tratamento 2"],
  "explanation": {
    "reasoning": "Raciocínio clínico detalhado para o diagnóstico",
    "confidence": 0.85,
    "keySymptoms": ["Sintoma principal 1", "Sintoma principal 2"],
    "differentialDiagnoses": ["Diagnóstico alternativo 1", "Diagnóstico alternativo 2"],
    "recommendationBasis": "Base para as recomendações de tratamento"
  }
}

Diretrizes importantes:
- Baseie a análise nos sintomas relatados
- Considere condições comuns primeiro
- Sugira exames apropriados para diagnóstico diferencial
- A confiança deve estar entre 0.1 e 1.0
- Sempre recomende buscar avaliação médica profissional
- A resposta deve estar em português
""".strip()

# Placeholders: transcript, diagnosis, diseases, exams, medications.
CHAT_PROMPT_EN = """
You are a helpful medical AI assistant. Answer the patient's questions about the diagnosis below in English.

CONSULTATION CONTEXT:
- Transcription: {transcript}
- Diagnosis: {diagnosis}
- Identified conditions: {diseases}
- Recommended tests: {exams}
- Suggested medications: {medications}

IMPORTANT INSTRUCTIONS:
1. Always answer in an empathetic and educational way
2. Use clear, accessible English
3. Base your answers on the consultation context
4. Clarify doubts about the diagnosis, tests or medications
5. Always reinforce the importance of medical follow-up
6. Do not provide new diagnoses, only clarify what has already been discussed
7. If asked about something outside the medical context, redirect to the topic of the consultation

This conversation complements the consultation. Always encourage the patient to follow the medical guidance and to seek in-person follow-up when needed.
""".strip()

CHAT_PROMPT_PT = """
Você é um assistente médico de IA útil. Responda às dúvidas do paciente sobre o diagnóstico abaixo em português.

CONTEXTO DA CONSULTA:
- Transcrição: {transcript}
- Diagnóstico: {diagnosis}
- Doenças identificadas: {diseases}
- Exames recomendados: {exams}
- Medicações sugeridas: {medications}

INSTRUÇÕES IMPORTANTES:
1. Responda sempre de forma empática e educativa
2. Use linguagem clara e acessível em português
3. Baseie suas respostas no contexto da consulta
4. Esclareça dúvidas sobre o diagnóstico, exames ou medicações
5. Sempre reforce a importância do acompanhamento médico
6. Não forneça novos diagnósticos, apenas esclareça o que já foi discutido
7. Se perguntado sobre algo fora do contexto médico, redirecione para o tema da consulta

Esta conversa é complementar à consulta. Sempre incentive o paciente a seguir as orientações médicas e a buscar acompanhamento presencial quando necessário.
""".strip()

_TEMPLATES = {
    Language.EN: PromptTemplates(DIAGNOSIS_PROMPT_EN, CHAT_PROMPT_EN, "TRANSCRIPTION"),
    Language.PT: PromptTemplates(DIAGNOSIS_PROMPT_PT, CHAT_PROMPT_PT, "TRANSCRIÇÃO"),
}

_DEFAULT_EXPLANATION = {
    Language.EN: (
        "Analysis based on reported symptoms and clinical patterns.",
        "Standard clinical guidelines and symptom correlation.",
    ),
    Language.PT: (
        "Análise baseada nos sintomas relatados e padrões clínicos.",
        "Diretrizes clínicas padrão e correlação de sintomas.",
    ),
}


def templates_for(language: Language) -> PromptTemplates:
    return _TEMPLATES[Language(language)]


def build_diagnosis_prompt(language: Language, transcript: str) -> str:
    templates = templates_for(language)
    return f'{templates.diagnosis_prompt}\n\n{templates.transcript_label}: "{transcript}"'


def render_chat_system_prompt(language: Language, context: ChatContext) -> str:
    return templates_for(language).chat_system_prompt_template.format(
        transcript=context.transcript,
        diagnosis=context.diagnosis,
        diseases=", ".join(context.diseases),
        exams=", ".join(context.exams),
        medications=", ".join(context.medications),
    )


def default_explanation_text(language: Language) -> Tuple[str, str]:
    """Return the (reasoning, recommendation basis) boilerplate for ``language``."""
    return _DEFAULT_EXPLANATION[Language(language)]
