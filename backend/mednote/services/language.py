# backend/mednote/services/language.py

import re

from mednote.models.consultation import Language

PORTUGUESE_WORDS = frozenset([
    "dor", "febre", "tosse", "dores", "sinto", "estou", "tenho", "doutor", "médico",
    "sintomas", "medicamento", "exame", "hospital", "consulta", "paciente", "tratamento",
    "saúde", "doença", "remédio", "problema", "mal", "bem", "melhor", "pior", "muito",
    "pouco", "quando", "onde", "como", "porque", "será", "pode", "deve", "precisa",
])

ENGLISH_WORDS = frozenset([
    "pain", "fever", "cough", "feel", "feeling", "have", "doctor", "medical",
    "symptoms", "medication", "test", "hospital", "appointment", "patient", "treatment",
    "health", "disease", "medicine", "problem", "bad", "good", "better", "worse", "much",
    "little", "when", "where", "how", "because", "will", "can", "should", "need",
])

ENGLISH_FUNCTION_WORDS = re.compile(
    r"\b(the|and|is|are|was|were|have|has|will|would|could|should)\b"
)
PORTUGUESE_FUNCTION_WORDS = re.compile(
    r"\b(que|para|com|por|mas|são|está|estão|tem|vai|seria|pode|deve)\b"
)

FUNCTION_WORD_BONUS = 2


def detect_language(text: str) -> Language:
    """
    Guess whether ``text`` is Portuguese or English.

    Each distinct indicative word found as a substring scores one point and a
    function-word match adds a flat bonus once per language. English wins only
    on a strictly higher score; empty input and ties fall back to Portuguese.
    """
    if not text or not text.strip():
        return Language.PT

    lower_text = text.lower()

    pt_score = sum(1 for word in PORTUGUESE_WORDS if word in lower_text)
    en_score = sum(1 for word in ENGLISH_WORDS if word in lower_text)

    if ENGLISH_FUNCTION_WORDS.search(lower_text):
        en_score += FUNCTION_WORD_BONUS
    if PORTUGUESE_FUNCTION_WORDS.search(lower_text):
        pt_score += FUNCTION_WORD_BONUS

    return Language.EN if en_score > pt_score else Language.PT
