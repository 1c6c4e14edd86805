"""Human-readable strings for detected symptoms, stored on conversations and samples."""
from typing import Iterable, Optional

from menova.services.lexicon import SymptomLexicon, default_lexicon

NO_SYMPTOMS_TEXT = "None specifically identified"
GENERAL_TITLE = "General wellness conversation"

INTENSITY_DESCRIPTIONS = {
    1: "very mild (1/5)",
    2: "mild (2/5)",
    3: "moderate (3/5)",
    4: "quite severe (4/5)",
    5: "severe (5/5)",
}


def format_detected_symptoms(symptoms: Iterable[str], lexicon: Optional[SymptomLexicon] = None) -> str:
    lexicon = lexicon or default_lexicon()
    names = [lexicon.display_name(s) for s in symptoms]
    if not names:
        return NO_SYMPTOMS_TEXT
    return ", ".join(names)


def intensity_to_description(intensity: Optional[int]) -> str:
    return INTENSITY_DESCRIPTIONS.get(intensity, "unknown")


def create_enhanced_summary(
    free_text: str,
    symptoms: Iterable[str],
    intensity: Optional[int],
    lexicon: Optional[SymptomLexicon] = None,
) -> str:
    """Two-line header (symptoms, intensity), a blank line, then the text verbatim."""
    if intensity is None:
        intensity_line = "INTENSITY: Not specified"
    else:
        intensity_line = f"INTENSITY: {intensity}/5 ({intensity_to_description(intensity)})"
    header = f"DETECTED SYMPTOMS: {format_detected_symptoms(symptoms, lexicon)}\n{intensity_line}"
    return f"{header}\n\n{free_text}"


def create_symptom_title(symptoms: Iterable[str], lexicon: Optional[SymptomLexicon] = None) -> str:
    lexicon = lexicon or default_lexicon()
    names = [lexicon.display_name(s).lower() for s in symptoms]
    if not names:
        return GENERAL_TITLE
    return "Conversation about " + ", ".join(names)
