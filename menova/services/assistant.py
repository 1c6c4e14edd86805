from typing import Any, Dict, List

from menova.services.symptom_format import format_detected_symptoms


async def generate_reply(system: str, messages: List[Dict[str, Any]], timeout_s: int = 20) -> str:
    """Placeholder LLM call.

    Tests monkeypatch this function, so the implementation here only serves
    as a safe default if not mocked.
    """
    return ""


def build_system_prompt(symptoms, intensity=None) -> str:
    parts = ["You are a warm, concise menopause wellness companion."]
    if symptoms:
        parts.append("DetectedSymptoms=" + format_detected_symptoms(symptoms))
        if intensity is not None:
            parts.append(f"Intensity={intensity}/5")
    return "\n".join(parts)
