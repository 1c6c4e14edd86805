"""Free-text symptom detection and intensity inference.

Pure functions over strings: no I/O, no shared state, same output for the
same input. Every text (including the empty string) yields a result; the
caller branches on "nothing detected" versus "symptoms found".

Known limitations, kept on purpose:
- matching is plain substring search, with no stemming or edit distance;
- a multi-word keyword also matches when all of its longer words appear
  anywhere in the text, so "brain" and "fog" in unrelated clauses still
  count as brain fog.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

from menova.services.lexicon import (
    MAX_INTENSITY,
    MIN_INTENSITY,
    IntensityTable,
    SymptomDefinition,
    SymptomLexicon,
    default_lexicon,
    intensity_table,
)

DEFAULT_INTENSITY = 3
# Words of this length or shorter are ignored by the loose multi-word rule
LOOSE_MIN_WORD_LEN = 2

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class DetectionResult:
    detected_symptoms: Tuple[str, ...]
    primary_symptom: Optional[str]
    intensity: Optional[int]

    @property
    def symptom_set(self) -> FrozenSet[str]:
        return frozenset(self.detected_symptoms)

    @property
    def is_empty(self) -> bool:
        return not self.detected_symptoms

    def as_dict(self) -> dict:
        return {
            "detected_symptoms": list(self.detected_symptoms),
            "primary_symptom": self.primary_symptom,
            "intensity": self.intensity,
        }


def normalize_text(text: Optional[str]) -> str:
    """Lowercase, collapse whitespace runs and trim."""
    if not text:
        return ""
    return _WS_RE.sub(" ", text).strip().lower()


def _loose_match(keyword: str, text: str) -> bool:
    words = [w for w in keyword.split(" ") if len(w) > LOOSE_MIN_WORD_LEN]
    return bool(words) and all(w in text for w in words)


def _matches(definition: SymptomDefinition, text: str) -> bool:
    for keyword in definition.keywords:
        if keyword in text:
            return True
    for keyword in definition.keywords:
        if " " in keyword and _loose_match(keyword, text):
            return True
    return False


def has_catch_all(text: str, lexicon: SymptomLexicon) -> bool:
    return any(phrase in text for phrase in lexicon.catch_all)


def detect_symptoms(
    text: str, lexicon: Optional[SymptomLexicon] = None
) -> Tuple[Tuple[str, ...], Optional[str]]:
    """Return (detected ids in lexicon order, primary id) for normalized text."""
    lexicon = lexicon or default_lexicon()
    if not text:
        return (), None

    if has_catch_all(text, lexicon):
        return lexicon.ids(), lexicon.first().id

    detected: List[str] = []
    for definition in lexicon:
        if _matches(definition, text):
            detected.append(definition.id)
    return tuple(detected), (detected[0] if detected else None)


def _numeric_intensity(text: str, table: IntensityTable) -> Optional[int]:
    for cue in table.numeric:
        for value in cue.scores(text):
            if MIN_INTENSITY <= value <= MAX_INTENSITY:
                return value
    return None


def _descriptive_intensity(text: str, table: IntensityTable) -> Optional[int]:
    for cue in table.words:
        if cue.matches(text):
            return cue.score
    return None


def resolve_intensity(
    text: str,
    table: Optional[IntensityTable] = None,
    symptoms_detected: bool = False,
) -> Optional[int]:
    """Resolve a 1-5 intensity from normalized text.

    Numeric ratings win over descriptive words. Without any cue the result
    is moderate when symptoms were detected, otherwise None.
    """
    table = table or intensity_table()
    value = _numeric_intensity(text, table)
    if value is None:
        value = _descriptive_intensity(text, table)
    if value is None and symptoms_detected:
        value = DEFAULT_INTENSITY
    return value


def detect(
    text: Optional[str],
    lexicon: Optional[SymptomLexicon] = None,
    table: Optional[IntensityTable] = None,
) -> DetectionResult:
    normalized = normalize_text(text)
    symptoms, primary = detect_symptoms(normalized, lexicon)
    intensity = resolve_intensity(normalized, table, symptoms_detected=bool(symptoms))
    return DetectionResult(detected_symptoms=symptoms, primary_symptom=primary, intensity=intensity)


__all__ = [
    "DEFAULT_INTENSITY",
    "DetectionResult",
    "normalize_text",
    "has_catch_all",
    "detect_symptoms",
    "resolve_intensity",
    "detect",
]
