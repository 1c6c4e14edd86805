"""Symptom and intensity lexicons.

Both tables are read once from YAML under ``menova/config`` and handed to the
detector explicitly, so tests can build their own lexicons without touching
module state.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Pattern, Tuple

import yaml

logger = logging.getLogger("menova")

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
LEXICON_PATH_ENV = "MENOVA_LEXICON_PATH"
INTENSITY_PATH_ENV = "MENOVA_INTENSITY_PATH"

MIN_INTENSITY = 1
MAX_INTENSITY = 5


class LexiconError(ValueError):
    """Raised when a lexicon file is malformed."""


@dataclass(frozen=True)
class SymptomDefinition:
    id: str
    display_name: str
    keywords: Tuple[str, ...]


@dataclass(frozen=True)
class NumericCue:
    """Regex whose first group captures a 1-5 rating."""

    pattern: Pattern[str]

    def scores(self, text: str) -> Iterator[int]:
        for m in self.pattern.finditer(text):
            yield int(m.group(1))


@dataclass(frozen=True)
class WordCue:
    phrase: str
    score: int
    pattern: Pattern[str]

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class IntensityTable:
    name: str
    numeric: Tuple[NumericCue, ...]
    words: Tuple[WordCue, ...]


class SymptomLexicon:
    """Ordered, read-only collection of symptom definitions."""

    def __init__(self, definitions: List[SymptomDefinition], catch_all: List[str]):
        seen: set[str] = set()
        for d in definitions:
            if d.id in seen:
                raise LexiconError(f"duplicate symptom id: {d.id}")
            if not d.keywords:
                raise LexiconError(f"symptom {d.id} has no keywords")
            seen.add(d.id)
        if not definitions:
            raise LexiconError("lexicon has no symptoms")
        self._definitions: Tuple[SymptomDefinition, ...] = tuple(definitions)
        self._by_id: Dict[str, SymptomDefinition] = {d.id: d for d in definitions}
        self.catch_all: Tuple[str, ...] = tuple(p.lower() for p in catch_all)

    def __iter__(self) -> Iterator[SymptomDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, symptom_id: object) -> bool:
        return symptom_id in self._by_id

    def ids(self) -> Tuple[str, ...]:
        return tuple(d.id for d in self._definitions)

    def first(self) -> SymptomDefinition:
        return self._definitions[0]

    def get(self, symptom_id: str) -> Optional[SymptomDefinition]:
        return self._by_id.get(symptom_id)

    def display_name(self, symptom_id: str) -> str:
        d = self._by_id.get(symptom_id)
        return d.display_name if d else symptom_id


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise LexiconError(f"cannot read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise LexiconError(f"{path} must contain a mapping")
    return data


def _word_pattern(phrase: str) -> Pattern[str]:
    # Cues are anchored at a word start so "very" does not fire inside "every"
    return re.compile(r"\b" + re.escape(phrase.lower()))


def parse_lexicon(data: dict) -> SymptomLexicon:
    definitions: List[SymptomDefinition] = []
    for item in data.get("symptoms") or []:
        sid = (item.get("id") or "").strip()
        if not sid:
            raise LexiconError("symptom entry without id")
        keywords = tuple(str(k).lower() for k in (item.get("keywords") or []))
        definitions.append(
            SymptomDefinition(
                id=sid,
                display_name=item.get("display_name") or sid,
                keywords=keywords,
            )
        )
    return SymptomLexicon(definitions, [str(p) for p in (data.get("catch_all") or [])])


def parse_intensity_tables(data: dict) -> Dict[str, IntensityTable]:
    numeric = tuple(NumericCue(re.compile(p, re.IGNORECASE)) for p in (data.get("numeric") or []))
    tables: Dict[str, IntensityTable] = {}
    for name, rows in (data.get("tables") or {}).items():
        words: List[WordCue] = []
        for row in rows or []:
            score = int(row["score"])
            if not MIN_INTENSITY <= score <= MAX_INTENSITY:
                raise LexiconError(f"{name}: score {score} for {row['phrase']!r} outside 1-5")
            phrase = str(row["phrase"]).lower()
            words.append(WordCue(phrase=phrase, score=score, pattern=_word_pattern(phrase)))
        tables[name] = IntensityTable(name=name, numeric=numeric, words=tuple(words))
    if not tables:
        raise LexiconError("no intensity tables defined")
    default = data.get("default_table")
    if default:
        if default not in tables:
            raise LexiconError(f"default table {default!r} is not defined")
        tables["default"] = tables[default]
    return tables


def load_lexicon(path: Optional[Path] = None) -> SymptomLexicon:
    path = Path(path or os.getenv(LEXICON_PATH_ENV) or CONFIG_DIR / "symptom_lexicon.yaml")
    lexicon = parse_lexicon(_read_yaml(path))
    logger.info({"function": "load_lexicon", "path": str(path), "symptoms": len(lexicon)})
    return lexicon


def load_intensity_tables(path: Optional[Path] = None) -> Dict[str, IntensityTable]:
    path = Path(path or os.getenv(INTENSITY_PATH_ENV) or CONFIG_DIR / "intensity_cues.yaml")
    return parse_intensity_tables(_read_yaml(path))


@lru_cache(maxsize=1)
def default_lexicon() -> SymptomLexicon:
    return load_lexicon()


@lru_cache(maxsize=1)
def _default_tables() -> Dict[str, IntensityTable]:
    return load_intensity_tables()


def intensity_table(name: str = "default") -> IntensityTable:
    """Return a named intensity table ("notes", "conversation" or "default")."""
    tables = _default_tables()
    try:
        return tables[name]
    except KeyError:
        raise LexiconError(f"unknown intensity table: {name}") from None


__all__ = [
    "LexiconError",
    "SymptomDefinition",
    "SymptomLexicon",
    "NumericCue",
    "WordCue",
    "IntensityTable",
    "parse_lexicon",
    "parse_intensity_tables",
    "load_lexicon",
    "load_intensity_tables",
    "default_lexicon",
    "intensity_table",
]
