"""
English-only emergency rules for structured symptom lists. Conservative: any hit on a list that
contains a severe symptom short-circuits the analysis to critical/emergency.
Case-insensitive keywords plus simple regex variants. Returns matched terms for logging.
"""

import re
from typing import NamedTuple

from triage.schemas import SymptomEntry

_CARDIO_RESPIRATORY = [
    "chest pain",
    "difficulty breathing",
    "shortness of breath",
    "heart attack",
]
_NEURO = [
    "severe headache",
    "stroke",
    "seizure",
    "unconscious",
    "unresponsive",
    "paralysis",
    "sudden vision loss",
    "sudden numbness",
    "head injury",
]
_BLEEDING_TRAUMA = [
    "severe bleeding",
    "coughing blood",
    "vomiting blood",
    "broken bone",
    "severe abdominal pain",
]
_SYSTEMIC = [
    "high fever",
    "anaphylaxis",
    "allergic reaction",
]
_SELF_HARM_POISONING = [
    "suicide",
    "self harm",
    "overdose",
    "poisoning",
]

# Single words distinctive enough to count on their own (no "pain", "high", "head", ...)
_SINGLE_WORDS = frozenset(
    {
        "stroke",
        "seizure",
        "seizures",
        "unconscious",
        "unresponsive",
        "paralysis",
        "anaphylaxis",
        "overdose",
        "poisoning",
        "suicide",
        "suicidal",
        "cardiac",
    }
)

_ALL_KEYWORDS: list[str] = [
    p.lower() for group in (_CARDIO_RESPIRATORY, _NEURO, _BLEEDING_TRAUMA, _SYSTEMIC, _SELF_HARM_POISONING) for p in group
]

_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"chest\s+(?:pain|pressure)|pressure\s+in\s+(?:my\s+)?chest", re.I), "chest pain"),
    (re.compile(r"(?:difficult(?:y|ies)|trouble)\s+breathing|can'?t\s+breathe", re.I), "difficulty breathing"),
    (re.compile(r"short(?:ness)?\s+of\s+breath", re.I), "shortness of breath"),
    (re.compile(r"(?:coughing|vomiting)\s+(?:up\s+)?blood", re.I), "coughing/vomiting blood"),
    (re.compile(r"self[\s\-]harm", re.I), "self harm"),
    (re.compile(r"overdos(?:e|ed|ing)", re.I), "overdose"),
]

_WORD_SPLIT = re.compile(r"[^a-z']+")


class RedFlagMatch(NamedTuple):
    hit: bool
    matched_terms: list[str]


def _symptom_text(symptoms: list[SymptomEntry]) -> str:
    return " ".join(f"{s.name} {s.description or ''}" for s in symptoms).lower()


def check_emergency_symptoms(symptoms: list[SymptomEntry]) -> RedFlagMatch:
    """
    Return (hit, matched_terms). Only lists with at least one severe symptom can hit.
    Names and descriptions are scanned together.
    """
    if not symptoms or not any(s.severity == "severe" for s in symptoms):
        return RedFlagMatch(False, [])

    text = _symptom_text(symptoms)
    matched: list[str] = []
    seen: set[str] = set()

    def _add(label: str) -> None:
        if label not in seen:
            seen.add(label)
            matched.append(label)

    for word in _WORD_SPLIT.split(text):
        if word in _SINGLE_WORDS:
            _add(word)

    for kw in _ALL_KEYWORDS:
        if kw in text:
            _add(kw)

    for pat, label in _PATTERNS:
        if pat.search(text):
            _add(label)

    return RedFlagMatch(len(matched) > 0, matched)
