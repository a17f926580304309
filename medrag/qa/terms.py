"""Term extraction shared by graph navigation and document retrieval."""

from __future__ import annotations

import re

STOP_WORDS = frozenset(
    {
        "what", "is", "are", "the", "a", "an", "how", "do", "does", "can", "could",
        "should", "would", "will", "be", "been", "being", "have", "has", "had",
        "of", "for", "to", "in", "on", "at", "by", "with", "from", "about",
        "i", "you", "we", "they", "it", "this", "that", "these", "those",
        "my", "your", "his", "her", "their", "our",
    }
)

_MEDICAL_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"diabetes|diabetic",
        r"hypertension|blood pressure",
        r"asthma|respiratory",
        r"migraine|headache",
        r"symptoms|symptom",
        r"treatment|therapy|medication",
        r"diagnosis|diagnostic",
        r"prevention|preventive",
        r"disease|condition|disorder",
        r"infection|inflammatory",
        r"chronic|acute",
    )
)


def _dedupe(items) -> list[str]:
    return list(dict.fromkeys(items))


def extract_keywords(text: str) -> list[str]:
    """Lower-case, stop-word filtered, de-duplicated keywords in first-seen order."""

    words = re.sub(r"[^\w\s]", " ", text.lower()).split()
    return _dedupe(word for word in words if len(word) > 2 and word not in STOP_WORDS)


def extract_medical_terms(text: str) -> list[str]:
    """Domain vocabulary found in the raw text, lower-cased and de-duplicated."""

    terms: list[str] = []
    for pattern in _MEDICAL_PATTERNS:
        terms.extend(match.group(0).lower() for match in pattern.finditer(text))
    return _dedupe(terms)


def combined_terms(text: str) -> list[str]:
    return _dedupe([*extract_keywords(text), *extract_medical_terms(text)])
