"""
Relevance scoring of a page against search terms.

The score is a pure function of the page content, its sections and metadata:

    term_score = occurrences × ln(len(term) + 1)
               + 2 × occurrences            (multi-word phrases)
               + 3 × occurrences in headers
    term_score ×= 1 − (first_index / len(text)) × 0.5

    score = Σ term_score / len(text)
          × 1.2 (citations) × 1.1 (dense text) × 1.1 (> 100 words)
"""

from __future__ import annotations

import math
from typing import Iterable, Union

from .models import PageContent, ParsedPage, SectionType

PHRASE_BONUS = 2.0
HEADER_BONUS = 3.0
POSITION_DECAY = 0.5
REFERENCES_BOOST = 1.2
DENSITY_BOOST = 1.1
DENSITY_THRESHOLD = 0.5
LENGTH_BOOST = 1.1
LENGTH_THRESHOLD = 100


def score_page(page: Union[ParsedPage, PageContent], search_terms: Iterable[str]) -> float:
    text = page.content.lower()
    headers = [s.content.lower() for s in page.sections if s.type == SectionType.HEADER]
    score = 0.0

    for term in search_terms:
        needle = term.lower()
        if not needle.strip():
            continue

        matches = text.count(needle)
        term_score = matches * math.log(len(term) + 1)

        if " " in term:
            term_score += matches * PHRASE_BONUS

        header_matches = sum(header.count(needle) for header in headers)
        term_score += header_matches * HEADER_BONUS

        first_index = text.find(needle)
        if first_index != -1:
            term_score *= 1 - (first_index / len(text)) * POSITION_DECAY

        score += term_score

    normalized = score / max(len(text), 1)

    metadata = page.metadata
    if metadata.has_references:
        normalized *= REFERENCES_BOOST
    if metadata.text_density > DENSITY_THRESHOLD:
        normalized *= DENSITY_BOOST
    if metadata.word_count > LENGTH_THRESHOLD:
        normalized *= LENGTH_BOOST

    return normalized
