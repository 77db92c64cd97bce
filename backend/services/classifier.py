"""Answer source classification.

Labels an answer as textbook- or web-derived and reports the first
reference title mentioned in it. Classification never raises; having no
title match is a normal outcome.
"""

import os
from collections.abc import Sequence

from services.types import ClassifiedResult, Language, SourceKind


def _title_key(file_name: str) -> str:
    return os.path.splitext(file_name.strip())[0].strip().casefold()


def match_reference_title(answer: str, titles: Sequence[str]) -> str | None:
    """Return the first title whose stem appears in the answer.

    Titles are compared with their extension stripped, case-folded, by
    substring containment. List order decides; there is no scoring.
    """
    haystack = (answer or "").casefold()
    for title in titles:
        key = _title_key(title or "")
        if key and key in haystack:
            return title
    return None


def classify_response(
    answer: str,
    titles: Sequence[str],
    expand_search_online: bool,
    language: Language,
) -> ClassifiedResult:
    """Classify an answer's information source."""
    matched = match_reference_title(answer, titles)
    if matched:
        source_kind = SourceKind.TEXTBOOK
    elif expand_search_online:
        source_kind = SourceKind.WEB
    else:
        source_kind = SourceKind.TEXTBOOK

    return ClassifiedResult(
        answer=answer,
        source_kind=source_kind,
        language=language,
        source_title=matched,
    )
