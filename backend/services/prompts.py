"""System prompt composition.

Decides the conversation language once per request and renders the
matching native-language system prompt with the reference library.
"""

import re
from collections.abc import Sequence

from llm.prompts import (
    MODEL_FAILURE_MESSAGE_AR,
    MODEL_FAILURE_MESSAGE_EN,
    NO_REFERENCES_AR,
    NO_REFERENCES_EN,
    REFERENCES_LIST_AR,
    REFERENCES_LIST_EN,
    STUDY_SYSTEM_PROMPT_AR,
    STUDY_SYSTEM_PROMPT_EN,
)
from services.types import Language

_ARABIC_BLOCK = re.compile("[\u0600-\u06FF]")

_PROMPTS: dict[Language, tuple[str, str, str]] = {
    Language.EN: (STUDY_SYSTEM_PROMPT_EN, REFERENCES_LIST_EN, NO_REFERENCES_EN),
    Language.AR: (STUDY_SYSTEM_PROMPT_AR, REFERENCES_LIST_AR, NO_REFERENCES_AR),
}


def detect_language(text: str) -> Language:
    """Arabic if the text has any character of the Arabic block, else English."""
    return Language.AR if _ARABIC_BLOCK.search(text or "") else Language.EN


def resolve_language(question: str, language: Language | str | None = None) -> Language:
    """Use the explicit language when given, otherwise detect it."""
    if language:
        return Language(language)
    return detect_language(question)


def compose_system_prompt(
    language: Language,
    reference_text: str = "",
    reference_titles: Sequence[str] = (),
) -> str:
    """Render the system prompt for one language.

    Args:
        language: Conversation language.
        reference_text: Contextual reference material, appended verbatim.
        reference_titles: File names of the available reference books.

    Returns:
        System prompt text.
    """
    template, list_template, no_references = _PROMPTS[language]
    titles = [t for t in reference_titles if t]
    references_section = (
        list_template.format(titles=", ".join(titles)) if titles else no_references
    )
    return template.format(
        references_section=references_section,
        reference_text=reference_text or "",
    ).strip()


def model_failure_message(language: Language) -> str:
    """Localized apology shown in place of an answer."""
    if language is Language.AR:
        return MODEL_FAILURE_MESSAGE_AR
    return MODEL_FAILURE_MESSAGE_EN
