"""LLM prompts for the study assistant."""

from llm.prompts.study import (
    MODEL_FAILURE_MESSAGE_AR,
    MODEL_FAILURE_MESSAGE_EN,
    NO_REFERENCES_AR,
    NO_REFERENCES_EN,
    REFERENCES_LIST_AR,
    REFERENCES_LIST_EN,
    STUDY_SYSTEM_PROMPT_AR,
    STUDY_SYSTEM_PROMPT_EN,
)

__all__ = [
    "STUDY_SYSTEM_PROMPT_EN",
    "STUDY_SYSTEM_PROMPT_AR",
    "REFERENCES_LIST_EN",
    "REFERENCES_LIST_AR",
    "NO_REFERENCES_EN",
    "NO_REFERENCES_AR",
    "MODEL_FAILURE_MESSAGE_EN",
    "MODEL_FAILURE_MESSAGE_AR",
]
