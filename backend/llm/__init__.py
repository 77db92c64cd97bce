"""LLM module - gateway interface for the remote generative model.

Usage:
    from llm import AnthropicGateway, ask_model, build_conversation_request

    gateway = AnthropicGateway()
    request = build_conversation_request(question, system_prompt=prompt)
    answer = await ask_model(gateway, request)

Structure:
    - base.py: Abstract interface (BaseModelGateway) and envelope extraction
    - anthropic.py: Claude implementation (AnthropicGateway)
    - router.py: Request building and dispatch
"""

from llm.anthropic import AnthropicGateway
from llm.base import (
    NO_RESPONSE_TEXT,
    BaseModelGateway,
    ModelInvocationError,
    extract_answer_text,
)
from llm.router import ask_model, build_conversation_request

__all__ = [
    "AnthropicGateway",
    "BaseModelGateway",
    "ModelInvocationError",
    "NO_RESPONSE_TEXT",
    "extract_answer_text",
    "ask_model",
    "build_conversation_request",
]
