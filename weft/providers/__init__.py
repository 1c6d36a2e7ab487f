"""LLM providers."""

from .base import BaseLLMProvider, RetryConfig
from .openai import OpenAIProvider
from .tokens import TokenCounter, get_token_counter

__all__ = ["BaseLLMProvider", "RetryConfig", "OpenAIProvider", "TokenCounter", "get_token_counter"]
