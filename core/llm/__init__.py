"""LLM Module - completion services and interfaces."""
from core.llm.interfaces import LLMProvider
from core.llm.openai_service import OpenAIService
from core.llm.memory_provider import InMemoryLLMProvider

__all__ = ['LLMProvider', 'OpenAIService', 'InMemoryLLMProvider']
