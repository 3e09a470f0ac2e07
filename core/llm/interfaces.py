"""
LLM Provider Interface - Abstract base for completion service providers.

This module defines the narrow capability set the pipeline needs from a
text/vision completion service (OpenAI, in-memory fake, ...).
"""
from abc import ABC, abstractmethod
from typing import Dict


class LLMProvider(ABC):
    """
    Abstract Interface for completion service providers.

    Methods return raw model text; parsing and validation belong to callers.
    Implementations raise core.exceptions.UpstreamError on service failure.
    """

    @abstractmethod
    def upload_file(self, filename: str, content: bytes, mime_type: str) -> str:
        """
        Upload a document and return a short-lived upstream handle.
        """
        pass

    @abstractmethod
    def delete_file(self, file_id: str) -> None:
        """
        Release a handle returned by upload_file.
        """
        pass

    @abstractmethod
    def extract_from_file(self, file_id: str, schema_spec: Dict, instructions: str) -> str:
        """
        Run one structured-extraction request against an uploaded file.

        Args:
            file_id: Handle returned by upload_file
            schema_spec: Wrapped spec {'name', 'strict', 'schema'} or raw JSON schema
            instructions: Extraction prompt
        """
        pass

    @abstractmethod
    def extract_from_text(self, text: str, schema_spec: Dict, instructions: str) -> str:
        """
        Run one structured-extraction request against inline text.
        """
        pass

    @abstractmethod
    def generate_text(self, system_prompt: str, user_message: str) -> str:
        """
        Free-form completion used for section generation.
        """
        pass
