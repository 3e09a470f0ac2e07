"""
OpenAI Service - LLM implementation using the OpenAI API.

Provides file upload/release, schema-constrained extraction and free-form
section generation.
"""
from typing import Dict, Any, Optional, Tuple, Callable, TypeVar
import copy
import logging

import openai
from openai import OpenAI
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity import RetryCallState

from core.exceptions import UpstreamError
from core.llm.interfaces import LLMProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RETRYABLE_ERRORS = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
)


# ---------------------------------------------------------------------------
# Retry helpers
# ---------------------------------------------------------------------------

def _log_retry(retry_state: RetryCallState) -> None:
    """Log a warning before each retry sleep."""
    exc = retry_state.outcome.exception()
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        "Transient OpenAI error (attempt %s). Waiting %.1fs before retry. Details: %s",
        retry_state.attempt_number, wait, exc,
    )


def _wait_respecting_retry_after(retry_state: RetryCallState) -> float:
    """Honour a server-declared Retry-After on rate limits, else back off exponentially."""
    exc = retry_state.outcome.exception()
    if isinstance(exc, openai.RateLimitError):
        try:
            declared = float(exc.response.headers.get("retry-after", "0"))
        except (AttributeError, TypeError, ValueError):
            declared = 0.0
        if declared > 0:
            return min(declared, 30.0)

    return wait_exponential(multiplier=1, min=1, max=10)(retry_state)


def _llm_retry(attempts: int):
    """Return a tenacity @retry decorator for OpenAI API calls."""
    return retry(
        retry=retry_if_exception_type(_RETRYABLE_ERRORS),
        wait=_wait_respecting_retry_after,
        stop=stop_after_attempt(attempts),
        before_sleep=_log_retry,
        reraise=True,
    )


def _unwrap_schema_spec(spec: Dict[str, Any]) -> Tuple[str, bool, Dict[str, Any]]:
    """Unwrap a schema spec to extract name, strict flag, and raw JSON schema.

    Args:
        spec: Either a wrapped spec {'name': str, 'strict': bool, 'schema': {...}}
              or a raw JSON schema dict

    Returns:
        Tuple of (name, strict, raw_schema)
    """
    if isinstance(spec, dict) and "schema" in spec and "name" in spec:
        return spec.get("name", "extraction_response"), bool(spec.get("strict", False)), spec["schema"]
    return "extraction_response", False, spec


def _validated_schema(spec: Dict[str, Any]) -> Tuple[str, bool, Dict[str, Any]]:
    name, strict, raw_schema = _unwrap_schema_spec(spec)
    runtime_schema = copy.deepcopy(raw_schema)
    if runtime_schema.get("type") != "object" or "properties" not in runtime_schema:
        raise ValueError(f"Not a valid JSON Schema object. Top-level keys: {list(runtime_schema.keys())}")
    return name, strict, runtime_schema


class OpenAIService(LLMProvider):
    """
    OpenAI LLM Service.

    File inputs go through the Files API and the Responses API; inline text and
    section generation use Chat Completions. Transient errors are retried with
    tenacity, anything else surfaces as UpstreamError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model_config: Optional[Dict[str, Any]] = None,
        timeout_seconds: float = 55.0,
        max_retries: int = 3
    ):
        client_kwargs: Dict[str, Any] = {'timeout': timeout_seconds, 'max_retries': 0}
        if api_key:
            client_kwargs['api_key'] = api_key
        if base_url:
            client_kwargs['base_url'] = base_url

        self.client = OpenAI(**client_kwargs)

        self.model_config = model_config or {}
        self.extraction_model = self.model_config.get('extraction_model', 'gpt-4o')
        self.generation_model = self.model_config.get('generation_model', 'gpt-4o')
        self.extraction_temperature = self.model_config.get('extraction_temperature', 0.0)
        self.generation_temperature = self.model_config.get('generation_temperature', 0.4)
        self._retry = _llm_retry(max(1, max_retries))

    def _call(self, description: str, operation: Callable[[], T]) -> T:
        try:
            return self._retry(operation)()
        except openai.OpenAIError as e:
            logger.error(f"OpenAI {description} failed: {e}")
            raise UpstreamError(f"Completion service error during {description}: {e}", cause=e) from e

    def upload_file(self, filename: str, content: bytes, mime_type: str) -> str:
        uploaded = self._call(
            "file upload",
            lambda: self.client.files.create(file=(filename, content, mime_type), purpose="user_data")
        )
        logger.info(f"Uploaded {filename} ({len(content)} bytes) as {uploaded.id}")
        return uploaded.id

    def delete_file(self, file_id: str) -> None:
        self._call("file delete", lambda: self.client.files.delete(file_id))
        logger.debug(f"Deleted upstream file {file_id}")

    def extract_from_file(self, file_id: str, schema_spec: Dict, instructions: str) -> str:
        name, strict, schema = _validated_schema(schema_spec)

        response = self._call(
            "structured extraction",
            lambda: self.client.responses.create(
                model=self.extraction_model,
                temperature=self.extraction_temperature,
                input=[{
                    "role": "user",
                    "content": [
                        {"type": "input_file", "file_id": file_id},
                        {"type": "input_text", "text": instructions},
                    ],
                }],
                text={"format": {"type": "json_schema", "name": name, "schema": schema, "strict": strict}},
            )
        )
        return response.output_text or ""

    def extract_from_text(self, text: str, schema_spec: Dict, instructions: str) -> str:
        name, strict, schema = _validated_schema(schema_spec)

        response = self._call(
            "structured extraction",
            lambda: self.client.chat.completions.create(
                model=self.extraction_model,
                temperature=self.extraction_temperature,
                messages=[
                    {"role": "system", "content": instructions},
                    {"role": "user", "content": f"Candidate information:\n{text}"},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": name, "schema": schema, "strict": strict},
                },
            )
        )
        return self._first_message(response)

    def generate_text(self, system_prompt: str, user_message: str) -> str:
        response = self._call(
            "section generation",
            lambda: self.client.chat.completions.create(
                model=self.generation_model,
                temperature=self.generation_temperature,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
            )
        )
        return self._first_message(response)

    @staticmethod
    def _first_message(response: Any) -> str:
        try:
            return response.choices[0].message.content or ""
        except (IndexError, AttributeError):
            return ""
