"""
In-memory LLM provider for offline runs and deterministic tests.
"""
import itertools
import json
import logging
import re
from typing import Dict, List, Optional, Set

from core.exceptions import UpstreamError
from core.llm.interfaces import LLMProvider

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")


class InMemoryLLMProvider(LLMProvider):
    """
    Scriptable stand-in for a completion service.

    Extraction returns ``extraction_response`` verbatim when set, otherwise a
    naive profile built from the first non-empty line of the text. Uploaded
    handles are tracked so tests can check that every handle is released.
    """

    def __init__(
        self,
        extraction_response: Optional[str] = None,
        generation_response: Optional[str] = None,
        fail_on: Optional[Set[str]] = None
    ):
        self.extraction_response = extraction_response
        self.generation_response = generation_response
        self.fail_on = set(fail_on or ())
        self.files: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.calls: List[str] = []
        self.prompts: List[str] = []
        self._ids = itertools.count(1)

    def _record(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise UpstreamError(f"Simulated failure during {operation}")

    def upload_file(self, filename: str, content: bytes, mime_type: str) -> str:
        self._record("upload_file")
        file_id = f"file-{next(self._ids)}"
        self.files[file_id] = content
        return file_id

    def delete_file(self, file_id: str) -> None:
        self._record("delete_file")
        self.files.pop(file_id, None)
        self.deleted.append(file_id)

    def extract_from_file(self, file_id: str, schema_spec: Dict, instructions: str) -> str:
        self._record("extract_from_file")
        if self.extraction_response is not None:
            return self.extraction_response
        text = self.files.get(file_id, b"").decode("utf-8", errors="ignore")
        return json.dumps(self._naive_profile(text))

    def extract_from_text(self, text: str, schema_spec: Dict, instructions: str) -> str:
        self._record("extract_from_text")
        if self.extraction_response is not None:
            return self.extraction_response
        return json.dumps(self._naive_profile(text))

    def generate_text(self, system_prompt: str, user_message: str) -> str:
        self._record("generate_text")
        self.prompts.append(user_message)
        if self.generation_response is not None:
            return self.generation_response
        return f"## GENERATED\n\n{user_message.splitlines()[0] if user_message else ''}"

    @staticmethod
    def _naive_profile(text: str) -> Dict:
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        email = _EMAIL_RE.search(text)
        return {
            "fullName": lines[0] if lines else "",
            "currentTitle": lines[1] if len(lines) > 1 else "",
            "email": email.group() if email else None,
            "summary": " ".join(lines[2:5]),
        }
