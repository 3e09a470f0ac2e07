"""Explicit per-request caller identity, passed into every pipeline call."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    user_id: str
    request_id: Optional[str] = None
