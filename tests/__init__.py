#!/usr/bin/env python3
"""
Test suite for the recruitment document pipeline.

All tests run offline against in-memory SQLite and the in-memory
completion, storage and search providers:

    python -m pytest tests/ -v
"""

from core.config_loader import AppConfig

TEST_TOKEN = "test-token"
TEST_USER = "recruiter@example.com"


def memory_config() -> AppConfig:
    """Configuration selecting every in-memory provider."""
    return AppConfig(**{
        "database": {"url": "sqlite://", "create_tables": True},
        "auth": {"api_tokens": {TEST_TOKEN: TEST_USER}},
        "llm": {"provider": "memory"},
        "storage": {"provider": "memory"},
        "search": {"provider": "memory"},
        "rendering": {"pdf_engine": "none"},
    })
