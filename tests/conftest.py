"""
Pytest configuration and fixtures.

Every fixture wires real services over in-memory SQLite and the in-memory
LLM, object store and search index, so no test touches the network.
"""

import pytest

from core.app_context import AppContext
from core.context import RequestContext
from core.llm.memory_provider import InMemoryLLMProvider
from core.search.memory_index import InMemorySearchIndex
from core.storage.memory_store import InMemoryObjectStore
from database.database import init_database
from etl.resume.models import CandidateProfile
from tests import TEST_USER, memory_config


@pytest.fixture
def session_factory():
    """Fresh in-memory database with all tables created."""
    return init_database("sqlite://", create_tables=True)


@pytest.fixture
def app_context(session_factory):
    return AppContext.build(memory_config(), session_factory=session_factory)


@pytest.fixture
def llm(app_context) -> InMemoryLLMProvider:
    return app_context.llm


@pytest.fixture
def object_store(app_context) -> InMemoryObjectStore:
    return app_context.object_store


@pytest.fixture
def search_index(app_context) -> InMemorySearchIndex:
    return app_context.search_index


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(user_id=TEST_USER, request_id="req-1")


@pytest.fixture
def jane_profile() -> CandidateProfile:
    return CandidateProfile(
        full_name="Jane Doe",
        current_title="Senior Data Engineer",
        email="jane.doe@example.com",
        phone="+41 79 000 00 00",
        location="Zurich",
        years_of_experience=8,
        skills=["Python", "Spark", "Airflow"],
        experience=[{
            "company": "Acme Analytics",
            "title": "Data Engineer",
            "startDate": "2016-01",
            "endDate": "Present",
            "responsibilities": "Built streaming pipelines with a 30% improvement in throughput",
        }],
        education=["MSc Computer Science, ETH Zurich"],
        languages=["English", "German"],
        summary="Data engineer focused on reliable pipelines.",
    )


@pytest.fixture
def saved_candidate(app_context, ctx, jane_profile):
    """Jane Doe stored through the candidate service."""
    return app_context.candidates.create(ctx, jane_profile)
