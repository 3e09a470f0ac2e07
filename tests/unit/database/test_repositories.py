#!/usr/bin/env python3
"""
Unit tests for the recruitment repositories.

The session-level tests use a mocked Session; the query tests run against
in-memory SQLite.
"""

import unittest
from unittest.mock import MagicMock

from database.database import init_database
from database.models import Candidate
from database.repositories.candidate import CandidateRepository
from database.uow import recruitment_uow


class TestCandidateRepositoryWrites(unittest.TestCase):
    """Create/update with a mocked session."""

    def setUp(self):
        self.mock_db = MagicMock()
        self.repo = CandidateRepository(self.mock_db)

    def test_create_keeps_only_profile_fields(self):
        result = self.repo.create(
            {"full_name": "Jane Doe", "email": "jane@example.com", "unknown": "dropped"},
            created_by="recruiter"
        )

        self.assertIsInstance(result, Candidate)
        self.assertEqual(result.full_name, "Jane Doe")
        self.assertEqual(result.created_by, "recruiter")
        self.assertFalse(hasattr(result, "unknown"))
        self.mock_db.add.assert_called_once_with(result)
        self.mock_db.flush.assert_called_once()

    def test_archive_sets_status_and_timestamp(self):
        candidate = Candidate(full_name="Jane Doe", status="active")

        self.repo.archive(candidate)

        self.assertTrue(candidate.is_archived)
        self.assertIsNotNone(candidate.archived_at)


class TestRepositoryQueries(unittest.TestCase):
    """Queries against in-memory SQLite."""

    def setUp(self):
        self.session_factory = init_database("sqlite://", create_tables=True)

    def _add_candidates(self, count):
        with recruitment_uow(self.session_factory) as repo:
            for i in range(count):
                repo.candidates.create({"full_name": f"Candidate {i}", "email": f"c{i}@example.com"})

    def test_get_by_email_ignores_case(self):
        self._add_candidates(1)

        with recruitment_uow(self.session_factory) as repo:
            found = repo.candidates.get_by_email("C0@Example.COM")
            self.assertIsNotNone(found)
            self.assertEqual(found.full_name, "Candidate 0")

    def test_iter_active_batches_skip_archived(self):
        self._add_candidates(5)
        with recruitment_uow(self.session_factory) as repo:
            repo.candidates.archive(repo.candidates.get_by_email("c2@example.com"))

        with recruitment_uow(self.session_factory) as repo:
            batches = list(repo.candidates.iter_active(batch_size=2))
            self.assertEqual([len(b) for b in batches], [2, 2])
            names = {c.full_name for batch in batches for c in batch}
            self.assertNotIn("Candidate 2", names)
            self.assertEqual(repo.candidates.count_active(), 4)

    def test_uow_rolls_back_on_error(self):
        with self.assertRaises(RuntimeError):
            with recruitment_uow(self.session_factory) as repo:
                repo.candidates.create({"full_name": "Ghost", "email": "ghost@example.com"})
                raise RuntimeError("boom")

        with recruitment_uow(self.session_factory) as repo:
            self.assertIsNone(repo.candidates.get_by_email("ghost@example.com"))

    def test_job_archive_excluded_from_listing(self):
        with recruitment_uow(self.session_factory) as repo:
            job = repo.jobs.create({"title": "Analyst", "company": "Acme"})
            repo.jobs.create({"title": "Engineer", "company": "Acme"})
            repo.jobs.archive(job)

        with recruitment_uow(self.session_factory) as repo:
            titles = [j.title for j in repo.jobs.list_active()]
            self.assertEqual(titles, ["Engineer"])


if __name__ == '__main__':
    unittest.main()
