#!/usr/bin/env python3
"""
Test résumé models in etl/resume/models.py.
"""
import unittest
from datetime import date
from unittest.mock import patch

from etl.resume.models import CandidateProfile, ExperienceEntry, RawDocument


class TestRawDocument(unittest.TestCase):

    def test_size_is_content_length(self):
        document = RawDocument(content=b"12345", mime_type="text/plain", filename="cv.txt")
        self.assertEqual(document.size, 5)


class TestExperienceEntry(unittest.TestCase):

    def test_responsibility_list_is_joined(self):
        entry = ExperienceEntry(responsibilities=["Led team", "", "Shipped v2"])
        self.assertEqual(entry.responsibilities, "Led team\nShipped v2")

    def test_present_marks_current_role(self):
        self.assertTrue(ExperienceEntry(end_date="Present").is_current)
        self.assertTrue(ExperienceEntry(end_date=None).is_current)
        self.assertFalse(ExperienceEntry(end_date="2020-05").is_current)


class TestCandidateProfile(unittest.TestCase):

    def test_accepts_camel_case_payload(self):
        profile = CandidateProfile.model_validate({
            "fullName": "Jane Doe",
            "currentTitle": None,
            "yearsOfExperience": "8+ years",
            "skills": "Python, SQL, ",
        })

        self.assertEqual(profile.full_name, "Jane Doe")
        self.assertEqual(profile.current_title, "")
        self.assertEqual(profile.years_of_experience, 8.0)
        self.assertEqual(profile.skills, ["Python", "SQL"])

    def test_structured_education_entries_are_flattened(self):
        profile = CandidateProfile(
            full_name="Jane Doe",
            education=[{"degree": "MSc", "institution": "ETH", "year": None}],
        )
        self.assertEqual(profile.education, ["MSc, ETH"])

    def test_experience_years_from_dates(self):
        profile = CandidateProfile(
            full_name="Jane Doe",
            experience=[
                {"company": "A", "startDate": "2015-01", "endDate": "2017-07"},
                {"company": "B", "startDate": "Jan 2018", "endDate": "2019"},
            ],
        )

        # 30 months + 12 months
        self.assertEqual(profile.calculate_experience_from_dates(), 3.5)

    def test_current_role_runs_to_today(self):
        profile = CandidateProfile(
            full_name="Jane Doe",
            experience=[{"company": "A", "startDate": "2020-01", "endDate": "Present"}],
        )

        with patch("etl.resume.models.date") as mock_date:
            mock_date.today.return_value = date(2022, 1, 1)
            self.assertEqual(profile.calculate_experience_from_dates(), 2.0)

    def test_explicit_years_are_kept(self):
        profile = CandidateProfile(
            full_name="Jane Doe",
            years_of_experience=12,
            experience=[{"company": "A", "startDate": "2020-01", "endDate": "2021-01"}],
        )
        self.assertIs(profile.with_computed_experience(), profile)

    def test_payload_is_camel_case(self):
        payload = CandidateProfile(full_name="Jane Doe").to_payload()

        self.assertEqual(payload["fullName"], "Jane Doe")
        self.assertIn("yearsOfExperience", payload)
        self.assertNotIn("full_name", payload)


if __name__ == "__main__":
    unittest.main()
