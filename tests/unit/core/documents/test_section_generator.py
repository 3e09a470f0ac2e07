"""Tests for section content generation."""
import pytest

from core.documents.section_generator import SectionGenerator, normalize_generated_markdown, prioritize_skills
from core.documents.sections import JobDescription, SectionType
from core.exceptions import GenerationFailed, ValidationError
from core.llm.memory_provider import InMemoryLLMProvider


class TestNormalizeGeneratedMarkdown:

    def test_outer_fence_is_removed(self):
        assert normalize_generated_markdown("```markdown\n## Summary\nText\n```") == "## Summary\nText"

    def test_strong_tags_become_bold(self):
        assert normalize_generated_markdown("Cut costs <strong>20%</strong> and <b>more</b>") == (
            "Cut costs **20%** and **more**"
        )

    def test_none_is_empty(self):
        assert normalize_generated_markdown(None) == ""


class TestSectionGenerator:

    def test_ai_section_uses_template_and_profile(self, jane_profile):
        llm = InMemoryLLMProvider(generation_response="Seasoned engineer with **8 years** in data.")
        generator = SectionGenerator(llm)

        content = generator.generate(jane_profile, SectionType.SUMMARY)

        assert content == "Seasoned engineer with **8 years** in data."
        assert llm.calls == ["generate_text"]

    def test_profile_sections_do_not_call_upstream(self, jane_profile):
        llm = InMemoryLLMProvider()
        generator = SectionGenerator(llm)

        skills = generator.generate(jane_profile, SectionType.SKILLS)
        technical = generator.generate(jane_profile, SectionType.TECHNICAL_SKILLS)
        languages = generator.generate(jane_profile, SectionType.LANGUAGES)

        assert skills == "`Python`, `Spark`, `Airflow`"
        assert technical.splitlines() == ["- `Python`", "- `Spark`", "- `Airflow`"]
        assert languages == "- English\n- German"
        assert llm.calls == []

    def test_header_leaves_out_name(self, jane_profile):
        header = SectionGenerator(InMemoryLLMProvider()).generate(jane_profile, SectionType.HEADER)

        assert "### Senior Data Engineer" in header
        assert "**8 years** of experience | Zurich" in header
        assert "Jane" not in header

    def test_custom_sections_cannot_be_generated(self, jane_profile):
        generator = SectionGenerator(InMemoryLLMProvider())

        assert not generator.can_generate(SectionType.CUSTOM)
        with pytest.raises(ValidationError):
            generator.generate(jane_profile, SectionType.CUSTOM)

    def test_upstream_error_is_generation_failure(self, jane_profile):
        generator = SectionGenerator(InMemoryLLMProvider(fail_on={"generate_text"}))

        with pytest.raises(GenerationFailed):
            generator.generate(jane_profile, SectionType.EXPERIENCE)

    def test_empty_output_is_generation_failure(self, jane_profile):
        generator = SectionGenerator(InMemoryLLMProvider(generation_response="```\n\n```"))

        with pytest.raises(GenerationFailed, match="empty"):
            generator.generate(jane_profile, SectionType.CORE_COMPETENCIES)

    @pytest.mark.parametrize("section_type", [
        SectionType.SUMMARY,
        SectionType.EXPERIENCE,
        SectionType.EXPERIENCE_SUMMARY,
        SectionType.CORE_COMPETENCIES,
        SectionType.TECHNICAL_EXPERTISE,
        SectionType.FUNCTIONAL_SKILLS,
    ])
    def test_ai_section_types(self, section_type):
        assert SectionGenerator.is_ai_generated(section_type)


class TestTargetRoleTailoring:

    @pytest.fixture
    def data_lead_role(self):
        return JobDescription(
            title="Lead Data Engineer",
            company="Acme Bank",
            requirements=["3+ years of Spark in production"],
            skills=["Airflow", "Kubernetes"],
        )

    def test_ai_prompt_carries_role_and_client(self, jane_profile, data_lead_role):
        llm = InMemoryLLMProvider(generation_response="Tailored summary.")

        SectionGenerator(llm).generate(jane_profile, SectionType.SUMMARY, data_lead_role, client_name="Helvetia Partners")

        prompt = llm.prompts[0]
        assert "Target role:" in prompt
        assert '"title": "Lead Data Engineer"' in prompt
        assert '"client": "Helvetia Partners"' in prompt
        assert "Kubernetes" in prompt

    def test_client_name_alone_tailors_prompt(self, jane_profile):
        llm = InMemoryLLMProvider(generation_response="Tailored summary.")

        SectionGenerator(llm).generate(jane_profile, SectionType.CORE_COMPETENCIES, client_name="Helvetia Partners")

        assert '"client": "Helvetia Partners"' in llm.prompts[0]

    def test_untargeted_prompt_has_no_role(self, jane_profile):
        llm = InMemoryLLMProvider(generation_response="Summary.")

        SectionGenerator(llm).generate(jane_profile, SectionType.SUMMARY)

        assert "Target role:" not in llm.prompts[0]

    def test_skills_the_role_asks_for_come_first(self, jane_profile, data_lead_role):
        generator = SectionGenerator(InMemoryLLMProvider())

        skills = generator.generate(jane_profile, SectionType.SKILLS, data_lead_role)
        technical = generator.generate(jane_profile, SectionType.TECHNICAL_SKILLS, data_lead_role)

        assert skills == "`Spark`, `Airflow`, `Python`"
        assert technical.splitlines() == ["- `Spark`", "- `Airflow`", "- `Python`"]
        assert jane_profile.skills == ["Python", "Spark", "Airflow"]

    def test_symbol_suffixed_skills_match_exactly(self):
        role = JobDescription(skills=["C#"], requirements=["Experience with C++ toolchains"])

        assert prioritize_skills(["C", "Go", "C++", "C#"], role) == ["C++", "C#", "C", "Go"]

    def test_role_without_keywords_keeps_order(self):
        assert prioritize_skills(["Go", "Rust"], JobDescription(text="Backend role")) == ["Go", "Rust"]
