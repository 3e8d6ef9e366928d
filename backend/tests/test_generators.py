import pytest

from conftest import (
    ACTION_VERB,
    BULLET_REWRITE,
    FORMAT_REVIEW,
    QUANTIFICATION,
    SAMPLE_JD,
    SAMPLE_RESUME,
    TRANSFERABLE,
    StubCompletionClient,
)
from models.schemas.keywords import ExtractedKeyword, KeywordAnalysisResult, KeywordMatch
from models.schemas.resume import ResumeItem
from services.errors import LLMError, LLMTimeoutError
from services.generators.action_verbs import leading_verb, starts_with_strong_verb
from services.generators.base import GenerationContext
from services.generators.bullets import (
    ActionVerbGenerator,
    BulletRewriteGenerator,
    QuantificationGenerator,
)
from services.generators.format_removal import (
    FormatRemovalGenerator,
    estimate_pages,
    page_length_suggestion,
    sensitive_field_suggestions,
)
from services.generators.runner import generate_suggestions
from services.generators.skills import (
    SkillExpansionGenerator,
    TransferableSkillsGenerator,
    expansion_for,
)
from services.section_parser import parse_resume


def _context(**overrides) -> GenerationContext:
    analysis = KeywordAnalysisResult(
        matched=[KeywordMatch(keyword=ExtractedKeyword(text="Python"), matched_text="Python")],
        missing=[ExtractedKeyword(text="Kubernetes")],
        match_rate=50,
    )
    values = {
        "job_text": SAMPLE_JD,
        "resume_text": SAMPLE_RESUME,
        "keyword_analysis": analysis,
        "candidate_type": "fulltime",
    }
    values.update(overrides)
    return GenerationContext(**values)


ITEMS = [
    ResumeItem(
        heading="Engineer | Acme",
        bullets=[
            "Responsible for the billing service",
            "Led migration of 40 services to Python and Kubernetes",
        ],
    ),
    ResumeItem(heading="Intern | Beta", bullets=["Helped with dashboards"]),
]


class TestActionVerbs:
    def test_leading_verb(self):
        assert leading_verb("  Built a thing") == "built"

    def test_strong_verbs(self):
        assert starts_with_strong_verb("Led the team")
        assert not starts_with_strong_verb("Helped the team")


def test_context_targets_missing_keywords_first():
    assert _context().target_keywords == ["Kubernetes", "Python"]


class TestBulletRewriteGenerator:
    @pytest.mark.asyncio
    async def test_skips_already_strong_bullets(self):
        client = StubCompletionClient()
        await BulletRewriteGenerator(client).generate("experience", ITEMS, _context())
        [prompt] = client.calls_for(BULLET_REWRITE)
        assert "Responsible for the billing service" in prompt
        assert "Helped with dashboards" in prompt
        assert "Led migration of 40 services" not in prompt

    @pytest.mark.asyncio
    async def test_maps_indices_back_to_items(self):
        client = StubCompletionClient({
            BULLET_REWRITE: {"suggestions": [
                {"index": 1, "suggested": "Built internal dashboards in React", "reasoning": "stronger"},
                {"index": 7, "suggested": "out of range"},
                {"index": 0, "suggested": "Responsible for the billing service"},
            ]}
        })
        suggestions = await BulletRewriteGenerator(client).generate("experience", ITEMS, _context())
        [s] = suggestions
        assert s.item_index == 1
        assert s.original_text == "Helped with dashboards"
        assert s.suggestion_type == "bullet_rewrite"
        assert s.section == "experience"
        assert s.status == "pending"

    @pytest.mark.asyncio
    async def test_no_client_raises(self):
        with pytest.raises(LLMError):
            await BulletRewriteGenerator(None).generate("experience", ITEMS, _context())

    @pytest.mark.asyncio
    async def test_bad_shape_raises(self):
        client = StubCompletionClient({BULLET_REWRITE: {"suggestions": "nope"}})
        with pytest.raises(LLMError):
            await BulletRewriteGenerator(client).generate("experience", ITEMS, _context())


class TestActionVerbGenerator:
    @pytest.mark.asyncio
    async def test_only_weak_openers_reach_model(self):
        client = StubCompletionClient({
            ACTION_VERB: {"suggestions": [
                {"index": 0, "suggested": "Owned the billing service",
                 "alternatives": ["Managed", "Ran"], "reasoning": "ownership"},
            ]}
        })
        [s] = await ActionVerbGenerator(client).generate("experience", ITEMS, _context())
        [prompt] = client.calls_for(ACTION_VERB)
        assert "Led migration" not in prompt
        assert s.original_text == "Responsible for the billing service"
        assert "Alternatives: Managed, Ran." in s.reasoning

    @pytest.mark.asyncio
    async def test_all_strong_makes_no_call(self):
        client = StubCompletionClient()
        items = [ResumeItem(bullets=["Built the platform", "Designed the schema"])]
        assert await ActionVerbGenerator(client).generate("projects", items, _context()) == []
        assert client.prompts == []


class TestQuantificationGenerator:
    @pytest.mark.asyncio
    async def test_skips_bullets_with_metrics(self):
        client = StubCompletionClient()
        await QuantificationGenerator(client).generate("experience", ITEMS, _context())
        [prompt] = client.calls_for(QUANTIFICATION)
        assert "Led migration of 40 services" not in prompt

    @pytest.mark.asyncio
    async def test_requires_placeholder_and_no_invented_numbers(self):
        client = StubCompletionClient({
            QUANTIFICATION: {"suggestions": [
                {"index": 0, "suggested": "Responsible for the billing service handling [X] invoices monthly",
                 "prompt": "How many invoices?"},
                {"index": 1, "suggested": "Helped with 12 dashboards used by [X] analysts"},
            ]}
        })
        [s] = await QuantificationGenerator(client).generate("experience", ITEMS, _context())
        assert "[X]" in s.suggested_text
        assert s.reasoning.endswith("How many invoices?")

    @pytest.mark.asyncio
    async def test_placeholder_missing_dropped(self):
        client = StubCompletionClient({
            QUANTIFICATION: {"suggestions": [{"index": 0, "suggested": "Ran the billing service well"}]}
        })
        assert await QuantificationGenerator(client).generate("experience", ITEMS, _context()) == []


class TestSkillExpansionGenerator:
    def test_expansion_aliases(self):
        assert expansion_for("K8s").family == "Kubernetes"
        assert expansion_for("Cobol") is None

    @pytest.mark.asyncio
    async def test_expands_known_skills_without_model(self):
        items = [ResumeItem(heading="Python"), ResumeItem(heading="Cobol"), ResumeItem(heading="Docker")]
        suggestions = await SkillExpansionGenerator(None).generate(
            "skills", items, _context(job_text="We use Kubernetes and FastAPI")
        )
        by_skill = {s.original_text: s for s in suggestions}
        assert set(by_skill) == {"Python", "Docker"}
        assert by_skill["Python"].suggested_text.startswith("Python (FastAPI, ")
        assert by_skill["Docker"].suggested_text.startswith("Docker (Kubernetes, ")
        assert by_skill["Docker"].item_index == 2

    @pytest.mark.asyncio
    async def test_skips_already_expanded_and_listed(self):
        items = [ResumeItem(heading="Python (pandas)"), ResumeItem(heading="Kubernetes"),
                 ResumeItem(heading="Helm"), ResumeItem(heading="Docker"), ResumeItem(heading="Microservices")]
        suggestions = await SkillExpansionGenerator(None).generate("skills", items, _context())
        kubernetes = [s for s in suggestions if s.original_text == "Kubernetes"]
        assert kubernetes == []
        assert all(s.original_text != "Python (pandas)" for s in suggestions)


class TestTransferableSkillsGenerator:
    @pytest.mark.asyncio
    async def test_maps_entry(self):
        items = parse_resume(SAMPLE_RESUME).items("education")
        client = StubCompletionClient({
            TRANSFERABLE: {"suggestions": [{
                "index": 0,
                "original": "Teaching assistant for Data Structures",
                "suggested": "Mentored 60 students in data structures as a teaching assistant",
                "mapped_skills": ["technical mentorship"],
                "reasoning": "mentorship",
            }]}
        })
        [s] = await TransferableSkillsGenerator(client).generate("education", items, _context())
        assert s.suggestion_type == "skill_mapping"
        assert s.original_text == "Teaching assistant for Data Structures"
        assert "technical mentorship" in s.reasoning

    @pytest.mark.asyncio
    async def test_paraphrased_original_falls_back_to_first_line(self):
        items = parse_resume(SAMPLE_RESUME).items("education")
        client = StubCompletionClient({
            TRANSFERABLE: {"suggestions": [
                {"index": 0, "original": "TA work", "suggested": "B.S. Computer Science, algorithms focus"},
            ]}
        })
        [s] = await TransferableSkillsGenerator(client).generate("education", items, _context())
        assert s.original_text.startswith("B.S. Computer Science")

    @pytest.mark.asyncio
    async def test_career_changer_guidance(self):
        client = StubCompletionClient()
        await TransferableSkillsGenerator(client).generate(
            "education", ITEMS, _context(candidate_type="career_changer")
        )
        [prompt] = client.calls_for(TRANSFERABLE)
        assert "For career changers" in prompt


class TestFormatRemoval:
    def test_sensitive_fields(self):
        text = "Jane Doe\nDate of Birth: 01/02/1990\nMarital Status: Single\nReferences available upon request"
        suggestions = sensitive_field_suggestions(text)
        assert [s.item_index for s in suggestions] == [1, 2, 3]
        assert all(s.suggestion_type == "removal" and s.suggested_text == "" for s in suggestions)

    def test_page_length(self):
        long_text = "word " * 1200
        assert estimate_pages(long_text) == 3
        assert page_length_suggestion(long_text, 3).suggestion_type == "format"
        assert page_length_suggestion(long_text, 15) is None
        assert page_length_suggestion("short", 1) is None

    @pytest.mark.asyncio
    async def test_model_lines_must_exist(self):
        resume = SAMPLE_RESUME + "\nObjective: To get a job\n"
        client = StubCompletionClient({
            FORMAT_REVIEW: {"suggestions": [
                {"type": "removal", "original": "Objective: To get a job", "suggested": "", "reasoning": "dated"},
                {"type": "format", "original": "A line that is not there", "suggested": "x"},
                {"type": "bogus", "original": "Skills", "suggested": "y"},
            ]}
        })
        suggestions = await FormatRemovalGenerator(client).generate(
            "format", [], _context(resume_text=resume)
        )
        [s] = suggestions
        assert s.original_text == "Objective: To get a job"
        assert s.section == "format"
        assert resume.split("\n")[s.item_index].strip() == s.original_text


class TestRunner:
    @pytest.mark.asyncio
    async def test_all_sections(self):
        resume = parse_resume(SAMPLE_RESUME)
        client = StubCompletionClient()
        result = await generate_suggestions(resume, _context(), client)
        assert not result.is_partial
        # projects has no items in the sample resume
        assert set(result.suggestions) == {"experience", "education", "skills", "format"}
        assert result.suggestions["skills"]

    @pytest.mark.asyncio
    async def test_failed_section_is_isolated(self):
        resume = parse_resume(SAMPLE_RESUME)
        client = StubCompletionClient({QUANTIFICATION: LLMTimeoutError()})
        result = await generate_suggestions(resume, _context(), client)
        assert result.is_partial
        [error] = result.errors
        assert error.section == "experience"
        assert error.code == "LLM_TIMEOUT"
        assert "experience" not in result.suggestions
        assert "skills" in result.suggestions

    @pytest.mark.asyncio
    async def test_unexpected_error_reported_as_llm_error(self):
        def explode(prompt):
            raise KeyError("boom")

        resume = parse_resume(SAMPLE_RESUME)
        client = StubCompletionClient({TRANSFERABLE: explode})
        result = await generate_suggestions(resume, _context(), client, sections=["education", "skills"])
        [error] = result.errors
        assert error.section == "education"
        assert error.code == "LLM_ERROR"

    @pytest.mark.asyncio
    async def test_section_filter(self):
        resume = parse_resume(SAMPLE_RESUME)
        result = await generate_suggestions(resume, _context(), StubCompletionClient(), sections=["skills"])
        assert list(result.suggestions) == ["skills"]
