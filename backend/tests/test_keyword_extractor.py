import pytest

from conftest import KEYWORDS, StubCompletionClient, keywords_response
from models.schemas.keywords import ExtractedKeyword
from services.errors import ErrorCode, LLMTimeoutError
from services.keyword_extractor import (
    analyze_keywords,
    canonicalize,
    compute_match_rate,
    match_keywords,
    normalize_keywords,
    variants_for,
)


def _kw(text, importance="high", category="technology"):
    return ExtractedKeyword(text=text, category=category, importance=importance)


class TestVariants:
    def test_canonicalize_variant(self):
        assert canonicalize("JS") == "javascript"
        assert canonicalize("k8s") == "kubernetes"

    def test_canonicalize_unknown(self):
        assert canonicalize("  Terraform ") == "terraform"

    def test_variants_include_literal_spelling(self):
        assert "postgres" in variants_for("PostgreSQL")
        assert "golang" in variants_for("Go")


class TestMatchKeywords:
    def test_exact_matches_and_rate(self):
        keywords = [
            _kw("Python"),
            _kw("AWS"),
            _kw("Docker", importance="medium"),
            _kw("Kubernetes", importance="medium"),
        ]
        result = match_keywords("Built data pipelines in Python on AWS.", keywords)
        assert [m.keyword.text for m in result.matched] == ["Python", "AWS"]
        assert all(m.match_type == "exact" for m in result.matched)
        assert [k.text for k in result.missing] == ["Docker", "Kubernetes"]
        assert result.match_rate == 50
        assert result.by_importance["high"].matched == 2
        assert result.by_importance["medium"].total == 2

    def test_file_extension_is_not_a_python_match(self):
        result = match_keywords("Maintained app.py and deploy scripts", [_kw("Python")])
        assert result.matched == []

    def test_variant_match(self):
        result = match_keywords("Deployed services to k8s clusters", [_kw("Kubernetes")])
        [match] = result.matched
        assert match.match_type == "variant"
        assert match.matched_text == "k8s"

    def test_short_keyword_respects_word_boundaries(self):
        result = match_keywords("A good team player", [_kw("Go")])
        assert result.missing == [_kw("Go")]

    def test_symbol_keywords(self):
        result = match_keywords("Wrote C++ and C# services on Node.js", [_kw("C++"), _kw("C#"), _kw("Node.js")])
        assert result.match_rate == 100

    def test_fuzzy_match(self):
        result = match_keywords("Experience with Kubernetess operators", [_kw("Kubernetes")])
        [match] = result.matched
        assert match.match_type == "fuzzy"

    def test_context_is_bounded(self):
        text = "x " * 200 + "Python" + " y" * 200
        [match] = match_keywords(text, [_kw("Python")]).matched
        assert "Python" in match.context
        assert len(match.context) <= 100

    def test_empty_keywords(self):
        result = match_keywords("anything", [])
        assert result.match_rate == 0


def test_compute_match_rate():
    assert compute_match_rate(0, 0) == 0
    assert compute_match_rate(1, 2) == 33
    assert compute_match_rate(2, 1) == 67


def test_match_rate_rounds_half_up():
    # 1 of 8 is 12.5%
    assert compute_match_rate(1, 7) == 13
    assert compute_match_rate(3, 5) == 38


class TestNormalizeKeywords:
    def test_dedupes_by_canonical_form(self):
        keywords = normalize_keywords([
            {"keyword": "JavaScript", "category": "technology", "importance": "high"},
            {"keyword": "JS", "category": "technology", "importance": "high"},
        ])
        assert [k.text for k in keywords] == ["JavaScript"]

    def test_sorted_by_importance_stable(self):
        keywords = normalize_keywords([
            {"keyword": "Agile", "importance": "low"},
            {"keyword": "Python", "importance": "high"},
            {"keyword": "Docker", "importance": "medium"},
            {"keyword": "AWS", "importance": "high"},
        ])
        assert [k.text for k in keywords] == ["Python", "AWS", "Docker", "Agile"]

    def test_unknown_values_clamped(self):
        [keyword] = normalize_keywords([{"keyword": "Grit", "category": "vibe", "importance": "urgent"}])
        assert keyword.category == "skill"
        assert keyword.importance == "medium"

    def test_bounded(self, monkeypatch):
        from config import settings

        monkeypatch.setattr(settings, "max_keywords", 3)
        keywords = normalize_keywords([{"keyword": f"skill{i}"} for i in range(10)])
        assert len(keywords) == 3

    def test_junk_dropped(self):
        assert normalize_keywords([None, 5, {"keyword": ""}, "SQL"]) == [_kw("SQL", importance="medium", category="skill")]


class TestAnalyzeKeywords:
    @pytest.mark.asyncio
    async def test_success(self):
        client = StubCompletionClient({
            KEYWORDS: keywords_response(
                ("Python", "technology", "high"),
                ("AWS", "technology", "high"),
                ("Docker", "technology", "medium"),
                ("Kubernetes", "technology", "medium"),
            )
        })
        result = await analyze_keywords("Python AWS Docker Kubernetes role", "Python on AWS", client)
        assert result.is_ok
        assert result.data.match_rate == 50

    @pytest.mark.asyncio
    async def test_empty_job_text(self, stub_client):
        result = await analyze_keywords("   ", "resume", stub_client)
        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert stub_client.prompts == []

    @pytest.mark.asyncio
    async def test_empty_resume(self, stub_client):
        result = await analyze_keywords("job", "", stub_client)
        assert result.error.code == ErrorCode.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_job_text_too_long(self, stub_client):
        result = await analyze_keywords("x" * 10001, "resume", stub_client)
        assert result.error.code == ErrorCode.VALIDATION_ERROR

    @pytest.mark.asyncio
    async def test_zero_keywords_is_llm_error(self):
        client = StubCompletionClient({KEYWORDS: {"keywords": []}})
        result = await analyze_keywords("job", "resume", client)
        assert result.error.code == ErrorCode.LLM_ERROR

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        client = StubCompletionClient({KEYWORDS: "not json"})
        result = await analyze_keywords("job", "resume", client)
        assert result.error.code == ErrorCode.LLM_ERROR
        assert result.error.retryable

    @pytest.mark.asyncio
    async def test_timeout(self):
        client = StubCompletionClient({KEYWORDS: LLMTimeoutError()})
        result = await analyze_keywords("job", "resume", client)
        assert result.error.code == ErrorCode.LLM_TIMEOUT

    @pytest.mark.asyncio
    async def test_no_client(self):
        result = await analyze_keywords("job", "resume", None)
        assert result.error.code == ErrorCode.LLM_ERROR

    @pytest.mark.asyncio
    async def test_code_fenced_response(self):
        client = StubCompletionClient({
            KEYWORDS: '```json\n{"keywords": [{"keyword": "SQL", "importance": "high"}]}\n```'
        })
        result = await analyze_keywords("SQL job", "Strong SQL skills", client)
        assert result.data.match_rate == 100
